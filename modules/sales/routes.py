"""
Sales Module - API Routes
===========================
Checkout and the transaction log.

Endpoints:
  POST /api/checkout                 - Settle the caller's cart and clear it in one commit
  GET  /api/transactions             - Transactions (all, or own sales for cashiers)
  GET  /api/transactions/{txn_id}    - One transaction (receipt data)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from config.database import get_db
from common.exceptions import LedgerError, raise_http
from modules.auth.deps import require_actor, require_permission
from modules.cart.service import cart_service
from modules.sales.service import ledger_service

logger = logging.getLogger("ledgerpos.api")

router = APIRouter(prefix="/api", tags=["sales"])


class CheckoutRequest(BaseModel):
    paid: int
    note: Optional[str] = Field(None, max_length=500)
    allow_unassigned_loan: bool = False


@router.post("/checkout")
async def checkout(
    body: CheckoutRequest,
    db: Session = Depends(get_db),
    actor=Depends(require_permission("createSales")),
):
    """Settle the cart. A loan with no customer returns 409 unless explicitly allowed."""
    cart = cart_service.get_or_create_cart(db, actor.id)
    try:
        txn = ledger_service.settle(
            db, cart, body.paid, actor,
            note=body.note,
            allow_unassigned_loan=body.allow_unassigned_loan,
            clear_cart=True,
        )
    except LedgerError as e:
        db.rollback()
        raise_http(e)

    return {"success": True, "transaction": txn.model_dump(mode="json")}


@router.get("/transactions")
async def list_transactions(
    limit: Optional[int] = Query(None, ge=1, le=500),
    customer_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    actor=Depends(require_actor),
):
    if actor.has_permission("viewAllSales"):
        cashier_id = None
    elif actor.has_permission("viewOwnSales"):
        cashier_id = actor.id
    else:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission required: View own sales")

    txns = ledger_service.list_transactions(db, cashier_id=cashier_id, customer_id=customer_id, limit=limit)
    return {"transactions": [t.model_dump(mode="json") for t in txns]}


@router.get("/transactions/{txn_id}")
async def get_transaction(
    txn_id: int,
    db: Session = Depends(get_db),
    actor=Depends(require_actor),
):
    try:
        txn = ledger_service.get_transaction(db, txn_id)
    except LedgerError as e:
        raise_http(e)

    if not actor.has_permission("viewAllSales") and txn.cashier_id != actor.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission required: View all sales")
    return {"transaction": txn.model_dump(mode="json")}
