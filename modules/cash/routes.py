"""
Cash Module - API Routes
==========================
Cash hand-overs and withdrawals between role holders.

Endpoints:
  POST /api/cash/transfers   - Record a transfer (destination chosen by the caller)
  GET  /api/cash/transfers   - Transfer log (all for financial roles, else own)
  GET  /api/cash/holdings    - Derived cash held by an actor
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from config.database import get_db
from common.exceptions import LedgerError, raise_http
from modules.auth.deps import require_actor
from modules.auth.permissions import Actor, ROLE_ACCOUNTANT
from modules.cash.models import TransferKind
from modules.cash.service import cash_service

router = APIRouter(prefix="/api/cash", tags=["cash"])


class TransferRequest(BaseModel):
    to_actor_id: int = Field(..., gt=0)
    to_actor_name: str = Field(..., min_length=1, max_length=100)
    to_actor_role: str = Field(ROLE_ACCOUNTANT)
    amount: int
    kind: str = Field(TransferKind.CASHIER_TO_ACCOUNTANT.value)


@router.post("/transfers", status_code=201)
async def record_transfer(
    body: TransferRequest,
    db: Session = Depends(get_db),
    actor=Depends(require_actor),
):
    if body.kind == TransferKind.WITHDRAWAL.value and not actor.has_permission("withdrawMoney"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission required: Withdraw money")

    destination = Actor(id=body.to_actor_id, name=body.to_actor_name.strip(), role=body.to_actor_role)
    try:
        transfer = cash_service.record_transfer(db, actor, destination, body.amount, body.kind)
    except LedgerError as e:
        raise_http(e)
    return {"success": True, "transfer": transfer.model_dump(mode="json")}


@router.get("/transfers")
async def list_transfers(db: Session = Depends(get_db), actor=Depends(require_actor)):
    actor_id = None if actor.has_permission("viewFinancialDashboards") else actor.id
    transfers = cash_service.list_transfers(db, actor_id=actor_id)
    return {"transfers": [t.model_dump(mode="json") for t in transfers]}


@router.get("/holdings")
async def get_holdings(
    actor_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    actor=Depends(require_actor),
):
    target = actor_id if actor_id is not None else actor.id
    if target != actor.id and not actor.has_permission("viewFinancialDashboards"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission required: View financial dashboards")
    return {"holdings": cash_service.cash_holdings(db, target).model_dump()}
