"""
Customer Module - API Routes
==============================
Customer list, creation and contact edits. Balances are read-only here;
they only move through checkout.

Endpoints:
  GET   /api/customers                - List / search (name or phone)
  POST  /api/customers                - Create (optional opening balance)
  GET   /api/customers/{customer_id}  - Detail
  PATCH /api/customers/{customer_id}  - Edit contact fields
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from config.database import get_db
from common.exceptions import LedgerError, raise_http
from modules.auth.deps import require_permission
from modules.customer.service import customer_service

router = APIRouter(prefix="/api/customers", tags=["customers"])


# ==========================================
# Schemas
# ==========================================

class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    balance: int = 0


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=100)


def customer_dict(c, show_balance: bool = True) -> dict:
    data = {
        "id": c.id,
        "name": c.name,
        "phone": c.phone,
        "email": c.email,
        "created_at": c.created_at.isoformat() if c.created_at else None,
    }
    if show_balance:
        data["balance"] = c.balance
        data["total_purchases"] = c.total_purchases
    return data


# ==========================================
# Routes
# ==========================================

@router.get("")
async def list_customers(
    q: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    actor=Depends(require_permission("viewCustomerList")),
):
    show_balance = actor.has_permission("viewCustomerBalances")
    customers = customer_service.list_customers(db, search=q)
    return {"customers": [customer_dict(c, show_balance) for c in customers]}


@router.post("", status_code=201)
async def create_customer(
    body: CustomerCreate,
    db: Session = Depends(get_db),
    actor=Depends(require_permission("createCustomers")),
):
    customer = customer_service.create(db, body.name, body.phone, email=body.email, balance=body.balance)
    db.commit()
    db.refresh(customer)
    return {"customer": customer_dict(customer, actor.has_permission("viewCustomerBalances"))}


@router.get("/{customer_id}")
async def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    actor=Depends(require_permission("viewCustomerList")),
):
    try:
        customer = customer_service.get(db, customer_id)
    except LedgerError as e:
        raise_http(e)
    return {"customer": customer_dict(customer, actor.has_permission("viewCustomerBalances"))}


@router.patch("/{customer_id}")
async def update_customer(
    customer_id: int,
    body: CustomerUpdate,
    db: Session = Depends(get_db),
    actor=Depends(require_permission("editCustomers")),
):
    try:
        customer = customer_service.update_profile(
            db, customer_id, name=body.name, phone=body.phone, email=body.email,
        )
    except LedgerError as e:
        db.rollback()
        raise_http(e)
    db.commit()
    db.refresh(customer)
    return {"customer": customer_dict(customer, actor.has_permission("viewCustomerBalances"))}
