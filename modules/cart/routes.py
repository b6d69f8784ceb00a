"""
Cart Module - API Routes
==========================
The calling cashier's checkout cart.

Endpoints:
  GET    /api/cart                                - Lines + totals
  POST   /api/cart/items                          - Add one unit of a product
  DELETE /api/cart/items/{product_id}             - Remove a line
  PUT    /api/cart/items/{product_id}/quantity    - Set quantity (<= 0 removes)
  PUT    /api/cart/items/{product_id}/discount    - Set line discount
  PUT    /api/cart/customer                       - Bind / unbind customer
  DELETE /api/cart                                - Cancel: clear lines + customer
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from config.database import get_db
from common.exceptions import LedgerError, raise_http
from modules.auth.deps import require_permission
from modules.cart.service import cart_service

router = APIRouter(prefix="/api/cart", tags=["cart"])


# ==========================================
# Schemas
# ==========================================

class AddItemRequest(BaseModel):
    product_id: int = Field(..., gt=0)


class QuantityRequest(BaseModel):
    quantity: int


class DiscountRequest(BaseModel):
    amount: int = Field(..., ge=0)


class CustomerRequest(BaseModel):
    customer_id: Optional[int] = None


# ==========================================
# Helpers
# ==========================================

def cart_payload(db: Session, cashier_id: int) -> dict:
    cart = cart_service.get_or_create_cart(db, cashier_id)
    lines = cart_service.line_amounts(cart)
    return {
        "customer_id": cart.customer_id,
        "customer_name": cart.customer.name if cart.customer else None,
        "items": [
            {
                "product_id": line.product_id,
                "name": line.product_name,
                "unit_price": line.unit_price,
                "quantity": line.quantity,
                "discount": line.discount,
                "line_total": line.gross - line.discount,
            }
            for line in lines
        ],
        "totals": cart_service.cart_totals(cart).as_dict(),
    }


# ==========================================
# Routes
# ==========================================

@router.get("")
async def get_cart(db: Session = Depends(get_db), actor=Depends(require_permission("accessPos"))):
    payload = cart_payload(db, actor.id)
    db.commit()
    return payload


@router.post("/items")
async def add_item(
    body: AddItemRequest,
    db: Session = Depends(get_db),
    actor=Depends(require_permission("createSales")),
):
    try:
        cart_service.add_product(db, actor.id, body.product_id)
    except LedgerError as e:
        db.rollback()
        raise_http(e)
    db.commit()
    return cart_payload(db, actor.id)


@router.delete("/items/{product_id}")
async def remove_item(
    product_id: int,
    db: Session = Depends(get_db),
    actor=Depends(require_permission("createSales")),
):
    cart_service.remove_product(db, actor.id, product_id)
    db.commit()
    return cart_payload(db, actor.id)


@router.put("/items/{product_id}/quantity")
async def set_quantity(
    product_id: int,
    body: QuantityRequest,
    db: Session = Depends(get_db),
    actor=Depends(require_permission("createSales")),
):
    cart_service.set_quantity(db, actor.id, product_id, body.quantity)
    db.commit()
    return cart_payload(db, actor.id)


@router.put("/items/{product_id}/discount")
async def set_discount(
    product_id: int,
    body: DiscountRequest,
    db: Session = Depends(get_db),
    actor=Depends(require_permission("applyDiscounts")),
):
    cart_service.set_discount(db, actor.id, product_id, body.amount)
    db.commit()
    return cart_payload(db, actor.id)


@router.put("/customer")
async def bind_customer(
    body: CustomerRequest,
    db: Session = Depends(get_db),
    actor=Depends(require_permission("assignCustomer")),
):
    try:
        cart_service.bind_customer(db, actor.id, body.customer_id)
    except LedgerError as e:
        db.rollback()
        raise_http(e)
    db.commit()
    return cart_payload(db, actor.id)


@router.delete("")
async def clear_cart(db: Session = Depends(get_db), actor=Depends(require_permission("accessPos"))):
    cart_service.clear(db, actor.id)
    db.commit()
    return cart_payload(db, actor.id)
