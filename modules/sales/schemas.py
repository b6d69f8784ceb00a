"""
Sales Module - Schemas
=======================
Immutable read models handed to callers. Detached from the ORM session,
so nothing a caller does to them reaches the stored rows.
"""

from datetime import datetime
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from common.helpers import ensure_utc


class TransactionLineRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    product_id: int
    product_name: str
    unit_price: int
    quantity: int
    discount: int


class TransactionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    lines: Tuple[TransactionLineRead, ...]
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    subtotal: int
    discount: int
    total: int
    paid: int
    change: int
    loan: int
    cashier_id: int
    cashier_name: str
    note: Optional[str] = None
    created_at: datetime
    synced: bool

    @field_validator("created_at")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)
