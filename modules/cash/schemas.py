"""
Cash Module - Schemas
======================
Immutable read models for cash transfers and holdings.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from common.helpers import ensure_utc


class CashTransferRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    from_actor_id: int
    from_actor_name: str
    to_actor_id: int
    to_actor_name: str
    amount: int
    kind: str
    created_at: datetime
    synced: bool

    @field_validator("created_at")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class CashHoldings(BaseModel):
    model_config = ConfigDict(frozen=True)

    actor_id: int
    from_sales: int
    received: int
    sent: int
    balance: int
