"""
Cash Module - Models
=====================
Append-only log of cash moved between role holders.

Enums:
  - TransferKind: cashier_to_accountant / withdrawal
"""

import enum

from sqlalchemy import (
    Column, Integer, String, BigInteger, Boolean, DateTime,
    CheckConstraint, Index,
)

from config.database import Base
from common.helpers import now_utc


class TransferKind(str, enum.Enum):
    CASHIER_TO_ACCOUNTANT = "cashier_to_accountant"
    WITHDRAWAL = "withdrawal"


TRANSFER_KIND_LABELS = {
    TransferKind.CASHIER_TO_ACCOUNTANT: "Transfer",
    TransferKind.WITHDRAWAL: "Withdrawal",
}


class CashTransfer(Base):
    __tablename__ = "cash_transfers"

    id = Column(Integer, primary_key=True)
    from_actor_id = Column(Integer, nullable=False, index=True)
    from_actor_name = Column(String, nullable=False)
    to_actor_id = Column(Integer, nullable=False, index=True)
    to_actor_name = Column(String, nullable=False)
    amount = Column(BigInteger, nullable=False)
    kind = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    synced = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transfer_amount_pos"),
        Index("ix_transfer_kind_created", "kind", "created_at"),
    )

    @property
    def kind_label(self) -> str:
        try:
            return TRANSFER_KIND_LABELS[TransferKind(self.kind)]
        except ValueError:
            return self.kind
