"""
Sales Module - Models
======================
Append-only transaction log.

Models:
  - Transaction: one settled checkout (totals, payment split, cashier, customer)
  - TransactionLine: copied cart line (name/price as sold, effective discount)

Rows are written once by LedgerService.settle and never updated or deleted.
"""

from sqlalchemy import (
    Column, Integer, String, BigInteger, Boolean, DateTime, ForeignKey,
    CheckConstraint, Index,
)
from sqlalchemy.orm import relationship

from config.database import Base
from common.helpers import now_utc


# ==========================================
# Transaction
# ==========================================

class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)
    customer_name = Column(String, nullable=True)
    subtotal = Column(BigInteger, nullable=False)
    discount = Column(BigInteger, default=0, nullable=False)
    total = Column(BigInteger, nullable=False)
    paid = Column(BigInteger, nullable=False)
    change = Column(BigInteger, default=0, nullable=False)
    loan = Column(BigInteger, default=0, nullable=False)
    cashier_id = Column(Integer, nullable=False, index=True)
    cashier_name = Column(String, nullable=False)
    note = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    synced = Column(Boolean, default=False, nullable=False)

    lines = relationship(
        "TransactionLine", back_populates="transaction",
        cascade="all, delete-orphan", order_by="TransactionLine.id",
    )

    __table_args__ = (
        CheckConstraint("total = subtotal - discount", name="ck_txn_total"),
        CheckConstraint("total >= 0", name="ck_txn_total_nonneg"),
        CheckConstraint("change >= 0 AND loan >= 0", name="ck_txn_change_loan_nonneg"),
        Index("ix_txn_created", "created_at"),
    )


# ==========================================
# TransactionLine (snapshot of a cart line)
# ==========================================

class TransactionLine(Base):
    __tablename__ = "transaction_lines"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False)
    product_name = Column(String, nullable=False)
    unit_price = Column(BigInteger, nullable=False)
    quantity = Column(Integer, nullable=False)
    discount = Column(BigInteger, default=0, nullable=False)

    transaction = relationship("Transaction", back_populates="lines")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_txn_line_qty"),
    )
