"""
Customer Module - Models
=========================
Customer: buyer who may carry store credit or debt.

balance > 0  → customer has credit with the store
balance < 0  → customer owes the store
total_purchases only ever grows (loan-settled purchases).
"""

from sqlalchemy import Column, Integer, String, BigInteger, DateTime, CheckConstraint

from config.database import Base
from common.helpers import now_utc


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    phone = Column(String, nullable=False, index=True)
    email = Column(String, nullable=True)
    balance = Column(BigInteger, default=0, nullable=False)
    total_purchases = Column(BigInteger, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    __table_args__ = (
        CheckConstraint("total_purchases >= 0", name="ck_customer_purchases_nonneg"),
    )

    @property
    def owes(self) -> int:
        """Outstanding debt as a positive amount (0 when in credit)."""
        return abs(min(self.balance, 0))

    def __repr__(self):
        return f"<Customer {self.id} {self.name} balance={self.balance}>"
