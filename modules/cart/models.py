"""
Cart Module - Models
=====================
Checkout working set: one cart per cashier, one line per product.
"""

from sqlalchemy import (
    Column, Integer, BigInteger, ForeignKey, DateTime,
    UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import relationship

from config.database import Base
from common.helpers import now_utc


class Cart(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)
    cashier_id = Column(Integer, unique=True, nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    customer = relationship("Customer", foreign_keys=[customer_id])
    items = relationship(
        "CartItem", back_populates="cart",
        cascade="all, delete-orphan", order_by="CartItem.id",
    )

    @property
    def is_empty(self) -> bool:
        return not self.items


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    discount = Column(BigInteger, default=0, nullable=False)  # raw, clamped at total time

    cart = relationship("Cart", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", name="uq_cart_product"),
        CheckConstraint("quantity >= 1", name="ck_cart_qty"),
    )
