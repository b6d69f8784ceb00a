"""
Catalog Module - Models
========================
Product: read-only sale item with localized names.
Owned by the catalog; the ledger never mutates it (stock is advisory).
"""

from sqlalchemy import (
    Column, Integer, String, BigInteger, Boolean,
    CheckConstraint, Index,
)
from config.database import Base


# ==========================================
# 📦 Product
# ==========================================

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    name_ku = Column(String, nullable=True)   # Central Kurdish
    name_ar = Column(String, nullable=True)   # Arabic
    price = Column(BigInteger, default=0, nullable=False)  # smallest currency unit
    stock = Column(Integer, default=0, nullable=False)     # informational
    category = Column(String, nullable=False, index=True)
    barcode = Column(String, unique=True, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_product_price_nonneg"),
        CheckConstraint("stock >= 0", name="ck_product_stock_nonneg"),
        Index("ix_product_category_name", "category", "name"),
    )

    def localized_name(self, language: str = "en") -> str:
        """Name for a UI language code (ckb / ar / anything else = English)."""
        if language == "ckb" and self.name_ku:
            return self.name_ku
        if language == "ar" and self.name_ar:
            return self.name_ar
        return self.name

    def __repr__(self):
        return f"<Product {self.id} {self.name}>"
