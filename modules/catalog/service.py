"""
Catalog Module - Service Layer
================================
Read-only product lookups for the POS screen and the cart.
"""

from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy import or_

from common.exceptions import UnknownEntityError
from modules.catalog.models import Product


class CatalogService:

    def get_product(self, db: Session, product_id: int) -> Optional[Product]:
        return db.query(Product).filter(Product.id == product_id).first()

    def require_product(self, db: Session, product_id: int) -> Product:
        """Get product or raise UnknownEntityError."""
        product = self.get_product(db, product_id)
        if not product:
            raise UnknownEntityError("product", product_id)
        return product

    def list_products(
        self,
        db: Session,
        search: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[Product]:
        """Active products, optionally matching a term in any localized name or barcode."""
        q = db.query(Product).filter(Product.is_active == True)
        if search:
            term = f"%{search.strip()}%"
            q = q.filter(
                or_(
                    Product.name.ilike(term),
                    Product.name_ku.like(term),
                    Product.name_ar.like(term),
                    Product.barcode == search.strip(),
                )
            )
        if category:
            q = q.filter(Product.category == category)
        return q.order_by(Product.id).all()

    def list_categories(self, db: Session) -> List[str]:
        rows = (
            db.query(Product.category)
            .filter(Product.is_active == True)
            .distinct()
            .order_by(Product.category)
            .all()
        )
        return [row.category for row in rows]


catalog_service = CatalogService()
