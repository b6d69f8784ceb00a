"""
Catalog Module - API Routes
=============================
Read-only product listing for the POS screen.

Endpoints:
  GET /api/catalog/products     - Products (search across localized names, category filter)
  GET /api/catalog/categories   - Distinct active categories
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import require_actor
from modules.catalog.service import catalog_service

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


def product_dict(p, language: str = "en") -> dict:
    return {
        "id": p.id,
        "name": p.localized_name(language),
        "names": {"en": p.name, "ckb": p.name_ku, "ar": p.name_ar},
        "price": p.price,
        "stock": p.stock,
        "category": p.category,
        "barcode": p.barcode,
    }


@router.get("/products")
async def list_products(
    q: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    lang: str = Query("en"),
    db: Session = Depends(get_db),
    actor=Depends(require_actor),
):
    products = catalog_service.list_products(db, search=q, category=category)
    return {"products": [product_dict(p, lang) for p in products]}


@router.get("/categories")
async def list_categories(db: Session = Depends(get_db), actor=Depends(require_actor)):
    return {"categories": catalog_service.list_categories(db)}
