"""
LedgerPOS - Demo Data
======================
Starter catalog and customers for a fresh in-memory store.
Used at startup (SEED_DEMO_DATA) and by scripts/seed.py.
"""

import logging

from sqlalchemy.orm import Session

from modules.catalog.models import Product
from modules.customer.models import Customer

logger = logging.getLogger("ledgerpos.seed")


DEMO_PRODUCTS = [
    # (name, name_ku, name_ar, price, category, stock)
    ("Coca Cola 330ml", "کۆکا کۆلا ٣٣٠مل", "كوكا كولا ٣٣٠مل", 1500, "Beverages", 100),
    ("Pepsi 330ml", "پێپسی ٣٣٠مل", "بيبسي ٣٣٠مل", 1500, "Beverages", 80),
    ("Water 500ml", "ئاو ٥٠٠مل", "ماء ٥٠٠مل", 500, "Beverages", 200),
    ("Chips Lays", "چیپس لەیز", "شيبس ليز", 2000, "Snacks", 50),
    ("Chocolate Bar", "چۆکلێت", "شوكولاتة", 3000, "Snacks", 40),
    ("Bread", "نان", "خبز", 1000, "Bakery", 30),
    ("Milk 1L", "شیر ١ لیتر", "حليب ١ لتر", 2500, "Dairy", 25),
    ("Eggs 12pc", "هێلکە ١٢ دانە", "بيض ١٢ حبة", 5000, "Dairy", 20),
    ("Rice 1kg", "برنج ١ کیلۆ", "أرز ١ كيلو", 4000, "Grocery", 60),
    ("Sugar 1kg", "شەکر ١ کیلۆ", "سكر ١ كيلو", 2000, "Grocery", 45),
    ("Oil 1L", "زەیت ١ لیتر", "زيت ١ لتر", 6000, "Grocery", 35),
    ("Tea Box", "چا", "شاي", 3500, "Beverages", 55),
]

DEMO_CUSTOMERS = [
    # (name, phone, email, balance)
    ("Mohammed Ali", "0750 123 4567", "mohammed@email.com", -25000),
    ("Fatima Hassan", "0751 234 5678", None, 0),
    ("Karwan Rashid", "0770 345 6789", None, -10000),
    ("Layla Ahmed", "0780 456 7890", "layla@email.com", 5000),
    ("Saman Omar", "0790 567 8901", None, -50000),
]


def seed_demo_data(db: Session) -> bool:
    """Insert demo products and customers if the catalog is empty. Returns True if seeded."""
    if db.query(Product).count() > 0:
        return False

    for name, name_ku, name_ar, price, category, stock in DEMO_PRODUCTS:
        db.add(Product(
            name=name, name_ku=name_ku, name_ar=name_ar,
            price=price, category=category, stock=stock,
        ))
    for name, phone, email, balance in DEMO_CUSTOMERS:
        db.add(Customer(name=name, phone=phone, email=email, balance=balance, total_purchases=0))

    db.commit()
    logger.info(f"Seeded {len(DEMO_PRODUCTS)} products and {len(DEMO_CUSTOMERS)} customers")
    return True
