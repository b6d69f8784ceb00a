"""
LedgerPOS - Database Seeder
=============================
Seeds the demo catalog and customers.

Usage:
    python scripts/seed.py          # Seed if empty
    python scripts/seed.py --reset  # Drop all tables and reseed

With the default in-memory DATABASE_URL the data lives only as long as
this process; point DATABASE_URL at a real database to keep it.
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.database import SessionLocal, Base, engine
from common.demo_data import seed_demo_data
from modules.catalog.models import Product  # noqa: F401
from modules.customer.models import Customer  # noqa: F401
from modules.cart.models import Cart, CartItem  # noqa: F401
from modules.sales.models import Transaction, TransactionLine  # noqa: F401
from modules.cash.models import CashTransfer  # noqa: F401


def main():
    if "--reset" in sys.argv:
        print("Dropping all tables...")
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if seed_demo_data(db):
            print(f"Seeded {db.query(Product).count()} products, {db.query(Customer).count()} customers")
        else:
            print("Catalog already populated, nothing to do")
    finally:
        db.close()


if __name__ == "__main__":
    main()
