"""
Customer Service - Balance Store
==================================
Customer records and the single balance mutation path (apply_loan).

Usage:
    customer_service.create(db, name="Karwan Rashid", phone="0770 345 6789", balance=-10000)
    customer_service.apply_loan(db, customer_id=3, loan_amount=2000, purchase_total=7000)
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy import func as sa_func, or_

from common.exceptions import InvalidAmountError, UnknownEntityError
from modules.customer.models import Customer

logger = logging.getLogger("ledgerpos.customer")


class CustomerService:
    """Stateless service: call methods with db session."""

    # ------------------------------------------
    # Lookup
    # ------------------------------------------

    def get(self, db: Session, customer_id: int) -> Customer:
        """Get customer or raise UnknownEntityError."""
        customer = db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            raise UnknownEntityError("customer", customer_id)
        return customer

    def list_customers(self, db: Session, search: Optional[str] = None) -> List[Customer]:
        q = db.query(Customer)
        if search:
            term = f"%{search.strip()}%"
            q = q.filter(
                or_(
                    Customer.name.ilike(term),
                    Customer.phone.like(term),
                )
            )
        return q.order_by(Customer.id).all()

    def search(self, db: Session, term: str) -> List[Customer]:
        """Customers whose name or phone contains `term`. Blank term returns nothing."""
        if not term or not term.strip():
            return []
        return self.list_customers(db, search=term)

    def outstanding_loans(self, db: Session) -> int:
        """Sum of debt across all customers that owe money."""
        return (
            db.query(sa_func.coalesce(sa_func.sum(-Customer.balance), 0))
            .filter(Customer.balance < 0)
            .scalar()
        ) or 0

    # ------------------------------------------
    # Mutations
    # ------------------------------------------

    def create(
        self,
        db: Session,
        name: str,
        phone: str,
        email: Optional[str] = None,
        balance: int = 0,
    ) -> Customer:
        """Create a customer. `balance` may carry prior debt (negative) or credit."""
        customer = Customer(
            name=name.strip(),
            phone=phone.strip(),
            email=(email or "").strip() or None,
            balance=int(balance),
            total_purchases=0,
        )
        db.add(customer)
        db.flush()
        logger.info(f"Customer created: #{customer.id} {customer.name} (opening balance {customer.balance})")
        return customer

    def update_profile(
        self,
        db: Session,
        customer_id: int,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Customer:
        """Edit contact fields. Balance and purchase totals are ledger-owned."""
        customer = self.get(db, customer_id)
        if name is not None and name.strip():
            customer.name = name.strip()
        if phone is not None and phone.strip():
            customer.phone = phone.strip()
        if email is not None:
            customer.email = email.strip() or None
        db.flush()
        return customer

    def apply_loan(self, db: Session, customer_id: int, loan_amount: int, purchase_total: int) -> Customer:
        """
        Charge a settled loan to the customer.
        balance -= loan_amount; total_purchases += purchase_total.
        Only called from LedgerService.settle.
        """
        if loan_amount < 0:
            raise InvalidAmountError(loan_amount)
        if purchase_total < 0:
            raise InvalidAmountError(purchase_total)
        # Re-read under a row lock: the identity map may hold a balance
        # loaded before another session committed a charge.
        customer = (
            db.query(Customer)
            .filter(Customer.id == customer_id)
            .populate_existing()
            .with_for_update()
            .first()
        )
        if not customer:
            raise UnknownEntityError("customer", customer_id)
        customer.balance -= loan_amount
        customer.total_purchases += purchase_total
        db.flush()
        return customer


# Singleton
customer_service = CustomerService()
