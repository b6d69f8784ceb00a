"""
Sales Service - Checkout Settlement
=====================================
Turns a cart into an immutable Transaction and charges any loan to the
bound customer. Log append and balance change commit together or not at all.

Usage:
    cart = cart_service.get_or_create_cart(db, cashier.id)
    txn = ledger_service.settle(db, cart, paid_amount=5000, cashier=cashier)
    cart_service.clear(db, cashier.id)
"""

import logging
import threading
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from common.connectivity import connectivity
from common.exceptions import EmptyCartError, UnassignedLoanError, UnknownEntityError
from common.helpers import now_utc
from modules.auth.permissions import Actor
from modules.cart.models import Cart
from modules.cart.service import cart_service
from modules.customer.service import customer_service
from modules.sales.models import Transaction, TransactionLine
from modules.sales.schemas import TransactionRead

logger = logging.getLogger("ledgerpos.sales")

# Serializes every ledger write (settlements and cash transfers).
ledger_lock = threading.RLock()


def split_payment(total: int, paid: int) -> Tuple[int, int]:
    """Return (change, loan). paid + change == total + loan always holds."""
    change = max(0, paid - total)
    loan = max(0, total - paid)
    return change, loan


class LedgerService:

    # ------------------------------------------
    # Settlement
    # ------------------------------------------

    def settle(
        self,
        db: Session,
        cart: Cart,
        paid_amount: int,
        cashier: Actor,
        note: Optional[str] = None,
        allow_unassigned_loan: bool = False,
        clear_cart: bool = False,
    ) -> TransactionRead:
        """
        Settle the cart against `paid_amount`.

        Raises EmptyCartError / UnknownEntityError / UnassignedLoanError before
        anything is written. `allow_unassigned_loan=True` records the loan on the
        transaction without charging anyone (walk-away override).
        `clear_cart=True` empties the cart in the same commit as the sale, so a
        settled cart can never be settled again.
        """
        with ledger_lock:
            if cart is None or cart.is_empty:
                raise EmptyCartError()

            paid = int(paid_amount)
            lines = cart_service.line_amounts(cart)
            subtotal = sum(line.gross for line in lines)
            discount = sum(line.discount for line in lines)
            total = subtotal - discount
            change, loan = split_payment(total, paid)

            customer = None
            if cart.customer_id is not None:
                customer = customer_service.get(db, cart.customer_id)

            if loan > 0 and customer is None and not allow_unassigned_loan:
                logger.warning(
                    f"Settlement refused for cashier #{cashier.id}: loan {loan} on total {total} with no customer"
                )
                raise UnassignedLoanError(total=total, loan=loan)

            try:
                txn = Transaction(
                    customer_id=customer.id if customer else None,
                    customer_name=customer.name if customer else None,
                    subtotal=subtotal,
                    discount=discount,
                    total=total,
                    paid=paid,
                    change=change,
                    loan=loan,
                    cashier_id=cashier.id,
                    cashier_name=cashier.name,
                    note=(note or "").strip() or None,
                    created_at=now_utc(),
                    synced=connectivity.is_online(),
                )
                txn.lines = [
                    TransactionLine(
                        product_id=line.product_id,
                        product_name=line.product_name,
                        unit_price=line.unit_price,
                        quantity=line.quantity,
                        discount=line.discount,
                    )
                    for line in lines
                ]
                db.add(txn)

                if loan > 0 and customer is not None:
                    customer_service.apply_loan(db, customer.id, loan, total)

                if clear_cart:
                    cart.items.clear()
                    cart.customer_id = None

                db.flush()
                snapshot = TransactionRead.model_validate(txn)
                db.commit()
            except Exception as e:
                db.rollback()
                logger.error(f"Settlement rolled back for cashier #{cashier.id}: {e}")
                raise

        logger.info(
            f"Transaction #{snapshot.id} settled: total={total} paid={paid} "
            f"change={change} loan={loan} customer={snapshot.customer_id}"
        )
        return snapshot

    # ------------------------------------------
    # Query
    # ------------------------------------------

    def get_transaction(self, db: Session, transaction_id: int) -> TransactionRead:
        txn = (
            db.query(Transaction)
            .options(selectinload(Transaction.lines))
            .filter(Transaction.id == transaction_id)
            .first()
        )
        if not txn:
            raise UnknownEntityError("transaction", transaction_id)
        return TransactionRead.model_validate(txn)

    def list_transactions(
        self,
        db: Session,
        cashier_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        limit: Optional[int] = None,
        newest_first: bool = True,
    ) -> List[TransactionRead]:
        q = db.query(Transaction).options(selectinload(Transaction.lines))
        if cashier_id is not None:
            q = q.filter(Transaction.cashier_id == cashier_id)
        if customer_id is not None:
            q = q.filter(Transaction.customer_id == customer_id)
        q = q.order_by(Transaction.id.desc() if newest_first else Transaction.id)
        if limit:
            q = q.limit(limit)
        return [TransactionRead.model_validate(t) for t in q.all()]

    def count(self, db: Session) -> int:
        return db.query(Transaction).count()


ledger_service = LedgerService()
