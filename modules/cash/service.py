"""
Cash Service - Transfer Ledger
================================
Records cash movements between role holders and derives per-actor holdings.

The ledger records what it is given. Picking the receiving accountant is the
caller's policy, passed in as a resolver.

Usage:
    cash_service.record_transfer(db, cashier, accountant, 10_000, TransferKind.CASHIER_TO_ACCOUNTANT)
    cash_service.transfer_to_accountant(db, cashier, 10_000, resolve_destination=directory.first_active)
"""

import logging
from typing import Callable, List, Optional

from sqlalchemy.orm import Session
from sqlalchemy import func as sa_func

from common.connectivity import connectivity
from common.exceptions import InvalidAmountError, InvalidTransferKindError, UnknownEntityError
from common.helpers import now_utc
from modules.auth.permissions import Actor, ROLE_ACCOUNTANT
from modules.cash.models import CashTransfer, TransferKind
from modules.cash.schemas import CashTransferRead, CashHoldings
from modules.sales.models import Transaction
from modules.sales.service import ledger_lock

logger = logging.getLogger("ledgerpos.cash")

DestinationResolver = Callable[[str], Optional[Actor]]


class CashService:
    """Stateless service: call methods with db session."""

    # ------------------------------------------
    # Recording
    # ------------------------------------------

    def record_transfer(
        self,
        db: Session,
        source: Actor,
        destination: Actor,
        amount: int,
        kind: str,
    ) -> CashTransferRead:
        """Append one transfer. Non-positive amounts and unknown kinds are rejected."""
        if amount is None or int(amount) <= 0:
            raise InvalidAmountError(amount)
        try:
            kind = TransferKind(kind)
        except ValueError:
            raise InvalidTransferKindError(str(kind))

        with ledger_lock:
            try:
                transfer = CashTransfer(
                    from_actor_id=source.id,
                    from_actor_name=source.name,
                    to_actor_id=destination.id,
                    to_actor_name=destination.name,
                    amount=int(amount),
                    kind=kind.value,
                    created_at=now_utc(),
                    synced=connectivity.is_online(),
                )
                db.add(transfer)
                db.flush()
                snapshot = CashTransferRead.model_validate(transfer)
                db.commit()
            except Exception as e:
                db.rollback()
                logger.error(f"Cash transfer rolled back ({source.id} -> {destination.id}): {e}")
                raise

        logger.info(
            f"Cash transfer #{snapshot.id}: {snapshot.kind} {snapshot.amount} "
            f"from #{source.id} {source.name} to #{destination.id} {destination.name}"
        )
        return snapshot

    def transfer_to_accountant(
        self,
        db: Session,
        source: Actor,
        amount: int,
        resolve_destination: DestinationResolver,
    ) -> CashTransferRead:
        """Hand cash to whichever accountant the resolver picks."""
        if amount is None or int(amount) <= 0:
            raise InvalidAmountError(amount)
        destination = resolve_destination(ROLE_ACCOUNTANT)
        if destination is None:
            raise UnknownEntityError("actor", ROLE_ACCOUNTANT)
        return self.record_transfer(db, source, destination, amount, TransferKind.CASHIER_TO_ACCOUNTANT)

    # ------------------------------------------
    # Query
    # ------------------------------------------

    def list_transfers(self, db: Session, actor_id: Optional[int] = None) -> List[CashTransferRead]:
        """Transfers newest first, optionally limited to those touching one actor."""
        q = db.query(CashTransfer)
        if actor_id is not None:
            q = q.filter(
                (CashTransfer.from_actor_id == actor_id) | (CashTransfer.to_actor_id == actor_id)
            )
        return [CashTransferRead.model_validate(t) for t in q.order_by(CashTransfer.id.desc()).all()]

    def cash_holdings(self, db: Session, actor_id: int) -> CashHoldings:
        """
        Cash currently held by an actor, derived from both logs:
        kept from own sales (paid − change) + transfers received − transfers sent.
        Withdrawals leave the business, so they never count as received.
        """
        from_sales = (
            db.query(sa_func.coalesce(sa_func.sum(Transaction.paid - Transaction.change), 0))
            .filter(Transaction.cashier_id == actor_id)
            .scalar()
        ) or 0
        received = (
            db.query(sa_func.coalesce(sa_func.sum(CashTransfer.amount), 0))
            .filter(
                CashTransfer.to_actor_id == actor_id,
                CashTransfer.kind == TransferKind.CASHIER_TO_ACCOUNTANT.value,
            )
            .scalar()
        ) or 0
        sent = (
            db.query(sa_func.coalesce(sa_func.sum(CashTransfer.amount), 0))
            .filter(CashTransfer.from_actor_id == actor_id)
            .scalar()
        ) or 0
        return CashHoldings(
            actor_id=actor_id,
            from_sales=int(from_sales),
            received=int(received),
            sent=int(sent),
            balance=int(from_sales) + int(received) - int(sent),
        )


# Singleton
cash_service = CashService()
