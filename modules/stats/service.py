"""
Stats Service
==============
Daily and date-range summaries over the transaction and transfer logs.
Read-only and recomputed on every call; days are UTC calendar days.
"""

from dataclasses import dataclass, asdict
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session
from sqlalchemy import func as sa_func

from config import settings
from common.helpers import day_bounds, now_utc, format_amount
from modules.cash.models import CashTransfer, TransferKind
from modules.customer.service import customer_service
from modules.sales.models import Transaction
from modules.sales.schemas import TransactionRead
from modules.sales.service import ledger_service

DateLike = Union[date, datetime]


@dataclass(frozen=True)
class DailyStats:
    total_sales: int
    cash_in: int
    cash_out: int
    loans: int
    transaction_count: int

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class RangeStats:
    total_sales: int
    total_cash_in: int
    total_loans: int
    transaction_count: int

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


class StatsService:

    def daily_stats(
        self,
        db: Session,
        as_of: Optional[DateLike] = None,
        include_withdrawals: Optional[bool] = None,
        cashier_id: Optional[int] = None,
    ) -> DailyStats:
        """
        Sales figures for one day. cash_out stays 0 unless withdrawals are
        included (argument, else CASH_OUT_INCLUDES_WITHDRAWALS).
        """
        day = as_of or now_utc()
        totals = self._period_totals(db, day, day, cashier_id)

        if include_withdrawals is None:
            include_withdrawals = settings.CASH_OUT_INCLUDES_WITHDRAWALS
        cash_out = self._withdrawals(db, day, day, cashier_id) if include_withdrawals else 0

        return DailyStats(
            total_sales=totals["total_sales"],
            cash_in=totals["cash_in"],
            cash_out=cash_out,
            loans=totals["loans"],
            transaction_count=totals["count"],
        )

    def range_stats(
        self,
        db: Session,
        start: DateLike,
        end: DateLike,
        cashier_id: Optional[int] = None,
    ) -> RangeStats:
        """Totals over [start, end], both days inclusive. start > end yields zeros."""
        totals = self._period_totals(db, start, end, cashier_id)
        return RangeStats(
            total_sales=totals["total_sales"],
            total_cash_in=totals["cash_in"],
            total_loans=totals["loans"],
            transaction_count=totals["count"],
        )

    def get_overview(self, db: Session, as_of: Optional[DateLike] = None) -> Dict[str, Any]:
        """Dashboard payload: today's figures, outstanding debt, recent sales."""
        daily = self.daily_stats(db, as_of)
        outstanding = customer_service.outstanding_loans(db)
        recent = self.recent_transactions(db)
        return {
            "daily": daily.as_dict(),
            "outstanding_loans": outstanding,
            "formatted": {
                "total_sales": format_amount(daily.total_sales, settings.CURRENCY_LABEL),
                "cash_in": format_amount(daily.cash_in, settings.CURRENCY_LABEL),
                "cash_out": format_amount(daily.cash_out, settings.CURRENCY_LABEL),
                "outstanding_loans": format_amount(outstanding, settings.CURRENCY_LABEL),
            },
            "recent_transactions": [t.model_dump(mode="json") for t in recent],
        }

    def recent_transactions(self, db: Session, limit: Optional[int] = None) -> List[TransactionRead]:
        """Most recent settlements first."""
        return ledger_service.list_transactions(db, limit=limit or settings.RECENT_TRANSACTIONS_LIMIT)

    # ------------------------------------------
    # Helpers
    # ------------------------------------------

    def _period_totals(
        self, db: Session, start: DateLike, end: DateLike, cashier_id: Optional[int],
    ) -> Dict[str, int]:
        lower, upper = day_bounds(start, end)
        if lower >= upper:
            return {"total_sales": 0, "cash_in": 0, "loans": 0, "count": 0}

        q = db.query(
            sa_func.coalesce(sa_func.sum(Transaction.total), 0),
            sa_func.coalesce(sa_func.sum(Transaction.paid), 0),
            sa_func.coalesce(sa_func.sum(Transaction.loan), 0),
            sa_func.count(Transaction.id),
        ).filter(
            Transaction.created_at >= lower,
            Transaction.created_at < upper,
        )
        if cashier_id is not None:
            q = q.filter(Transaction.cashier_id == cashier_id)

        total_sales, cash_in, loans, count = q.one()
        return {
            "total_sales": int(total_sales),
            "cash_in": int(cash_in),
            "loans": int(loans),
            "count": int(count),
        }

    def _withdrawals(
        self, db: Session, start: DateLike, end: DateLike, actor_id: Optional[int],
    ) -> int:
        lower, upper = day_bounds(start, end)
        q = db.query(sa_func.coalesce(sa_func.sum(CashTransfer.amount), 0)).filter(
            CashTransfer.kind == TransferKind.WITHDRAWAL.value,
            CashTransfer.created_at >= lower,
            CashTransfer.created_at < upper,
        )
        if actor_id is not None:
            q = q.filter(CashTransfer.from_actor_id == actor_id)
        return int(q.scalar() or 0)


stats_service = StatsService()
