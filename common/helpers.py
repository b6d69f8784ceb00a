"""
LedgerPOS - Shared Helpers
===========================
Pure utility functions with NO database or module dependencies.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple, Union


def now_utc() -> datetime:
    """Returns current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_utc_date(value: Union[date, datetime]) -> date:
    """Calendar day of a date/datetime, using UTC midnight as the boundary."""
    if isinstance(value, datetime):
        return ensure_utc(value).date()
    return value


def day_bounds(start: Union[date, datetime], end: Union[date, datetime]) -> Tuple[datetime, datetime]:
    """
    Half-open UTC window [start 00:00, day after end 00:00) covering both days.
    """
    start_day = to_utc_date(start)
    end_day = to_utc_date(end)
    lower = datetime.combine(start_day, time.min, tzinfo=timezone.utc)
    upper = datetime.combine(end_day + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return lower, upper


def safe_int(value: Optional[str]) -> Optional[int]:
    """Safely convert a string to int. Returns None on failure."""
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        return None


def format_amount(value, label: str = "IQD") -> str:
    """Format an integer amount with comma separators and currency label."""
    if value is None:
        value = 0
    try:
        return "{:,} {}".format(int(value), label)
    except (ValueError, TypeError):
        return str(value)
