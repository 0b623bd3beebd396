"""
Datetime utilities.

Timestamps are stored as naive UTC; these helpers keep every comparison
on that same footing.
"""

from datetime import date, datetime, timezone
from typing import Optional

# UTC timezone constant
UTC = timezone.utc


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Replaces datetime.utcnow() which is deprecated in Python 3.12+.
    """
    return datetime.now(UTC)


def normalize_dt(value: datetime) -> datetime:
    """Normalize datetime to naive UTC for storage and comparisons."""
    if value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value


def utc_now_naive() -> datetime:
    """Current time as naive UTC (storage format)."""
    return normalize_dt(now_utc())


def today_utc() -> date:
    """Today's date in UTC."""
    return now_utc().date()


def is_overdue(planned_end: Optional[date], actual_end: Optional[date], today: Optional[date] = None) -> bool:
    """True when a planned end date has passed without an actual end date."""
    if planned_end is None or actual_end is not None:
        return False
    return planned_end < (today or today_utc())
