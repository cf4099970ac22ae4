"""Datetime utilities for timestamps and ledger ordering.

Usage:
    from src.utils.datetime_utils import utc_now, to_ledger_datetime

    # For SQLAlchemy Column defaults
    created_at = Column(DateTime, default=utc_now)

    # Ordering key that mixes dates and datetimes safely
    key = to_ledger_datetime(sale.sale_date)
"""

from datetime import date, datetime, time, timezone
from typing import Union

DateLike = Union[date, datetime]


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime.

    Returns:
        Current UTC datetime with timezone info
    """
    return datetime.now(timezone.utc)


def to_ledger_datetime(value: DateLike) -> datetime:
    """Normalize a date or datetime to a naive UTC datetime.

    Plain dates map to midnight. Aware datetimes are converted to UTC and
    their tzinfo dropped, so every ledger timestamp compares with every
    other one.

    Args:
        value: date or datetime

    Returns:
        Naive datetime in UTC
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    return datetime.combine(value, time.min)


def is_on_or_before(moment: datetime, cutoff: DateLike) -> bool:
    """Check whether a normalized ledger timestamp falls within a cutoff.

    A plain date cutoff covers the whole day; a datetime cutoff is exact.
    """
    if isinstance(cutoff, datetime):
        return moment <= to_ledger_datetime(cutoff)
    return moment.date() <= cutoff
