"""
Time helpers.

All datetimes are stored as naive UTC in the database. Aware datetimes coming
from callers are converted to naive UTC before any comparison.
"""
from datetime import date, datetime, timezone
from typing import Optional

UTC = timezone.utc


def utc_now() -> datetime:
    """Current time as a naive UTC datetime (database convention)."""
    return datetime.now(UTC).replace(tzinfo=None)


def to_naive_utc(value: datetime | date | None) -> Optional[datetime]:
    """
    Normalise a date or datetime to a naive UTC datetime.

    Examples:
        >>> to_naive_utc(date(2024, 5, 19))
        datetime.datetime(2024, 5, 19, 0, 0)
    """
    if value is None:
        return None
    if not isinstance(value, datetime):
        return datetime.combine(value, datetime.min.time())
    if value.tzinfo is not None:
        return value.astimezone(UTC).replace(tzinfo=None)
    return value


def days_since(moment: datetime | date, now: Optional[datetime] = None) -> int:
    """
    Whole days elapsed since ``moment`` (negative when it is in the future).

    Partial days are floored, so something that ended 36 hours ago is 1 day old.
    """
    now = to_naive_utc(now) if now is not None else utc_now()
    return (now - to_naive_utc(moment)).days
