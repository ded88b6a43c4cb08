"""UTC helpers shared by the policy passes.

SQLite hands datetimes back without tzinfo, so everything read from the
database goes through ``as_utc`` before arithmetic with ``utcnow()``.
"""
from datetime import UTC, datetime


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def hours_between(start: datetime, end: datetime) -> float:
    """Signed number of hours from ``start`` to ``end``."""
    return (as_utc(end) - as_utc(start)).total_seconds() / 3600
