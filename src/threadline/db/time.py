# src/threadline/db/time.py
"""Time utilities for database models."""

from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Naive values are taken to be UTC already.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def hours_between(earlier: datetime, later: datetime) -> float:
    """Return the number of hours from ``earlier`` to ``later``."""
    return (as_utc(later) - as_utc(earlier)).total_seconds() / 3600.0


class UTCDateTime(TypeDecorator):
    """``DateTime`` column that stores UTC and always loads aware UTC values.

    SQLite keeps no offset, so values are converted to UTC before they are
    written and tagged as UTC when they are read back.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)
