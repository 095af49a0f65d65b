"""UTC time helpers shared by stores and services."""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(dt: datetime | None) -> datetime | None:
    """Coerce ``dt`` to aware UTC.

    SQLite drops the offset on ``DateTime(timezone=True)`` columns, so naive
    values read back from storage are interpreted as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
