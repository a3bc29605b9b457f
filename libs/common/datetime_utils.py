"""Datetime helpers for the marketplace's TIMESTAMP columns.

The schema stores ``TIMESTAMP`` (without time zone) values in UTC, so
Python-side defaults must be naive UTC datetimes:

    created_at: Mapped[datetime] = mapped_column(
        DateTime(), default=utc_now, server_default=func.now()
    )
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current UTC time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_expired(expires_at: datetime | None, now: datetime | None = None) -> bool:
    """True when ``expires_at`` is set and already in the past (naive UTC)."""
    if expires_at is None:
        return False
    return expires_at <= (now or utc_now())
