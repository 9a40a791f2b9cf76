"""Time utilities for the domain layer."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def ensure_tz_aware(dt: datetime) -> datetime:
    """Ensure datetime is timezone-aware (UTC if naive)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


# 9999-12-31T23:59:59.999Z
MAX_EPOCH_MS = 253_402_300_799_999


def from_epoch_ms(value: int | float) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime.

    Raises OverflowError, OSError or ValueError when the value is outside
    the range the platform can represent.
    """
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def to_epoch_ms(dt: datetime) -> int:
    """Convert a datetime to epoch milliseconds (naive values are UTC)."""
    return int(ensure_tz_aware(dt).timestamp() * 1000)
