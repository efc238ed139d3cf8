"""UTC datetime utilities and the injectable clock."""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    This is the default clock for every lifecycle operation. Services accept a
    ``clock`` argument so tests can substitute a deterministic one.

    Returns:
        Timezone-aware datetime in UTC

    Example:
        >>> now = utc_now()
        >>> now.tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to timezone-aware UTC.

    Naive values are taken to already be UTC (SQLite hands timestamps back
    without tzinfo); aware values are converted.

    Args:
        value: Datetime to normalize

    Returns:
        Timezone-aware datetime in UTC
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
