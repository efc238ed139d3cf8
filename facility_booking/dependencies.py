"""
FastAPI dependency injection providers.

Dependencies can be overridden in tests using app.dependency_overrides, making
it easy to point routes at a test database or a frozen clock.
"""

from __future__ import annotations

from typing import Generator

from sqlalchemy.engine import Engine

from facility_booking.db.engine import engine
from facility_booking.utils.datetime import Clock, utc_now


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> app.dependency_overrides[get_db_engine] = lambda: test_engine
    """
    yield engine


def get_clock() -> Clock:
    """
    Provide the clock used for hold expiry and history date ranges.

    Returns:
        Clock: Callable returning the current UTC time
    """
    return utc_now
