"""
Shared fixtures.

Config is read at import time, so the environment is set before any
facility_booking module is imported.
"""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ALLOWED_ORIGINS", "*")
os.environ.setdefault("SWEEP_ENABLED", "false")

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Generator, Optional

import pytest
from sqlalchemy import insert
from sqlalchemy.engine import Engine

from facility_booking.db.engine import build_engine
from facility_booking.models.base import Base
from facility_booking.models.bookings import Booking  # noqa: F401
from facility_booking.models.class_schedules import ClassSchedule
from facility_booking.models.payments import Payment  # noqa: F401
from facility_booking.models.points import PointsLedgerEntry  # noqa: F401
from facility_booking.models.rooms import Room
from facility_booking.models.users import User


class FakeClock:
    """Deterministic clock; call it like ``utc_now`` and move it with ``advance``."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 6, 1, 8, 0, tzinfo=timezone.utc))


@pytest.fixture
def db_engine(tmp_path: Path) -> Generator[Engine, None, None]:
    """
    File-backed SQLite engine with the full schema.

    A file (not :memory:) so concurrent tests can open several connections.
    """
    engine = build_engine(f"sqlite:///{tmp_path / 'bookings.db'}", lock_timeout_ms=5000)
    Base.metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture
def make_user(db_engine: Engine) -> Callable[..., int]:
    counter = {"n": 0}

    def _make(name: str = "Test User", email: Optional[str] = None) -> int:
        counter["n"] += 1
        with db_engine.begin() as conn:
            result = conn.execute(
                insert(User).values(
                    email=email or f"user{counter['n']}@example.com",
                    name=name,
                )
            )
        return int(result.inserted_primary_key[0])

    return _make


@pytest.fixture
def make_room(db_engine: Engine) -> Callable[..., int]:
    def _make(name: str = "Room 101", capacity: int = 4) -> int:
        with db_engine.begin() as conn:
            result = conn.execute(insert(Room).values(name=name, capacity=capacity))
        return int(result.inserted_primary_key[0])

    return _make


@pytest.fixture
def make_class_schedule(db_engine: Engine) -> Callable[..., int]:
    def _make(
        title: str = "Morning Yoga",
        room_id: Optional[int] = None,
        starts_at: datetime = datetime(2025, 6, 2, 9, 0, tzinfo=timezone.utc),
        duration: timedelta = timedelta(hours=1),
    ) -> int:
        with db_engine.begin() as conn:
            result = conn.execute(
                insert(ClassSchedule).values(
                    title=title,
                    room_id=room_id,
                    starts_at=starts_at,
                    ends_at=starts_at + duration,
                    capacity=10,
                )
            )
        return int(result.inserted_primary_key[0])

    return _make


@pytest.fixture
def user_id(make_user: Callable[..., int]) -> int:
    return make_user()


@pytest.fixture
def room_id(make_room: Callable[..., int]) -> int:
    return make_room()
