"""
Integration tests for conflict detection queries.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

import pytest
from sqlalchemy.engine import Engine

from facility_booking.db.readers.conflicts import find_conflicts, has_conflict
from facility_booking.db.writers.bookings import insert_booking, transition_status
from facility_booking.models.enums import BookingKind, BookingSource, BookingStatus
from facility_booking.utils.interval import TimeInterval

NOW = datetime(2025, 6, 1, 8, 0, tzinfo=timezone.utc)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 6, 1, hour, minute, tzinfo=timezone.utc)


def _book(
    engine: Engine,
    user_id: int,
    kind: BookingKind,
    resource_id: int,
    interval: TimeInterval,
    status: Optional[BookingStatus] = None,
) -> int:
    with engine.begin() as conn:
        booking_id = insert_booking(
            conn, user_id, kind, resource_id, interval, BookingSource.WEB, None, NOW
        )
        if status is not None:
            transition_status(conn, booking_id, [BookingStatus.PENDING], status, NOW)
    return booking_id


@pytest.mark.integration
def test_overlap_rules_against_existing_booking(
    db_engine: Engine, user_id: int, room_id: int
) -> None:
    existing = _book(db_engine, user_id, BookingKind.ROOM, room_id, TimeInterval(at(10), at(11)))

    with db_engine.begin() as conn:
        assert find_conflicts(conn, BookingKind.ROOM, room_id, TimeInterval(at(10, 30), at(11, 30))) == [existing]
        assert find_conflicts(conn, BookingKind.ROOM, room_id, TimeInterval(at(9), at(12))) == [existing]
        assert find_conflicts(conn, BookingKind.ROOM, room_id, TimeInterval(at(11), at(12))) == []
        assert find_conflicts(conn, BookingKind.ROOM, room_id, TimeInterval(at(9), at(10))) == []


@pytest.mark.integration
@pytest.mark.parametrize(
    "status,blocks",
    [
        (None, True),  # pending
        (BookingStatus.CONFIRMED, True),
        (BookingStatus.CANCELED, False),
    ],
)
def test_only_active_bookings_block(
    db_engine: Engine,
    user_id: int,
    room_id: int,
    status: Optional[BookingStatus],
    blocks: bool,
) -> None:
    _book(db_engine, user_id, BookingKind.ROOM, room_id, TimeInterval(at(10), at(11)), status)

    with db_engine.begin() as conn:
        assert has_conflict(conn, BookingKind.ROOM, room_id, TimeInterval(at(10), at(11))) is blocks


@pytest.mark.integration
def test_completed_bookings_do_not_block(db_engine: Engine, user_id: int, room_id: int) -> None:
    booking_id = _book(
        db_engine, user_id, BookingKind.ROOM, room_id, TimeInterval(at(10), at(11)),
        BookingStatus.CONFIRMED,
    )
    with db_engine.begin() as conn:
        transition_status(conn, booking_id, [BookingStatus.CONFIRMED], BookingStatus.COMPLETED, NOW)

    with db_engine.begin() as conn:
        assert not has_conflict(conn, BookingKind.ROOM, room_id, TimeInterval(at(10), at(11)))


@pytest.mark.integration
def test_conflicts_are_scoped_to_the_resource(
    db_engine: Engine,
    user_id: int,
    make_room: Callable[..., int],
    make_class_schedule: Callable[..., int],
) -> None:
    room_a = make_room(name="A")
    room_b = make_room(name="B")
    schedule_id = make_class_schedule()
    _book(db_engine, user_id, BookingKind.ROOM, room_a, TimeInterval(at(10), at(11)))

    with db_engine.begin() as conn:
        assert not has_conflict(conn, BookingKind.ROOM, room_b, TimeInterval(at(10), at(11)))
        assert not has_conflict(conn, BookingKind.CLASS, schedule_id, TimeInterval(at(10), at(11)))


@pytest.mark.integration
def test_exclude_reservation_ignores_own_row(db_engine: Engine, user_id: int, room_id: int) -> None:
    own = _book(db_engine, user_id, BookingKind.ROOM, room_id, TimeInterval(at(10), at(11)))
    other = _book(db_engine, user_id, BookingKind.ROOM, room_id, TimeInterval(at(12), at(13)))

    with db_engine.begin() as conn:
        assert find_conflicts(
            conn, BookingKind.ROOM, room_id, TimeInterval(at(10), at(11, 30)), exclude_reservation_id=own
        ) == []
        assert find_conflicts(
            conn, BookingKind.ROOM, room_id, TimeInterval(at(10), at(12, 30)), exclude_reservation_id=own
        ) == [other]
