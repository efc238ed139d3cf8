"""
Integration tests for the points ledger and history.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone

import pytest
from sqlalchemy.engine import Engine

from facility_booking.db.readers.points import sum_ledger_deltas
from facility_booking.db.readers.resources import get_points_balance
from facility_booking.errors import InvalidReference, NotFound
from facility_booking.models.enums import BookingKind, BookingSource
from facility_booking.schemas.points import PointHistoryFilters
from facility_booking.services.points import adjust_points, get_point_history
from facility_booking.services.reservations import create_room_booking


def _balances(engine: Engine, user_id: int) -> tuple[int, int]:
    with engine.connect() as conn:
        return get_points_balance(conn, user_id), sum_ledger_deltas(conn, user_id)


@pytest.mark.integration
def test_adjust_returns_new_balance_and_appends_entry(db_engine: Engine, user_id: int, clock) -> None:
    assert adjust_points(db_engine, user_id, 100, "Welcome bonus", clock=clock) == 100
    assert adjust_points(db_engine, user_id, -30, "Redeemed drink", clock=clock) == 70

    assert _balances(db_engine, user_id) == (70, 70)


@pytest.mark.integration
def test_balance_may_go_negative(db_engine: Engine, user_id: int, clock) -> None:
    assert adjust_points(db_engine, user_id, -50, "Manual correction", clock=clock) == -50
    assert _balances(db_engine, user_id) == (-50, -50)


@pytest.mark.integration
def test_adjust_unknown_user_is_not_found(db_engine: Engine, clock) -> None:
    with pytest.raises(NotFound):
        adjust_points(db_engine, 9999, 10, "ghost", clock=clock)


@pytest.mark.integration
def test_adjust_with_unknown_booking_is_rolled_back(db_engine: Engine, user_id: int, clock) -> None:
    with pytest.raises(InvalidReference):
        adjust_points(db_engine, user_id, 10, "Stay reward", booking_ref=4242, clock=clock)

    assert _balances(db_engine, user_id) == (0, 0)


@pytest.mark.integration
def test_concurrent_adjustments_keep_balance_equal_to_ledger(
    db_engine: Engine, user_id: int, clock
) -> None:
    barrier = threading.Barrier(8)
    errors: list[Exception] = []

    def earn() -> None:
        barrier.wait()
        try:
            adjust_points(db_engine, user_id, 5, "Check-in", clock=clock)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=earn) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert errors == []
    assert _balances(db_engine, user_id) == (40, 40)


# === History ===


@pytest.fixture
def history(db_engine: Engine, user_id: int, room_id: int, clock):
    """
    Four entries spread over three weeks, newest last:

    day 0: +100 Welcome bonus
    day 7: -20  Redeemed coffee
    day 14: +15 Room booking reward (linked to a booking)
    day 20: -5  Late fee, 100% of deposit
    """
    adjust_points(db_engine, user_id, 100, "Welcome bonus", clock=clock)
    clock.advance(days=7)
    adjust_points(db_engine, user_id, -20, "Redeemed coffee", clock=clock)
    clock.advance(days=7)
    booking = create_room_booking(
        db_engine,
        user_id,
        room_id,
        datetime(2025, 7, 1, 10, tzinfo=timezone.utc),
        datetime(2025, 7, 1, 11, tzinfo=timezone.utc),
        BookingSource.WEB,
        clock=clock,
    )
    adjust_points(db_engine, user_id, 15, "Room booking reward", booking_ref=booking.id, clock=clock)
    clock.advance(days=6)
    adjust_points(db_engine, user_id, -5, "Late fee, 100% of deposit", clock=clock)
    return booking


@pytest.mark.integration
def test_history_is_newest_first_with_booking_summary(
    db_engine: Engine, user_id: int, history, clock
) -> None:
    page = get_point_history(db_engine, user_id, clock=clock)

    assert [e.delta for e in page.points] == [-5, 15, -20, 100]
    linked = page.points[1]
    assert linked.booking is not None
    assert linked.booking.id == history.id
    assert linked.booking.kind is BookingKind.ROOM
    assert linked.booking.room == "Room 101"
    assert page.points[0].booking is None
    assert page.pagination.model_dump() == {"page": 1, "limit": 20, "total": 4, "pages": 1}


@pytest.mark.integration
def test_history_filters_by_direction(db_engine: Engine, user_id: int, history, clock) -> None:
    earned = get_point_history(db_engine, user_id, PointHistoryFilters(type="earned"), clock=clock)
    spent = get_point_history(db_engine, user_id, PointHistoryFilters(type="spent"), clock=clock)

    assert [e.delta for e in earned.points] == [15, 100]
    assert [e.delta for e in spent.points] == [-5, -20]


@pytest.mark.integration
def test_history_filters_by_recent_days(db_engine: Engine, user_id: int, history, clock) -> None:
    page = get_point_history(db_engine, user_id, PointHistoryFilters(days=10), clock=clock)

    assert [e.reason for e in page.points] == ["Late fee, 100% of deposit", "Room booking reward"]
    assert page.pagination.total == 2


@pytest.mark.integration
def test_history_search_is_case_insensitive_and_literal(
    db_engine: Engine, user_id: int, history, clock
) -> None:
    coffee = get_point_history(db_engine, user_id, PointHistoryFilters(search="COFFEE"), clock=clock)
    percent = get_point_history(db_engine, user_id, PointHistoryFilters(search="100%"), clock=clock)

    assert [e.reason for e in coffee.points] == ["Redeemed coffee"]
    assert [e.reason for e in percent.points] == ["Late fee, 100% of deposit"]


@pytest.mark.integration
def test_history_pagination(db_engine: Engine, user_id: int, history, clock) -> None:
    first = get_point_history(db_engine, user_id, PointHistoryFilters(page=1, limit=3), clock=clock)
    second = get_point_history(db_engine, user_id, PointHistoryFilters(page=2, limit=3), clock=clock)

    assert len(first.points) == 3
    assert [e.delta for e in second.points] == [100]
    assert second.pagination.pages == 2
    assert second.pagination.total == 4


@pytest.mark.integration
def test_history_for_user_without_entries_is_empty(db_engine: Engine, user_id: int, clock) -> None:
    page = get_point_history(db_engine, user_id, clock=clock)

    assert page.points == []
    assert page.pagination.total == 0
    assert page.pagination.pages == 0


@pytest.mark.integration
def test_history_for_unknown_user_is_not_found(db_engine: Engine, clock) -> None:
    with pytest.raises(NotFound):
        get_point_history(db_engine, 9999, clock=clock)
