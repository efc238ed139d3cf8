"""
Points ledger.

Every adjustment appends a ledger row and moves the user's cached
``points_balance`` by the same delta in one transaction that holds the user's
row lock, so the balance always equals the sum of the user's deltas. No floor
is enforced; balances may go negative.
"""

from __future__ import annotations

from datetime import timedelta
from math import ceil
from typing import Optional

import structlog
from sqlalchemy.engine import Engine

from facility_booking.db.readers.points import query_point_history
from facility_booking.db.readers.resources import lock_user_balance, user_exists
from facility_booking.db.transactions import write_transaction
from facility_booking.db.writers.points import increment_points_balance, insert_ledger_entry
from facility_booking.errors import NotFound
from facility_booking.metrics import points_adjustments
from facility_booking.schemas.points import PointHistoryFilters
from facility_booking.schemas.records import (
    BookingSummary,
    Pagination,
    PointHistoryPage,
    PointLedgerRecord,
)
from facility_booking.utils.datetime import Clock, ensure_utc, utc_now

logger = structlog.get_logger(__name__)


def adjust_points(
    engine: Engine,
    user_id: int,
    delta: int,
    reason: str,
    booking_ref: Optional[int] = None,
    *,
    clock: Clock = utc_now,
) -> int:
    """
    Apply a signed points delta to a user and return the new balance.

    Args:
        engine: SQLAlchemy engine
        user_id: User id
        delta: Signed change
        reason: Free-text reason stored on the ledger entry
        booking_ref: Optional booking the adjustment relates to
        clock: Source of "now"

    Returns:
        int: Balance after the adjustment

    Raises:
        NotFound: If the user does not exist
        InvalidReference: If booking_ref does not exist
        LockTimeout: If the user's row lock was not acquired in time
    """
    with write_transaction(engine, operation="adjust_points") as conn:
        balance = lock_user_balance(conn, user_id)
        if balance is None:
            raise NotFound(f"User {user_id} not found")

        now = ensure_utc(clock())
        entry_id = insert_ledger_entry(conn, user_id, delta, reason, booking_ref, now)
        increment_points_balance(conn, user_id, delta, now)
        new_balance = balance + delta

    points_adjustments.labels(direction="earned" if delta >= 0 else "spent").inc()
    logger.info(
        "points_adjusted",
        user_id=user_id,
        entry_id=entry_id,
        delta=delta,
        new_balance=new_balance,
        booking_id=booking_ref,
    )
    return new_balance


def get_point_history(
    engine: Engine,
    user_id: int,
    filters: Optional[PointHistoryFilters] = None,
    *,
    clock: Clock = utc_now,
) -> PointHistoryPage:
    """
    Return one page of a user's ledger entries, newest first.

    Args:
        engine: SQLAlchemy engine
        user_id: User id
        filters: Date range, earned/spent, reason search and paging
        clock: Source of "now" for the date range

    Returns:
        PointHistoryPage: Entries plus pagination totals

    Raises:
        NotFound: If the user does not exist
    """
    filters = filters or PointHistoryFilters()
    since = ensure_utc(clock()) - timedelta(days=filters.days) if filters.days else None

    with engine.connect() as conn:
        if not user_exists(conn, user_id):
            raise NotFound(f"User {user_id} not found")
        rows, total = query_point_history(
            conn,
            user_id,
            since=since,
            direction=filters.type,
            search=filters.search,
            offset=filters.offset,
            limit=filters.limit,
        )

    entries = [
        PointLedgerRecord(
            id=row["id"],
            user_id=row["user_id"],
            delta=row["delta"],
            reason=row["reason"],
            booking_id=row["booking_id"],
            booking=(
                BookingSummary(
                    id=row["booking_id"],
                    kind=row["booking_kind"],
                    room=row["room_name"],
                    class_title=row["class_title"],
                )
                if row["booking_id"] is not None
                else None
            ),
            created_at=row["created_at"],
        )
        for row in rows
    ]

    return PointHistoryPage(
        points=entries,
        pagination=Pagination(
            page=filters.page,
            limit=filters.limit,
            total=total,
            pages=ceil(total / filters.limit),
        ),
    )
