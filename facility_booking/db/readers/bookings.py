from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from facility_booking.models.bookings import Booking
from facility_booking.models.enums import ACTIVE_STATUSES, BookingKind
from facility_booking.utils.interval import TimeInterval


def get_booking(conn: Connection, booking_id: int, lock: bool = False) -> Optional[dict[str, Any]]:
    """
    Fetch a booking row by id.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        booking_id (int): Booking id.
        lock (bool): If True, lock the row for the rest of the transaction.

    Returns:
        Optional[dict[str, Any]]: Booking columns, or None if not found.
    """
    stmt = select(Booking).where(Booking.id == booking_id)
    if lock:
        stmt = stmt.with_for_update()
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def list_active_room_bookings(
    conn: Connection, room_id: int, window: TimeInterval
) -> list[dict[str, Any]]:
    """
    List pending/confirmed bookings of a room overlapping ``window``.

    Unlocked read used for availability; it reflects committed state only.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        room_id (int): Room id.
        window (TimeInterval): Window to inspect.

    Returns:
        list[dict[str, Any]]: Booking rows ordered by start time.
    """
    stmt = (
        select(Booking)
        .where(Booking.kind == BookingKind.ROOM.value)
        .where(Booking.room_id == room_id)
        .where(Booking.status.in_([s.value for s in ACTIVE_STATUSES]))
        .where(Booking.starts_at < window.end)
        .where(Booking.ends_at > window.start)
        .order_by(Booking.starts_at, Booking.id)
    )
    return [dict(row) for row in conn.execute(stmt).mappings().all()]
