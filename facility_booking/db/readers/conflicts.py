"""
Conflict detection for reservations.

A candidate interval conflicts with a resource when any booking on that
resource whose status is pending or confirmed overlaps it under the half-open
rule ``existing.starts_at < candidate.end AND candidate.start < existing.ends_at``.

These queries lock the rows they return. Callers must run them inside the
same write transaction that holds the resource lock and performs the
subsequent insert/update, so the check and the write are one atomic unit.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from facility_booking.models.bookings import Booking
from facility_booking.models.enums import ACTIVE_STATUSES, BookingKind
from facility_booking.utils.interval import TimeInterval

RESOURCE_COLUMNS = {
    BookingKind.ROOM: Booking.room_id,
    BookingKind.CLASS: Booking.class_schedule_id,
}


def find_conflicts(
    conn: Connection,
    kind: BookingKind,
    resource_id: int,
    interval: TimeInterval,
    exclude_reservation_id: Optional[int] = None,
) -> list[int]:
    """
    Return ids of active bookings on the resource overlapping ``interval``.

    Args:
        conn (Connection): Connection inside an open write transaction.
        kind (BookingKind): Resource kind.
        resource_id (int): Room id or class schedule id.
        interval (TimeInterval): Candidate interval.
        exclude_reservation_id (Optional[int]): Booking to ignore (the one being extended).

    Returns:
        list[int]: Conflicting booking ids, ascending.
    """
    kind = BookingKind(kind)
    resource_column = RESOURCE_COLUMNS[kind]

    stmt = (
        select(Booking.id)
        .where(Booking.kind == kind.value)
        .where(resource_column == resource_id)
        .where(Booking.status.in_([s.value for s in ACTIVE_STATUSES]))
        .where(Booking.starts_at < interval.end)
        .where(Booking.ends_at > interval.start)
    )
    if exclude_reservation_id is not None:
        stmt = stmt.where(Booking.id != exclude_reservation_id)

    stmt = stmt.order_by(Booking.id).with_for_update()

    return list(conn.execute(stmt).scalars().all())


def has_conflict(
    conn: Connection,
    kind: BookingKind,
    resource_id: int,
    interval: TimeInterval,
    exclude_reservation_id: Optional[int] = None,
) -> bool:
    """True if any active booking on the resource overlaps ``interval``."""
    return bool(find_conflicts(conn, kind, resource_id, interval, exclude_reservation_id))
