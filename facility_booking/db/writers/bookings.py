from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from facility_booking.models.bookings import Booking
from facility_booking.models.enums import BookingKind, BookingSource, BookingStatus
from facility_booking.utils.interval import TimeInterval


def insert_booking(
    conn: Connection,
    user_id: int,
    kind: BookingKind,
    resource_id: int,
    interval: TimeInterval,
    source: BookingSource,
    holds_expires_at: Optional[datetime],
    now: datetime,
) -> int:
    """
    Insert a new pending booking.

    Args:
        conn (Connection): Connection inside an open write transaction.
        user_id (int): Owning user id.
        kind (BookingKind): room or class.
        resource_id (int): Room id or class schedule id (matching ``kind``).
        interval (TimeInterval): Booked interval.
        source (BookingSource): Channel the booking came from.
        holds_expires_at (Optional[datetime]): End of the provisional hold.
        now (datetime): Creation timestamp.

    Returns:
        int: New booking id.
    """
    kind = BookingKind(kind)
    result = conn.execute(
        insert(Booking).values(
            user_id=user_id,
            kind=kind.value,
            room_id=resource_id if kind is BookingKind.ROOM else None,
            class_schedule_id=resource_id if kind is BookingKind.CLASS else None,
            status=BookingStatus.PENDING.value,
            source=BookingSource(source).value,
            starts_at=interval.start,
            ends_at=interval.end,
            holds_expires_at=holds_expires_at,
            created_at=now,
            updated_at=now,
        )
    )
    return int(result.inserted_primary_key[0])


def update_booking_end(conn: Connection, booking_id: int, ends_at: datetime, now: datetime) -> None:
    """
    Move a booking's end time (extension in place).

    Args:
        conn (Connection): Connection inside an open write transaction.
        booking_id (int): Booking id.
        ends_at (datetime): New exclusive end.
        now (datetime): Update timestamp.
    """
    conn.execute(
        update(Booking).where(Booking.id == booking_id).values(ends_at=ends_at, updated_at=now)
    )


def transition_status(
    conn: Connection,
    booking_id: int,
    from_statuses: Iterable[BookingStatus],
    to_status: BookingStatus,
    now: datetime,
) -> bool:
    """
    Compare-and-set a booking's status.

    The UPDATE only matches while the row is still in one of
    ``from_statuses``, so a concurrent transition can never be overwritten.

    Args:
        conn (Connection): Connection inside an open write transaction.
        booking_id (int): Booking id.
        from_statuses (Iterable[BookingStatus]): Statuses the row may currently be in.
        to_status (BookingStatus): Target status.
        now (datetime): Update timestamp.

    Returns:
        bool: True if the row was transitioned.
    """
    result = conn.execute(
        update(Booking)
        .where(Booking.id == booking_id)
        .where(Booking.status.in_([s.value for s in from_statuses]))
        .values(status=to_status.value, updated_at=now)
    )
    return result.rowcount == 1


def cancel_expired_holds(conn: Connection, now: datetime) -> int:
    """
    Cancel every pending booking whose hold has expired.

    Confirmed, completed and already-canceled bookings are never matched.

    Returns:
        int: Number of bookings canceled.
    """
    result = conn.execute(
        update(Booking)
        .where(Booking.status == BookingStatus.PENDING.value)
        .where(Booking.holds_expires_at.is_not(None))
        .where(Booking.holds_expires_at <= now)
        .values(status=BookingStatus.CANCELED.value, updated_at=now)
    )
    return result.rowcount


def complete_elapsed_bookings(conn: Connection, now: datetime) -> int:
    """
    Mark every confirmed booking whose interval has ended as completed.

    Returns:
        int: Number of bookings completed.
    """
    result = conn.execute(
        update(Booking)
        .where(Booking.status == BookingStatus.CONFIRMED.value)
        .where(Booking.ends_at <= now)
        .values(status=BookingStatus.COMPLETED.value, updated_at=now)
    )
    return result.rowcount
