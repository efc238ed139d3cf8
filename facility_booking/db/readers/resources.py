"""Existence checks and row locks for bookable resources and users."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from facility_booking.models.class_schedules import ClassSchedule
from facility_booking.models.enums import BookingKind
from facility_booking.models.rooms import Room
from facility_booking.models.users import User
from facility_booking.utils.interval import TimeInterval

RESOURCE_TABLES = {
    BookingKind.ROOM: Room,
    BookingKind.CLASS: ClassSchedule,
}


def lock_resource(conn: Connection, kind: BookingKind, resource_id: int) -> bool:
    """
    Take the per-resource write lock by locking the resource's own row.

    Every Create/Extend on a resource locks this row before reading its
    bookings, so concurrent writers on the same room (or class schedule) queue
    up here even when there is no existing booking row to lock.

    Args:
        conn (Connection): Connection inside an open write transaction.
        kind (BookingKind): Resource kind (room or class).
        resource_id (int): Room id or class schedule id.

    Returns:
        bool: True if the resource exists (and is now locked), False otherwise.
    """
    table = RESOURCE_TABLES[BookingKind(kind)]
    row = conn.execute(
        select(table.id).where(table.id == resource_id).with_for_update()
    ).fetchone()
    return row is not None


def room_exists(conn: Connection, room_id: int) -> bool:
    """Unlocked existence check for availability reads."""
    row = conn.execute(select(Room.id).where(Room.id == room_id)).fetchone()
    return row is not None


def user_exists(conn: Connection, user_id: int) -> bool:
    row = conn.execute(select(User.id).where(User.id == user_id)).fetchone()
    return row is not None


def lock_user_balance(conn: Connection, user_id: int) -> Optional[int]:
    """
    Lock the user's row and return the current points balance.

    Args:
        conn (Connection): Connection inside an open write transaction.
        user_id (int): User id.

    Returns:
        Optional[int]: Current balance, or None if the user does not exist.
    """
    row = conn.execute(
        select(User.points_balance).where(User.id == user_id).with_for_update()
    ).fetchone()
    return row[0] if row else None


def get_points_balance(conn: Connection, user_id: int) -> Optional[int]:
    row = conn.execute(select(User.points_balance).where(User.id == user_id)).fetchone()
    return row[0] if row else None


def get_class_session_window(conn: Connection, schedule_id: int) -> Optional[TimeInterval]:
    """Return the ``[starts_at, ends_at)`` window of a class session, or None if it does not exist."""
    row = conn.execute(
        select(ClassSchedule.starts_at, ClassSchedule.ends_at).where(ClassSchedule.id == schedule_id)
    ).fetchone()
    return TimeInterval(row.starts_at, row.ends_at) if row else None
