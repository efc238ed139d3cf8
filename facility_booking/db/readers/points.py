from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Connection

from facility_booking.models.bookings import Booking
from facility_booking.models.class_schedules import ClassSchedule
from facility_booking.models.points import PointsLedgerEntry
from facility_booking.models.rooms import Room


def query_point_history(
    conn: Connection,
    user_id: int,
    since: Optional[datetime] = None,
    direction: Optional[str] = None,
    search: Optional[str] = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[dict[str, Any]], int]:
    """
    Fetch one page of a user's ledger entries plus the total matching count.

    Entries are returned newest first, each joined to the booking it
    references (if any) so callers can show the room or class name.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        user_id (int): User id.
        since (Optional[datetime]): Only entries created at or after this instant.
        direction (Optional[str]): "earned" (delta > 0) or "spent" (delta < 0).
        search (Optional[str]): Case-insensitive substring of the reason.
        offset (int): Rows to skip.
        limit (int): Page size.

    Returns:
        tuple[list[dict[str, Any]], int]: Page rows and total count.
    """
    conditions = [PointsLedgerEntry.user_id == user_id]
    if since is not None:
        conditions.append(PointsLedgerEntry.created_at >= since)
    if direction == "earned":
        conditions.append(PointsLedgerEntry.delta > 0)
    elif direction == "spent":
        conditions.append(PointsLedgerEntry.delta < 0)
    if search:
        conditions.append(PointsLedgerEntry.reason.icontains(search, autoescape=True))

    total = conn.execute(
        select(func.count()).select_from(PointsLedgerEntry).where(*conditions)
    ).scalar_one()

    stmt = (
        select(
            PointsLedgerEntry.id,
            PointsLedgerEntry.user_id,
            PointsLedgerEntry.delta,
            PointsLedgerEntry.reason,
            PointsLedgerEntry.booking_id,
            PointsLedgerEntry.created_at,
            Booking.kind.label("booking_kind"),
            Room.name.label("room_name"),
            ClassSchedule.title.label("class_title"),
        )
        .outerjoin(Booking, Booking.id == PointsLedgerEntry.booking_id)
        .outerjoin(Room, Room.id == Booking.room_id)
        .outerjoin(ClassSchedule, ClassSchedule.id == Booking.class_schedule_id)
        .where(*conditions)
        .order_by(PointsLedgerEntry.created_at.desc(), PointsLedgerEntry.id.desc())
        .offset(offset)
        .limit(limit)
    )
    rows = [dict(row) for row in conn.execute(stmt).mappings().all()]
    return rows, total


def sum_ledger_deltas(conn: Connection, user_id: int) -> int:
    """Sum of every ledger delta for the user (0 when there are none)."""
    result = conn.execute(
        select(func.coalesce(func.sum(PointsLedgerEntry.delta), 0)).where(
            PointsLedgerEntry.user_id == user_id
        )
    ).scalar_one()
    return int(result)
