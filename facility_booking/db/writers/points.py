from datetime import datetime
from typing import Optional

from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from facility_booking.models.points import PointsLedgerEntry
from facility_booking.models.users import User


def insert_ledger_entry(
    conn: Connection,
    user_id: int,
    delta: int,
    reason: str,
    booking_id: Optional[int],
    now: datetime,
) -> int:
    """
    Append a ledger entry. Must share a transaction with increment_points_balance.

    Returns:
        int: New ledger entry id.
    """
    result = conn.execute(
        insert(PointsLedgerEntry).values(
            user_id=user_id,
            delta=delta,
            reason=reason,
            booking_id=booking_id,
            created_at=now,
        )
    )
    return int(result.inserted_primary_key[0])


def increment_points_balance(conn: Connection, user_id: int, delta: int, now: datetime) -> None:
    """Apply ``delta`` to the cached balance in SQL (no read-modify-write in Python)."""
    conn.execute(
        update(User)
        .where(User.id == user_id)
        .values(points_balance=User.points_balance + delta, updated_at=now)
    )
