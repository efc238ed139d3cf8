from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from facility_booking.models.payments import Payment


def get_payment(conn: Connection, payment_id: int, lock: bool = False) -> Optional[dict[str, Any]]:
    """
    Fetch a payment row by id.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        payment_id (int): Payment id.
        lock (bool): If True, lock the row for the rest of the transaction.

    Returns:
        Optional[dict[str, Any]]: Payment columns, or None if not found.
    """
    stmt = select(Payment).where(Payment.id == payment_id)
    if lock:
        stmt = stmt.with_for_update()
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def list_booking_payments(conn: Connection, booking_id: int) -> list[dict[str, Any]]:
    stmt = select(Payment).where(Payment.booking_id == booking_id).order_by(Payment.id)
    return [dict(row) for row in conn.execute(stmt).mappings().all()]
