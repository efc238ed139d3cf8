from datetime import datetime
from decimal import Decimal

from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from facility_booking.models.enums import PaymentStatus, PaymentType
from facility_booking.models.payments import Payment


def insert_payment(
    conn: Connection,
    booking_id: int,
    amount: Decimal,
    currency: str,
    payment_type: PaymentType,
    provider: str,
    now: datetime,
) -> int:
    """
    Insert a pending payment record for a booking.

    Args:
        conn (Connection): Connection inside the booking's write transaction.
        booking_id (int): Owning booking id.
        amount (Decimal): Positive amount.
        currency (str): ISO currency code.
        payment_type (PaymentType): deposit or balance.
        provider (str): Payment provider name.
        now (datetime): Creation timestamp.

    Returns:
        int: New payment id.
    """
    result = conn.execute(
        insert(Payment).values(
            booking_id=booking_id,
            amount=amount,
            currency=currency,
            type=PaymentType(payment_type).value,
            provider=provider,
            status=PaymentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
    )
    return int(result.inserted_primary_key[0])


def update_payment_status(
    conn: Connection, payment_id: int, status: PaymentStatus, now: datetime
) -> bool:
    """
    Settle a pending payment.

    Returns:
        bool: True if the row was still pending and has been updated.
    """
    result = conn.execute(
        update(Payment)
        .where(Payment.id == payment_id)
        .where(Payment.status == PaymentStatus.PENDING.value)
        .values(status=PaymentStatus(status).value, updated_at=now)
    )
    return result.rowcount == 1
