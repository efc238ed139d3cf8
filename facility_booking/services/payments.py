"""
Payment record correlator.

Creates payment obligations (deposit, balance top-up) for a booking and
records their settlement. It never talks to a payment provider and never
changes the owning booking's status: a paid deposit does not confirm a
booking on its own, confirmation is a separate call (see
``services.reservations.confirm_booking``).
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

import structlog
from sqlalchemy.engine import Connection, Engine

from facility_booking.db.readers.bookings import get_booking
from facility_booking.db.readers.payments import get_payment, list_booking_payments
from facility_booking.db.transactions import write_transaction
from facility_booking.db.writers.payments import insert_payment, update_payment_status
from facility_booking.errors import InvalidAmount, InvalidTransition, NotFound
from facility_booking.metrics import track_operation
from facility_booking.models.enums import PaymentStatus, PaymentType
from facility_booking.schemas.records import PaymentRecord
from facility_booking.utils.datetime import Clock, ensure_utc, utc_now

logger = structlog.get_logger(__name__)

Amount = Union[int, str, Decimal]


def to_amount(amount: Amount) -> Decimal:
    """
    Coerce an amount to a positive Decimal.

    Raises:
        InvalidAmount: If the amount is not a number or is <= 0
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmount(f"Invalid amount: {amount!r}") from e
    if not value.is_finite() or value <= 0:
        raise InvalidAmount("Payment amount must be positive", details={"amount": str(amount)})
    return value


def is_chargeable(amount: Optional[Amount]) -> bool:
    """
    Whether an optional create/extend amount asks for a payment record.

    None, zero and negative amounts mean "nothing to charge" and are skipped
    rather than attached.

    Raises:
        InvalidAmount: If the amount is not a number
    """
    if amount is None:
        return False
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmount(f"Invalid amount: {amount!r}") from e
    return value.is_finite() and value > 0


def attach_payment(
    conn: Connection,
    reservation_id: int,
    amount: Amount,
    currency: str,
    payment_type: PaymentType,
    provider: str,
    now: datetime,
) -> PaymentRecord:
    """
    Create a pending payment record linked to a booking.

    Runs inside the caller's write transaction so the record commits (or rolls
    back) together with the booking change that required it. Callers skip the
    call entirely when there is nothing to charge.

    Args:
        conn: Connection inside the booking's write transaction
        reservation_id: Owning booking id
        amount: Positive amount
        currency: Currency code
        payment_type: deposit or balance
        provider: Payment provider name
        now: Creation timestamp

    Returns:
        PaymentRecord: The created record (status=pending)

    Raises:
        InvalidAmount: If amount <= 0
    """
    value = to_amount(amount)
    payment_id = insert_payment(
        conn,
        booking_id=reservation_id,
        amount=value,
        currency=currency,
        payment_type=PaymentType(payment_type),
        provider=provider,
        now=now,
    )
    row = get_payment(conn, payment_id)
    assert row is not None

    logger.info(
        "payment_attached",
        payment_id=payment_id,
        booking_id=reservation_id,
        type=PaymentType(payment_type).value,
        amount=str(value),
        currency=currency,
        provider=provider,
    )
    return PaymentRecord.model_validate(row)


def mark_settled(
    engine: Engine,
    payment_id: int,
    outcome: Union[PaymentStatus, str],
    *,
    clock: Clock = utc_now,
) -> PaymentRecord:
    """
    Record the provider's settlement outcome for a payment.

    Only pending payments can be settled. Repeating the outcome a payment
    already has is a no-op; asking for the other outcome is rejected.

    Args:
        engine: SQLAlchemy engine
        payment_id: Payment id
        outcome: paid or failed
        clock: Source of "now"

    Returns:
        PaymentRecord: The payment after settlement

    Raises:
        NotFound: If the payment does not exist
        InvalidTransition: If outcome is not paid/failed or conflicts with a prior settlement
    """
    try:
        target = PaymentStatus(outcome)
    except ValueError as e:
        raise InvalidTransition(f"Unknown settlement outcome: {outcome!r}") from e
    if target is PaymentStatus.PENDING:
        raise InvalidTransition("Settlement outcome must be paid or failed")

    with track_operation("settle"):
        with write_transaction(engine, operation="settle") as conn:
            row = get_payment(conn, payment_id, lock=True)
            if not row:
                raise NotFound(f"Payment {payment_id} not found")

            current = PaymentStatus(row["status"])
            if current is target:
                return PaymentRecord.model_validate(row)
            if current is not PaymentStatus.PENDING:
                raise InvalidTransition(
                    f"Payment {payment_id} already settled as {current.value}",
                    details={"payment_id": payment_id, "status": current.value},
                )

            update_payment_status(conn, payment_id, target, ensure_utc(clock()))
            updated = get_payment(conn, payment_id)

    logger.info(
        "payment_settled",
        payment_id=payment_id,
        booking_id=row["booking_id"],
        status=target.value,
    )
    return PaymentRecord.model_validate(updated)


def list_payments(engine: Engine, reservation_id: int) -> list[PaymentRecord]:
    """
    List the payment records of a booking, oldest first.

    Raises:
        NotFound: If the booking does not exist
    """
    with engine.connect() as conn:
        if get_booking(conn, reservation_id) is None:
            raise NotFound(f"Booking {reservation_id} not found")
        rows = list_booking_payments(conn, reservation_id)
    return [PaymentRecord.model_validate(row) for row in rows]
