"""
Integration tests for payment records and settlement.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.engine import Engine

from facility_booking.db.transactions import write_transaction
from facility_booking.errors import InvalidAmount, InvalidTransition, NotFound
from facility_booking.models.enums import BookingSource, BookingStatus, PaymentStatus, PaymentType
from facility_booking.services.payments import attach_payment, list_payments, mark_settled
from facility_booking.services.reservations import create_room_booking, get_reservation


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 6, 1, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def reservation(db_engine: Engine, user_id: int, room_id: int, clock):
    return create_room_booking(
        db_engine, user_id, room_id, at(10), at(11), BookingSource.WEB, deposit_amount=5000, clock=clock
    )


@pytest.mark.integration
def test_settle_marks_payment_paid_without_confirming(db_engine: Engine, reservation, clock) -> None:
    deposit = list_payments(db_engine, reservation.id)[0]

    settled = mark_settled(db_engine, deposit.id, "paid", clock=clock)

    assert settled.status is PaymentStatus.PAID
    assert get_reservation(db_engine, reservation.id).status is BookingStatus.PENDING


@pytest.mark.integration
def test_settle_same_outcome_is_idempotent(db_engine: Engine, reservation, clock) -> None:
    deposit = list_payments(db_engine, reservation.id)[0]
    mark_settled(db_engine, deposit.id, PaymentStatus.FAILED, clock=clock)

    again = mark_settled(db_engine, deposit.id, PaymentStatus.FAILED, clock=clock)

    assert again.status is PaymentStatus.FAILED


@pytest.mark.integration
def test_settle_conflicting_outcome_is_rejected(db_engine: Engine, reservation, clock) -> None:
    deposit = list_payments(db_engine, reservation.id)[0]
    mark_settled(db_engine, deposit.id, "paid", clock=clock)

    with pytest.raises(InvalidTransition):
        mark_settled(db_engine, deposit.id, "failed", clock=clock)


@pytest.mark.integration
@pytest.mark.parametrize("outcome", ["pending", "refunded"])
def test_settle_requires_paid_or_failed(db_engine: Engine, reservation, clock, outcome: str) -> None:
    deposit = list_payments(db_engine, reservation.id)[0]

    with pytest.raises(InvalidTransition):
        mark_settled(db_engine, deposit.id, outcome, clock=clock)


@pytest.mark.integration
def test_settle_missing_payment_is_not_found(db_engine: Engine, clock) -> None:
    with pytest.raises(NotFound):
        mark_settled(db_engine, 404, "paid", clock=clock)


@pytest.mark.integration
def test_attach_payment_rejects_non_positive_amount(db_engine: Engine, reservation, clock) -> None:
    with pytest.raises(InvalidAmount):
        with write_transaction(db_engine, operation="attach") as conn:
            attach_payment(
                conn, reservation.id, 0, "MMK", PaymentType.BALANCE, "KBZPay", clock()
            )

    assert len(list_payments(db_engine, reservation.id)) == 1


@pytest.mark.integration
def test_payments_listed_oldest_first(db_engine: Engine, reservation, clock) -> None:
    with write_transaction(db_engine, operation="attach") as conn:
        attach_payment(conn, reservation.id, "1500.50", "MMK", PaymentType.BALANCE, "WavePay", clock())

    payments = list_payments(db_engine, reservation.id)

    assert [p.type for p in payments] == [PaymentType.DEPOSIT, PaymentType.BALANCE]
    assert payments[1].amount == Decimal("1500.50")
    assert payments[1].provider == "WavePay"


@pytest.mark.integration
def test_list_payments_for_missing_booking_is_not_found(db_engine: Engine) -> None:
    with pytest.raises(NotFound):
        list_payments(db_engine, 999)
