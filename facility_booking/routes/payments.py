from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from facility_booking.dependencies import get_clock, get_db_engine
from facility_booking.routes._helpers import raise_http_error
from facility_booking.schemas.payments import PaymentSettlePayload
from facility_booking.schemas.records import PaymentRecord
from facility_booking.services.payments import mark_settled
from facility_booking.utils.datetime import Clock

router = APIRouter()


@router.post("/payments/{payment_id}/settle", response_model=PaymentRecord)
def settle_payment(
    payment_id: int,
    payload: PaymentSettlePayload,
    engine: Engine = Depends(get_db_engine),
    clock: Clock = Depends(get_clock),
) -> PaymentRecord:
    """
    Record a payment-provider settlement.

    Does not confirm the owning booking; that is a separate call to
    ``POST /bookings/{id}/confirm``.
    """
    try:
        return mark_settled(engine, payment_id, payload.outcome, clock=clock)
    except Exception as e:
        raise_http_error(e, "payment_settle_failed", payment_id=payment_id)
