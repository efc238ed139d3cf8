from fastapi import APIRouter, Depends, status
from sqlalchemy.engine import Engine

from facility_booking.dependencies import get_clock, get_db_engine
from facility_booking.routes._helpers import raise_http_error
from facility_booking.schemas.bookings import BookingCreatePayload, BookingExtendPayload
from facility_booking.schemas.records import PaymentRecord, Reservation
from facility_booking.services.payments import list_payments
from facility_booking.services.reservations import (
    cancel_booking,
    confirm_booking,
    create_class_booking,
    create_room_booking,
    extend_room_booking,
    get_reservation,
)
from facility_booking.utils.datetime import Clock

router = APIRouter()


@router.post(
    "/bookings/rooms/{room_id}/book",
    status_code=status.HTTP_201_CREATED,
    response_model=Reservation,
)
def book_room(
    room_id: int,
    payload: BookingCreatePayload,
    engine: Engine = Depends(get_db_engine),
    clock: Clock = Depends(get_clock),
) -> Reservation:
    """
    Place a pending hold on a room.

    Returns:
        Reservation: The new booking

    Errors:
        400 invalid interval, 409 time window not available,
        422 unknown room or user, 503 lock wait timed out (retry)
    """
    try:
        return create_room_booking(
            engine,
            user_id=payload.user_id,
            room_id=room_id,
            start=payload.start,
            end=payload.end,
            source=payload.source,
            deposit_amount=payload.deposit,
            clock=clock,
        )
    except Exception as e:
        raise_http_error(e, "room_booking_failed", room_id=room_id)


@router.post(
    "/bookings/classes/{schedule_id}/book",
    status_code=status.HTTP_201_CREATED,
    response_model=Reservation,
)
def book_class(
    schedule_id: int,
    payload: BookingCreatePayload,
    engine: Engine = Depends(get_db_engine),
    clock: Clock = Depends(get_clock),
) -> Reservation:
    """
    Place a pending hold on a class session.

    Errors:
        400 interval is not the session's window, 409 session already held,
        422 unknown class schedule or user, 503 lock wait timed out (retry)
    """
    try:
        return create_class_booking(
            engine,
            user_id=payload.user_id,
            class_schedule_id=schedule_id,
            start=payload.start,
            end=payload.end,
            source=payload.source,
            deposit_amount=payload.deposit,
            clock=clock,
        )
    except Exception as e:
        raise_http_error(e, "class_booking_failed", schedule_id=schedule_id)


@router.post("/bookings/{booking_id}/extend", status_code=status.HTTP_200_OK)
def extend_booking(
    booking_id: int,
    payload: BookingExtendPayload,
    engine: Engine = Depends(get_db_engine),
    clock: Clock = Depends(get_clock),
) -> dict[str, object]:
    """
    Extend a room booking in place.

    Errors:
        404 booking not found, 409 extension not available, 503 lock wait timed out
    """
    try:
        reservation = extend_room_booking(
            engine,
            reservation_id=booking_id,
            extra_minutes=payload.extra_minutes,
            amount=payload.amount,
            provider=payload.provider,
            clock=clock,
        )
    except Exception as e:
        raise_http_error(e, "booking_extend_failed", booking_id=booking_id)

    return {"ok": True, "booking": reservation.model_dump(mode="json")}


@router.post("/bookings/{booking_id}/confirm", response_model=Reservation)
def confirm(
    booking_id: int,
    engine: Engine = Depends(get_db_engine),
    clock: Clock = Depends(get_clock),
) -> Reservation:
    """Confirm a pending booking once its deposit or approval is settled."""
    try:
        return confirm_booking(engine, booking_id, clock=clock)
    except Exception as e:
        raise_http_error(e, "booking_confirm_failed", booking_id=booking_id)


@router.post("/bookings/{booking_id}/cancel", response_model=Reservation)
def cancel(
    booking_id: int,
    engine: Engine = Depends(get_db_engine),
    clock: Clock = Depends(get_clock),
) -> Reservation:
    """Cancel a booking. Safe to repeat."""
    try:
        return cancel_booking(engine, booking_id, clock=clock)
    except Exception as e:
        raise_http_error(e, "booking_cancel_failed", booking_id=booking_id)


@router.get("/bookings/{booking_id}", response_model=Reservation)
def get_booking_endpoint(booking_id: int, engine: Engine = Depends(get_db_engine)) -> Reservation:
    try:
        return get_reservation(engine, booking_id)
    except Exception as e:
        raise_http_error(e, "booking_read_failed", booking_id=booking_id)


@router.get("/bookings/{booking_id}/payments", response_model=list[PaymentRecord])
def get_booking_payments(
    booking_id: int, engine: Engine = Depends(get_db_engine)
) -> list[PaymentRecord]:
    try:
        return list_payments(engine, booking_id)
    except Exception as e:
        raise_http_error(e, "booking_payments_read_failed", booking_id=booking_id)
