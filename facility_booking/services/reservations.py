"""
Reservation lifecycle for room and class-session bookings.

State machine::

    pending   --confirm-->          confirmed
    pending   --hold expiry/cancel--> canceled
    confirmed --cancel-->           canceled
    confirmed --time elapses-->     completed
    pending/confirmed --extend-->   same state, ends_at moved

canceled and completed are terminal. Create and Extend lock the resource row,
run the conflict detector and write in one transaction, so two overlapping
requests for the same resource can never both succeed.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

import structlog
from sqlalchemy.engine import Connection, Engine

from facility_booking.config import (
    DEFAULT_CURRENCY,
    DEFAULT_PAYMENT_PROVIDER,
    HOLD_WINDOW_MINUTES,
)
from facility_booking.db.readers.bookings import get_booking, list_active_room_bookings
from facility_booking.db.readers.conflicts import find_conflicts
from facility_booking.db.readers.resources import (
    get_class_session_window,
    lock_resource,
    room_exists,
    user_exists,
)
from facility_booking.db.transactions import write_transaction
from facility_booking.db.writers.bookings import insert_booking, transition_status, update_booking_end
from facility_booking.errors import (
    InvalidInterval,
    InvalidReference,
    InvalidTransition,
    NotFound,
    ScheduleConflict,
)
from facility_booking.metrics import track_operation
from facility_booking.models.enums import (
    ACTIVE_STATUSES,
    BookingKind,
    BookingSource,
    BookingStatus,
    PaymentType,
)
from facility_booking.schemas.records import Reservation
from facility_booking.services.payments import Amount, attach_payment, is_chargeable
from facility_booking.utils.datetime import Clock, ensure_utc, utc_now
from facility_booking.utils.interval import TimeInterval

logger = structlog.get_logger(__name__)

HOLD_WINDOW = timedelta(minutes=HOLD_WINDOW_MINUTES)


def _load(conn: Connection, booking_id: int, lock: bool = False) -> Reservation:
    row = get_booking(conn, booking_id, lock=lock)
    if not row:
        raise NotFound(f"Booking {booking_id} not found")
    return Reservation.model_validate(row)


def _raise_conflict(
    kind: BookingKind, resource_id: int, interval: TimeInterval, conflicting_ids: list[int]
) -> None:
    logger.info(
        "booking_conflict",
        kind=kind.value,
        resource_id=resource_id,
        starts_at=interval.start.isoformat(),
        ends_at=interval.end.isoformat(),
        conflicting_ids=conflicting_ids,
    )
    raise ScheduleConflict(
        "Time window not available",
        details={
            "kind": kind.value,
            "resource_id": resource_id,
            "conflicting_booking_ids": conflicting_ids,
        },
    )


def _check_session_window(conn: Connection, schedule_id: int, interval: TimeInterval) -> None:
    session = get_class_session_window(conn, schedule_id)
    if session is not None and session != interval:
        raise InvalidInterval(
            f"Class {schedule_id} runs from {session.start.isoformat()} to {session.end.isoformat()}",
            details={
                "class_schedule_id": schedule_id,
                "session_starts_at": session.start.isoformat(),
                "session_ends_at": session.end.isoformat(),
            },
        )


def create_reservation(
    engine: Engine,
    user_id: int,
    kind: BookingKind,
    resource_id: int,
    interval: TimeInterval,
    source: BookingSource,
    deposit_amount: Optional[Amount] = None,
    *,
    clock: Clock = utc_now,
    provider: str = DEFAULT_PAYMENT_PROVIDER,
    currency: str = DEFAULT_CURRENCY,
    hold_window: timedelta = HOLD_WINDOW,
) -> Reservation:
    """
    Reserve ``interval`` on a resource as a pending hold.

    Args:
        engine: SQLAlchemy engine
        user_id: Booking owner
        kind: room or class
        resource_id: Room id or class schedule id
        interval: Requested interval
        source: web, mobile or walkin
        deposit_amount: Deposit to request; a positive amount creates a pending deposit record
        clock: Source of "now"
        provider: Provider recorded on the deposit
        currency: Currency recorded on the deposit
        hold_window: How long the hold lasts without confirmation

    Returns:
        Reservation: The new booking (status=pending)

    Raises:
        InvalidReference: If the resource or user does not exist
        InvalidInterval: If a class booking's interval is not its session's window
        ScheduleConflict: If an active booking overlaps the interval
        LockTimeout: If the resource lock was not acquired in time
    """
    kind = BookingKind(kind)
    source = BookingSource(source)

    with track_operation("create"):
        with write_transaction(engine, operation="create") as conn:
            if not lock_resource(conn, kind, resource_id):
                raise InvalidReference(
                    f"{kind.value.capitalize()} {resource_id} does not exist",
                    details={"kind": kind.value, "resource_id": resource_id},
                )
            if kind is BookingKind.CLASS:
                _check_session_window(conn, resource_id, interval)
            if not user_exists(conn, user_id):
                raise InvalidReference(
                    f"User {user_id} does not exist", details={"user_id": user_id}
                )

            conflicting_ids = find_conflicts(conn, kind, resource_id, interval)
            if conflicting_ids:
                _raise_conflict(kind, resource_id, interval, conflicting_ids)

            now = ensure_utc(clock())
            booking_id = insert_booking(
                conn,
                user_id=user_id,
                kind=kind,
                resource_id=resource_id,
                interval=interval,
                source=source,
                holds_expires_at=now + hold_window,
                now=now,
            )

            if is_chargeable(deposit_amount):
                attach_payment(
                    conn,
                    reservation_id=booking_id,
                    amount=deposit_amount,
                    currency=currency,
                    payment_type=PaymentType.DEPOSIT,
                    provider=provider,
                    now=now,
                )

            reservation = _load(conn, booking_id)

    logger.info(
        "booking_created",
        booking_id=reservation.id,
        user_id=user_id,
        kind=kind.value,
        resource_id=resource_id,
        starts_at=reservation.starts_at.isoformat(),
        ends_at=reservation.ends_at.isoformat(),
        source=source.value,
    )
    return reservation


def create_room_booking(
    engine: Engine,
    user_id: int,
    room_id: int,
    start: datetime,
    end: datetime,
    source: BookingSource,
    deposit_amount: Optional[Amount] = None,
    *,
    clock: Clock = utc_now,
) -> Reservation:
    """
    Book a room for ``[start, end)``.

    Raises:
        InvalidInterval: If end <= start
        InvalidReference: If the room or user does not exist
        ScheduleConflict: If the room is already held for an overlapping interval
    """
    interval = TimeInterval(start, end)
    return create_reservation(
        engine,
        user_id=user_id,
        kind=BookingKind.ROOM,
        resource_id=room_id,
        interval=interval,
        source=source,
        deposit_amount=deposit_amount,
        clock=clock,
    )


def create_class_booking(
    engine: Engine,
    user_id: int,
    class_schedule_id: int,
    start: datetime,
    end: datetime,
    source: BookingSource,
    deposit_amount: Optional[Amount] = None,
    *,
    clock: Clock = utc_now,
) -> Reservation:
    """
    Book a class session.

    ``[start, end)`` must be the session's own window; conflicts are keyed by
    class schedule id, so a session holds at most one active booking.

    Raises:
        InvalidInterval: If end <= start or the interval is not the session's window
        InvalidReference: If the class schedule or user does not exist
        ScheduleConflict: If the session already has an active booking
    """
    interval = TimeInterval(start, end)
    return create_reservation(
        engine,
        user_id=user_id,
        kind=BookingKind.CLASS,
        resource_id=class_schedule_id,
        interval=interval,
        source=source,
        deposit_amount=deposit_amount,
        clock=clock,
    )


def extend_room_booking(
    engine: Engine,
    reservation_id: int,
    extra_minutes: int,
    amount: Optional[Amount] = None,
    provider: Optional[str] = None,
    *,
    clock: Clock = utc_now,
    currency: str = DEFAULT_CURRENCY,
) -> Reservation:
    """
    Push a room booking's end time out by ``extra_minutes``.

    The full ``[starts_at, new_end)`` span is checked against the room's other
    active bookings; the booking's own row is excluded, so only the added tail
    can actually conflict.

    Args:
        engine: SQLAlchemy engine
        reservation_id: Booking id
        extra_minutes: Minutes to add (must be positive)
        amount: Balance top-up to request; a positive amount creates a pending balance record
        provider: Provider recorded on the top-up (defaults to DEFAULT_PAYMENT_PROVIDER)
        clock: Source of "now"
        currency: Currency recorded on the top-up

    Returns:
        Reservation: The booking with its new end time

    Raises:
        InvalidInterval: If extra_minutes is not positive
        NotFound: If the booking does not exist or is not a room booking
        InvalidTransition: If the booking is canceled or completed
        ScheduleConflict: If the extended span overlaps another active booking
    """
    if isinstance(extra_minutes, bool) or not isinstance(extra_minutes, int) or extra_minutes <= 0:
        raise InvalidInterval("extra_minutes must be a positive integer")

    with track_operation("extend"):
        with write_transaction(engine, operation="extend") as conn:
            row = get_booking(conn, reservation_id)
            if not row or row["kind"] != BookingKind.ROOM.value:
                raise NotFound(f"Booking {reservation_id} not found")
            room_id = row["room_id"]

            # Resource lock first, then re-read the booking under it
            lock_resource(conn, BookingKind.ROOM, room_id)
            current = _load(conn, reservation_id, lock=True)
            if current.is_terminal:
                raise InvalidTransition(
                    f"Booking {reservation_id} is {current.status.value} and cannot be extended",
                    details={"booking_id": reservation_id, "status": current.status.value},
                )

            extended = current.interval.extend(timedelta(minutes=extra_minutes))
            conflicting_ids = find_conflicts(
                conn,
                BookingKind.ROOM,
                room_id,
                extended,
                exclude_reservation_id=reservation_id,
            )
            if conflicting_ids:
                _raise_conflict(BookingKind.ROOM, room_id, extended, conflicting_ids)

            now = ensure_utc(clock())
            update_booking_end(conn, reservation_id, extended.end, now)

            if is_chargeable(amount):
                attach_payment(
                    conn,
                    reservation_id=reservation_id,
                    amount=amount,
                    currency=currency,
                    payment_type=PaymentType.BALANCE,
                    provider=provider or DEFAULT_PAYMENT_PROVIDER,
                    now=now,
                )

            reservation = _load(conn, reservation_id)

    logger.info(
        "booking_extended",
        booking_id=reservation_id,
        room_id=room_id,
        extra_minutes=extra_minutes,
        ends_at=reservation.ends_at.isoformat(),
    )
    return reservation


def cancel_booking(engine: Engine, reservation_id: int, *, clock: Clock = utc_now) -> Reservation:
    """
    Cancel a pending or confirmed booking.

    Cancelling an already canceled booking is a no-op. The row and its payment
    records are kept.

    Raises:
        NotFound: If the booking does not exist
        InvalidTransition: If the booking is completed
    """
    with track_operation("cancel"):
        with write_transaction(engine, operation="cancel") as conn:
            current = _load(conn, reservation_id, lock=True)

            if current.status is BookingStatus.CANCELED:
                return current
            if current.status is BookingStatus.COMPLETED:
                raise InvalidTransition(
                    f"Booking {reservation_id} is completed and cannot be canceled",
                    details={"booking_id": reservation_id, "status": current.status.value},
                )

            now = ensure_utc(clock())
            transition_status(conn, reservation_id, ACTIVE_STATUSES, BookingStatus.CANCELED, now)
            reservation = _load(conn, reservation_id)

    logger.info("booking_canceled", booking_id=reservation_id, previous_status=current.status.value)
    return reservation


def confirm_booking(engine: Engine, reservation_id: int, *, clock: Clock = utc_now) -> Reservation:
    """
    Confirm a pending booking (pending -> confirmed).

    Triggered explicitly by the surrounding system once deposit or approval is
    settled; payment settlement alone never confirms. Confirming an already
    confirmed booking is a no-op. A hold whose expiry has passed cannot be
    confirmed even if the sweep has not canceled it yet.

    Raises:
        NotFound: If the booking does not exist
        InvalidTransition: If the booking is terminal or its hold has expired
    """
    with track_operation("confirm"):
        with write_transaction(engine, operation="confirm") as conn:
            current = _load(conn, reservation_id, lock=True)

            if current.status is BookingStatus.CONFIRMED:
                return current
            if current.status is not BookingStatus.PENDING:
                raise InvalidTransition(
                    f"Booking {reservation_id} is {current.status.value} and cannot be confirmed",
                    details={"booking_id": reservation_id, "status": current.status.value},
                )

            now = ensure_utc(clock())
            if current.holds_expires_at is not None and current.holds_expires_at <= now:
                raise InvalidTransition(
                    f"Hold on booking {reservation_id} has expired",
                    details={
                        "booking_id": reservation_id,
                        "holds_expires_at": current.holds_expires_at.isoformat(),
                    },
                )

            transition_status(
                conn, reservation_id, [BookingStatus.PENDING], BookingStatus.CONFIRMED, now
            )
            reservation = _load(conn, reservation_id)

    logger.info("booking_confirmed", booking_id=reservation_id)
    return reservation


def get_reservation(engine: Engine, reservation_id: int) -> Reservation:
    """
    Read a booking without locking.

    Raises:
        NotFound: If the booking does not exist
    """
    with engine.connect() as conn:
        return _load(conn, reservation_id)


def get_room_availability(engine: Engine, room_id: int, window: TimeInterval) -> list[Reservation]:
    """
    List the active (pending/confirmed) bookings of a room overlapping ``window``.

    Unlocked, eventually consistent read: it never blocks writers and may miss
    a booking that commits after the query starts.

    Raises:
        NotFound: If the room does not exist
    """
    with engine.connect() as conn:
        if not room_exists(conn, room_id):
            raise NotFound(f"Room {room_id} not found")
        rows = list_active_room_bookings(conn, room_id, window)
    return [Reservation.model_validate(row) for row in rows]
