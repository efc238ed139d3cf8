"""
Time-driven housekeeping for reservations.

- expire_holds: pending bookings whose hold expired -> canceled
- complete_elapsed: confirmed bookings whose interval ended -> completed

Both are single guarded UPDATEs, so they only ever flip rows that are still
in the source state and can run on any schedule alongside request traffic.
An expired hold keeps blocking its interval until the sweep cancels it.
"""

from __future__ import annotations

import structlog
from sqlalchemy.engine import Engine

from facility_booking.db.transactions import write_transaction
from facility_booking.db.writers.bookings import cancel_expired_holds, complete_elapsed_bookings
from facility_booking.metrics import sweep_transitions
from facility_booking.utils.datetime import Clock, ensure_utc, utc_now

logger = structlog.get_logger(__name__)


def expire_holds(engine: Engine, *, clock: Clock = utc_now) -> int:
    """
    Cancel pending bookings whose hold expiry has passed.

    Args:
        engine: SQLAlchemy engine
        clock: Source of "now"

    Returns:
        int: Number of holds canceled
    """
    now = ensure_utc(clock())
    with write_transaction(engine, operation="expire_holds") as conn:
        expired = cancel_expired_holds(conn, now)

    if expired:
        sweep_transitions.labels(transition="expired").inc(expired)
        logger.info("holds_expired", count=expired, now=now.isoformat())
    return expired


def complete_elapsed(engine: Engine, *, clock: Clock = utc_now) -> int:
    """
    Complete confirmed bookings whose end time has passed.

    Args:
        engine: SQLAlchemy engine
        clock: Source of "now"

    Returns:
        int: Number of bookings completed
    """
    now = ensure_utc(clock())
    with write_transaction(engine, operation="complete_elapsed") as conn:
        completed = complete_elapsed_bookings(conn, now)

    if completed:
        sweep_transitions.labels(transition="completed").inc(completed)
        logger.info("bookings_completed", count=completed, now=now.isoformat())
    return completed


def run_sweeps(engine: Engine, *, clock: Clock = utc_now) -> dict[str, int]:
    """Run both sweeps and return how many bookings each transitioned."""
    return {
        "expired": expire_holds(engine, clock=clock),
        "completed": complete_elapsed(engine, clock=clock),
    }
