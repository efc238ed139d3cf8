"""Periodic reservation sweep: expire stale holds and complete elapsed bookings."""

from typing import Optional

import structlog
from apscheduler.schedulers.background import BackgroundScheduler

from facility_booking.config import SWEEP_INTERVAL_SECONDS
from facility_booking.db.engine import engine
from facility_booking.logging_config import setup_logging
from facility_booking.services.sweeps import run_sweeps

logger = structlog.get_logger(__name__)

SWEEP_JOB_ID = "reservation_sweep"

_scheduler: Optional[BackgroundScheduler] = None


def run_sweep_tick() -> None:
    """
    Run one sweep against the global engine.

    Failures are logged and swallowed so a bad tick never stops the scheduler;
    the next tick retries.
    """
    try:
        result = run_sweeps(engine)
        logger.debug("sweep_tick_completed", **result)
    except Exception as e:
        logger.exception("sweep_tick_failed", error=str(e))


def start_sweep_scheduler(interval_seconds: int = SWEEP_INTERVAL_SECONDS) -> BackgroundScheduler:
    """
    Start the in-process background scheduler running ``run_sweep_tick``.

    Args:
        interval_seconds: Seconds between ticks

    Returns:
        BackgroundScheduler: The running scheduler
    """
    global _scheduler

    if _scheduler is not None and _scheduler.running:
        return _scheduler

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        run_sweep_tick,
        "interval",
        seconds=interval_seconds,
        id=SWEEP_JOB_ID,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    _scheduler = scheduler

    logger.info("sweep_scheduler_started", interval_seconds=interval_seconds)
    return scheduler


def stop_sweep_scheduler() -> None:
    global _scheduler

    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=False)
        logger.info("sweep_scheduler_stopped")
    _scheduler = None


def main() -> None:
    # Single tick, for running the sweep from cron instead of in-process
    setup_logging()
    run_sweep_tick()


if __name__ == "__main__":
    main()
