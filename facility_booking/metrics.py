"""
Prometheus metrics for booking operations, lock contention, sweeps and points.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Example:
    >>> from facility_booking.metrics import track_operation
    >>> with track_operation("create"):
    ...     create_room_booking(engine, ...)
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import Counter, Histogram

from facility_booking.errors import ServiceError

# =============================================================================
# Booking Operation Metrics
# =============================================================================

booking_operations = Counter(
    "facility_booking_operations_total",
    "Total booking lifecycle operations by outcome",
    ["operation", "outcome"],
)
"""
Counter for booking lifecycle operations.

Labels:
    operation: create, extend, cancel, confirm, settle
    outcome: success, an error code (e.g. schedule_conflict), or error
"""

booking_operation_duration = Histogram(
    "facility_booking_operation_duration_seconds",
    "Duration of booking lifecycle operations in seconds",
    ["operation"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, float("inf")),
)

lock_timeouts = Counter(
    "facility_booking_lock_timeouts_total",
    "Write transactions aborted because a lock was not acquired in time",
    ["operation"],
)

# =============================================================================
# Sweep Metrics
# =============================================================================

sweep_transitions = Counter(
    "facility_booking_sweep_transitions_total",
    "Bookings transitioned by the background sweep",
    ["transition"],
)
"""
Counter for sweep transitions.

Labels:
    transition: expired (pending -> canceled) or completed (confirmed -> completed)
"""

# =============================================================================
# Points Metrics
# =============================================================================

points_adjustments = Counter(
    "facility_booking_points_adjustments_total",
    "Points ledger adjustments applied",
    ["direction"],
)


@contextmanager
def track_operation(operation: str) -> Iterator[None]:
    """
    Record outcome and duration of one booking operation.

    Booking and store errors are labelled with their code, anything else as "error".
    """
    outcome = "success"
    start_time = time.perf_counter()
    try:
        yield
    except ServiceError as e:
        outcome = e.code
        raise
    except Exception:
        outcome = "error"
        raise
    finally:
        booking_operations.labels(operation=operation, outcome=outcome).inc()
        booking_operation_duration.labels(operation=operation).observe(
            time.perf_counter() - start_time
        )
