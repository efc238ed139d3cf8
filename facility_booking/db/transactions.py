"""
Write transactions with a bounded lock wait.

Every booking and points mutation runs inside ``write_transaction``. It flags
its connection with WRITE_LOCK_OPTION (SQLite then begins with ``BEGIN
IMMEDIATE``), opens one transaction so any exception rolls the whole unit back,
applies the lock timeout and translates driver failures into the core's error
taxonomy:

- lock-wait timeouts, deadlocks and serialization failures -> LockTimeout
- foreign-key violations -> InvalidReference
- anything else from the driver -> StoreError

Business errors raised inside the block propagate unchanged.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import structlog
from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError, IntegrityError

from facility_booking.config import LOCK_TIMEOUT_MS
from facility_booking.db.engine import WRITE_LOCK_OPTION
from facility_booking.errors import InvalidReference, LockTimeout, StoreError
from facility_booking.metrics import lock_timeouts

logger = structlog.get_logger(__name__)

# lock_not_available, deadlock_detected, serialization_failure
RETRYABLE_SQLSTATES = {"55P03", "40P01", "40001"}


def apply_lock_timeout(conn: Connection, timeout_ms: int = LOCK_TIMEOUT_MS) -> None:
    """
    Bound how long statements in this transaction may wait for row locks.

    PostgreSQL only; SQLite is bounded by the driver busy timeout set in
    ``build_engine``.
    """
    if conn.dialect.name == "postgresql":
        conn.execute(text(f"SET LOCAL lock_timeout = '{int(timeout_ms)}ms'"))


def is_lock_timeout(exc: DBAPIError) -> bool:
    """
    Check whether a driver error means "could not get the lock in time".

    Args:
        exc: Wrapped DBAPI error raised by SQLAlchemy

    Returns:
        bool: True if retrying with the same inputs may succeed
    """
    orig = exc.orig
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate in RETRYABLE_SQLSTATES:
        return True
    return "database is locked" in str(orig).lower()


@contextmanager
def write_transaction(engine: Engine, operation: str) -> Iterator[Connection]:
    """
    Open a write transaction for one logical operation.

    Args:
        engine: SQLAlchemy engine
        operation: Operation name used in logs and metrics

    Yields:
        Connection: Connection bound to the open transaction

    Raises:
        LockTimeout: If a lock could not be acquired within the bound
        InvalidReference: If a foreign key was violated
        StoreError: For any other database failure
    """
    try:
        with engine.connect() as conn:
            conn.execution_options(**{WRITE_LOCK_OPTION: True})
            with conn.begin():
                apply_lock_timeout(conn)
                yield conn
    except IntegrityError as e:
        logger.warning("integrity_violation", operation=operation, error=str(e.orig))
        raise InvalidReference("Referenced record does not exist") from e
    except DBAPIError as e:
        if is_lock_timeout(e):
            lock_timeouts.labels(operation=operation).inc()
            logger.warning("lock_timeout", operation=operation, error=str(e.orig))
            raise LockTimeout(
                "Timed out waiting for a lock; retry the request",
                details={"operation": operation},
            ) from e
        logger.error("store_failure", operation=operation, error=str(e.orig))
        raise StoreError("Database operation failed") from e
