"""
SQLAlchemy engine singleton with production-ready connection pooling.

PostgreSQL is the production store. SQLite is supported for development and
tests; there a connection flagged with the WRITE_LOCK_OPTION execution option
opens its transaction with ``BEGIN IMMEDIATE``, so writers are serialized the
way ``SELECT ... FOR UPDATE`` serializes them on PostgreSQL and the driver's
busy timeout bounds the lock wait. Reads open a deferred ``BEGIN`` and never
queue behind a writer.
"""

from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine

from facility_booking.config import DATABASE_URL, LOCK_TIMEOUT_MS

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")

# Execution option set by write_transaction; SQLite takes the write lock at BEGIN
WRITE_LOCK_OPTION = "facility_booking_write_lock"


def _configure_sqlite(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        # Hand transaction control to SQLAlchemy so the "begin" hook below owns BEGIN
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn: Any) -> None:
        if conn.get_execution_options().get(WRITE_LOCK_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def build_engine(url: str, lock_timeout_ms: int = LOCK_TIMEOUT_MS) -> Engine:
    """
    Create an engine for the given URL.

    Args:
        url: SQLAlchemy database URL
        lock_timeout_ms: Bound on lock waits; used as the SQLite busy timeout

    Returns:
        Engine: Configured SQLAlchemy engine
    """
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(
            url,
            future=True,
            connect_args={"timeout": lock_timeout_ms / 1000, "check_same_thread": False},
        )
        _configure_sqlite(sqlite_engine)
        return sqlite_engine

    return create_engine(
        url,
        future=True,
        # Connection pool settings
        pool_size=10,  # Number of connections to maintain in the pool
        max_overflow=20,  # Additional connections when pool is exhausted
        pool_pre_ping=True,  # Verify connections before using (detect stale connections)
        pool_recycle=3600,  # Recycle connections after 1 hour
        echo=False,
    )


engine: Engine = build_engine(DATABASE_URL)


def check_engine_health(db_engine: Engine = engine) -> bool:
    """
    Check if database engine is healthy and connections are working.

    This function is used by the /ready endpoint to verify database
    connectivity before allowing traffic to the service.

    Returns:
        bool: True if database is reachable and healthy, False otherwise
    """
    try:
        with db_engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
