"""
Health and readiness check endpoints for Kubernetes probes.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from facility_booking.db.engine import check_engine_health
from facility_booking.dependencies import get_db_engine

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check() -> JSONResponse:
    """
    Liveness probe endpoint.

    Returns 200 while the process is up.

    Example:
        >>> GET /health
        {"status": "ok"}
    """
    return JSONResponse(content={"status": "ok"})


@router.get("/ready")
def readiness_check(engine: Engine = Depends(get_db_engine)) -> JSONResponse:
    """
    Readiness probe endpoint.

    Returns 200 when the booking store answers, 503 otherwise.

    Example:
        >>> GET /ready
        {"status": "ready", "checks": {"database": "ok"}}
    """
    checks = {}

    if check_engine_health(engine):
        checks["database"] = "ok"
        return JSONResponse(content={"status": "ready", "checks": checks})

    logger.error("readiness_check_failed", reason="database_not_accessible")
    checks["database"] = "failed"
    return JSONResponse(
        status_code=503,
        content={"status": "not ready", "checks": checks},
    )
