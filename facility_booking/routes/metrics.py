"""
Prometheus metrics endpoint.

Example:
    GET /metrics

    Response:
        # HELP facility_booking_operations_total Total booking lifecycle operations by outcome
        # TYPE facility_booking_operations_total counter
        facility_booking_operations_total{operation="create",outcome="success"} 42.0
        ...
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """Expose booking, lock-timeout, sweep and points metrics in Prometheus text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
