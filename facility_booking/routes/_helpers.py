"""
Internal helpers shared by the booking route handlers.
"""

from __future__ import annotations

from typing import NoReturn

import structlog
from fastapi import HTTPException, status

from facility_booking.errors import BookingError

logger = structlog.get_logger(__name__)


def raise_http_error(error: Exception, event: str, **context: object) -> NoReturn:
    """
    Translate an exception from the booking core into an HTTPException.

    Business errors keep their status code and structured detail. Store
    failures and anything unexpected are logged with their traceback and
    surface as a generic 500.

    Args:
        error: Exception caught in the route handler
        event: Log event name for unexpected failures
        **context: Extra key/value pairs for the log line

    Raises:
        HTTPException: Always
    """
    if isinstance(error, HTTPException):
        raise error
    if isinstance(error, BookingError):
        raise error.to_http_exception() from error

    logger.exception(event, error=str(error), **context)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    ) from error
