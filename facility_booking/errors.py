"""
Business and infrastructure errors raised by the booking core.

Every error carries a stable ``code`` that routes, metrics and logs use.
Business failures subclass BookingError; StoreError (an unexpected database
failure) does not, so ``except BookingError`` never swallows one. Routes turn
business errors into HTTP responses with ``to_http_exception()``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class ServiceError(Exception):
    """Base for every error the booking core raises on purpose."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "service_error"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class BookingError(ServiceError):
    """Base for business failures callers are expected to handle."""

    default_code = "booking_error"


class InvalidInterval(BookingError):
    """Raised when end <= start or the time input is malformed."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "invalid_interval"


class InvalidAmount(BookingError):
    """Raised when a payment amount is zero or negative."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "invalid_amount"


class ScheduleConflict(BookingError):
    """Raised when the requested interval overlaps an active reservation."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "schedule_conflict"


class NotFound(BookingError):
    """Raised when a booking, payment or user does not exist (or is the wrong kind)."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "not_found"


class InvalidReference(BookingError):
    """Raised when a referenced room, class schedule or user is missing at write time."""

    status_code = 422
    default_code = "invalid_reference"


class InvalidTransition(BookingError):
    """Raised when a status change would leave a terminal state."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "invalid_transition"


class LockTimeout(BookingError):
    """
    Raised when the write lock could not be acquired within the bound.

    Unlike ScheduleConflict this is transient: retrying with the same inputs
    may succeed.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = "lock_timeout"
    retryable = True
    retry_after_seconds = 1

    def to_http_exception(self) -> HTTPException:
        exc = super().to_http_exception()
        exc.headers = {"Retry-After": str(self.retry_after_seconds)}
        return exc


class StoreError(ServiceError):
    """Raised for unexpected database failures outside the business taxonomy."""

    default_code = "store_error"
