"""
Records returned by the booking core.

Rows read from the database are validated into these models. Datetimes are
normalized to aware UTC because SQLite returns them naive.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field

from facility_booking.models.enums import (
    TERMINAL_STATUSES,
    BookingKind,
    BookingSource,
    BookingStatus,
    PaymentStatus,
    PaymentType,
)
from facility_booking.utils.datetime import ensure_utc
from facility_booking.utils.interval import TimeInterval

UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc)]


class Reservation(BaseModel):
    """A room or class-session booking."""

    id: int
    user_id: int
    kind: BookingKind
    room_id: Optional[int] = None
    class_schedule_id: Optional[int] = None
    status: BookingStatus
    source: BookingSource
    starts_at: UTCDateTime
    ends_at: UTCDateTime
    holds_expires_at: Optional[UTCDateTime] = None
    created_at: UTCDateTime
    updated_at: UTCDateTime

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.starts_at, self.ends_at)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class PaymentRecord(BaseModel):
    """A deposit or balance obligation owned by one booking."""

    id: int
    booking_id: int
    amount: Decimal
    currency: str
    type: PaymentType
    provider: str
    status: PaymentStatus
    created_at: UTCDateTime
    updated_at: UTCDateTime


class BookingSummary(BaseModel):
    id: int
    kind: BookingKind
    room: Optional[str] = None
    class_title: Optional[str] = None


class PointLedgerRecord(BaseModel):
    """One append-only points ledger entry."""

    id: int
    user_id: int
    delta: int
    reason: str
    booking_id: Optional[int] = None
    booking: Optional[BookingSummary] = None
    created_at: UTCDateTime


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class PointHistoryPage(BaseModel):
    points: list[PointLedgerRecord] = Field(default_factory=list)
    pagination: Pagination
