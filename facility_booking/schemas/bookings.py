from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from facility_booking.models.enums import BookingSource


class BookingCreatePayload(BaseModel):
    """
    Schema for booking a room or class session.

    ``user_id`` travels in the body because authentication is handled by the
    surrounding system.
    """

    user_id: int = Field(..., gt=0, description="Booking owner")
    start: datetime = Field(..., description="Inclusive start (ISO 8601)")
    end: datetime = Field(..., description="Exclusive end (ISO 8601)")
    source: BookingSource = Field(..., description="web, mobile or walkin")
    deposit: Optional[int] = Field(None, ge=0, description="Deposit to request (0 or omitted: none)")


class BookingExtendPayload(BaseModel):
    """Schema for extending a room booking in place."""

    model_config = ConfigDict(populate_by_name=True)

    extra_minutes: int = Field(..., gt=0, alias="extraMinutes", description="Minutes to add")
    amount: Optional[int] = Field(None, ge=0, description="Balance top-up to request")
    provider: Optional[str] = Field(None, description="Payment provider for the top-up")
