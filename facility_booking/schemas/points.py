from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from facility_booking.config import POINTS_HISTORY_DEFAULT_LIMIT, POINTS_HISTORY_MAX_LIMIT


class PointsAdjustPayload(BaseModel):
    """Schema for an admin points adjustment."""

    delta: int = Field(..., description="Signed, non-zero change to apply")
    reason: str = Field(..., min_length=1, max_length=255)
    booking_id: Optional[int] = Field(None, description="Booking the adjustment relates to")

    @field_validator("delta")
    @classmethod
    def _non_zero(cls, value: int) -> int:
        if value == 0:
            raise ValueError("delta must be non-zero")
        return value

    @field_validator("reason")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("reason must not be blank")
        return value


class PointHistoryFilters(BaseModel):
    """Filters and paging for a user's points history."""

    days: Optional[int] = Field(None, ge=1, description="Only entries from the last N days")
    type: Optional[Literal["earned", "spent"]] = None
    search: Optional[str] = Field(None, description="Substring of the reason")
    page: int = Field(1, ge=1)
    limit: int = Field(POINTS_HISTORY_DEFAULT_LIMIT, ge=1, le=POINTS_HISTORY_MAX_LIMIT)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
