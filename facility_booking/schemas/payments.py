from typing import Literal

from pydantic import BaseModel, Field


class PaymentSettlePayload(BaseModel):
    """Schema for the payment-provider settlement callback."""

    outcome: Literal["paid", "failed"] = Field(..., description="Settlement result")
