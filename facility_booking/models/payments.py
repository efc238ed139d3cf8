# models/payments.py

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.sql import func

from facility_booking.models.base import Base, BigIntId
from facility_booking.models.enums import PaymentStatus


class Payment(Base):
    """
    ORM model for payment obligations linked to a booking.

    Rows record a deposit or balance top-up and its settlement state. They are
    an audit trail and survive booking cancellation.
    """

    __tablename__ = "payments"
    __table_args__ = (CheckConstraint("amount > 0", name="ck_payments_amount_positive"),)

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    booking_id = Column(BigIntId, ForeignKey("bookings.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(8), nullable=False)
    type = Column(String(16), nullable=False)
    provider = Column(String(64), nullable=False)
    status = Column(String(16), nullable=False, default=PaymentStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
