# models/points.py

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.sql import func

from facility_booking.models.base import Base, BigIntId


class PointsLedgerEntry(Base):
    """
    ORM model for the append-only points ledger.

    Each row is a signed delta applied to a user's balance. Rows are never
    updated or deleted; ``users.points_balance`` must always equal the sum of
    a user's deltas.
    """

    __tablename__ = "points_ledger"
    __table_args__ = (Index("ix_points_ledger_user_created", "user_id", "created_at"),)

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    user_id = Column(BigIntId, ForeignKey("users.id"), nullable=False)
    delta = Column(Integer, nullable=False)
    reason = Column(String(255), nullable=False)
    booking_id = Column(BigIntId, ForeignKey("bookings.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
