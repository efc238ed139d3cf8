# models/class_schedules.py

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from facility_booking.models.base import Base, BigIntId


class ClassSchedule(Base):
    """
    ORM model for a scheduled class session.

    Class-session bookings are keyed by schedule id and go through the same
    conflict machinery as room bookings.
    """

    __tablename__ = "class_schedules"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    title = Column(String(191), nullable=False)
    room_id = Column(BigIntId, ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True)
    starts_at = Column(DateTime(timezone=True), nullable=False)
    ends_at = Column(DateTime(timezone=True), nullable=False)
    capacity = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
