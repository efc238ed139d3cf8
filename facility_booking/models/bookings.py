# models/bookings.py

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.sql import func

from facility_booking.models.base import Base, BigIntId
from facility_booking.models.enums import BookingStatus


class Booking(Base):
    """
    ORM model for reservations of a room or a class session.

    A booking holds the half-open interval ``[starts_at, ends_at)`` on exactly
    one resource: ``room_id`` when ``kind='room'`` and ``class_schedule_id``
    when ``kind='class'``. Rows are never deleted; cancellation and completion
    are status changes so the history stays auditable.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("ends_at > starts_at", name="ck_bookings_interval"),
        Index("ix_bookings_room_window", "room_id", "status", "starts_at", "ends_at"),
        Index(
            "ix_bookings_schedule_window", "class_schedule_id", "status", "starts_at", "ends_at"
        ),
        Index("ix_bookings_status_hold", "status", "holds_expires_at"),
    )

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    user_id = Column(BigIntId, ForeignKey("users.id"), nullable=False, index=True)
    kind = Column(String(16), nullable=False)
    room_id = Column(BigIntId, ForeignKey("rooms.id"), nullable=True)
    class_schedule_id = Column(BigIntId, ForeignKey("class_schedules.id"), nullable=True)
    status = Column(String(16), nullable=False, default=BookingStatus.PENDING.value)
    source = Column(String(16), nullable=False)
    starts_at = Column(DateTime(timezone=True), nullable=False)
    ends_at = Column(DateTime(timezone=True), nullable=False)
    holds_expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
