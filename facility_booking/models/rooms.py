# models/rooms.py

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from facility_booking.models.base import Base, BigIntId
from facility_booking.models.enums import RoomStatus


class Room(Base):
    """
    ORM model for bookable rooms.

    ``status`` is informational only; conflict detection is interval based and
    never consults it.
    """

    __tablename__ = "rooms"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    name = Column(String(191), nullable=False)
    capacity = Column(Integer, nullable=False, default=1)
    status = Column(String(16), nullable=False, default=RoomStatus.AVAILABLE.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
