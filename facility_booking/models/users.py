# models/users.py

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from facility_booking.models.base import Base, BigIntId


class User(Base):
    """
    ORM model for platform users.

    Only the columns the booking core relies on are mapped here: the user is a
    foreign-key target for bookings and ledger entries, and ``points_balance``
    is the denormalized cache of the user's points ledger.
    """

    __tablename__ = "users"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    email = Column(String(191), nullable=False, unique=True)
    name = Column(String(191), nullable=False)
    points_balance = Column(Integer, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
