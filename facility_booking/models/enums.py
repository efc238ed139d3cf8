"""String enums stored in the status/kind/source columns."""

from enum import Enum


class BookingKind(str, Enum):
    ROOM = "room"
    CLASS = "class"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELED = "canceled"


# Statuses that hold a slot and take part in conflict detection
ACTIVE_STATUSES: tuple[BookingStatus, ...] = (BookingStatus.PENDING, BookingStatus.CONFIRMED)
TERMINAL_STATUSES: tuple[BookingStatus, ...] = (BookingStatus.COMPLETED, BookingStatus.CANCELED)


class BookingSource(str, Enum):
    WEB = "web"
    MOBILE = "mobile"
    WALKIN = "walkin"


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    MAINTENANCE = "maintenance"
    OCCUPIED = "occupied"


class PaymentType(str, Enum):
    DEPOSIT = "deposit"
    BALANCE = "balance"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
