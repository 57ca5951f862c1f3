"""SQLAlchemy models."""

from seathold.models.base import Base
from seathold.models.booking import Booking, BookingSeat, BookingStatus
from seathold.models.event import Event
from seathold.models.seat import Seat, SeatStatus

__all__ = [
    "Base",
    "Event",
    "Seat",
    "SeatStatus",
    "Booking",
    "BookingSeat",
    "BookingStatus",
]
