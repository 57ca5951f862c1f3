"""Services package."""

from seathold.services.booking_finalizer import BookingFinalizer
from seathold.services.booking_service import BookingService
from seathold.services.reservation_service import ReservationService, VerifyResult
from seathold.services.seat_service import SeatService

__all__ = [
    "ReservationService",
    "VerifyResult",
    "BookingFinalizer",
    "BookingService",
    "SeatService",
]
