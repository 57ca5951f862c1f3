"""API v1 routers package."""

from seathold.api.v1.bookings import router as bookings_router
from seathold.api.v1.events import router as events_router
from seathold.api.v1.reservations import router as reservations_router

__all__ = [
    "events_router",
    "reservations_router",
    "bookings_router",
]
