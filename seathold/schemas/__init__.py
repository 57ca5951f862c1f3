"""Pydantic schemas for API request/response."""

from seathold.schemas.booking import (
    BookingConfirmRequest,
    BookingResponse,
    CustomerInfo,
    PaymentInfo,
)
from seathold.schemas.event import EventAvailabilityResponse, EventCreate, EventResponse
from seathold.schemas.reservation import (
    ReservationCreate,
    ReservationResponse,
    ReservationVerifyResponse,
)
from seathold.schemas.seat import HeldSeatResponse, SeatCreate, SeatResponse

__all__ = [
    "EventCreate",
    "EventResponse",
    "EventAvailabilityResponse",
    "SeatCreate",
    "SeatResponse",
    "HeldSeatResponse",
    "ReservationCreate",
    "ReservationResponse",
    "ReservationVerifyResponse",
    "CustomerInfo",
    "PaymentInfo",
    "BookingConfirmRequest",
    "BookingResponse",
]
