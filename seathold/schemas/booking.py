"""Booking schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, Field

from seathold.models.booking import BookingStatus
from seathold.schemas.common import BaseSchema


class CustomerInfo(BaseSchema):
    """Who the booking is for."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(
        ..., max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
    )
    phone: str | None = Field(None, max_length=50)


class PaymentInfo(BaseSchema):
    """An already-authorized payment."""

    model_config = ConfigDict(str_strip_whitespace=True)

    method: str = Field(..., min_length=1, max_length=50)
    transaction_id: str = Field(..., min_length=1, max_length=100)
    amount: Decimal | None = Field(None, ge=0)


class BookingConfirmRequest(BaseSchema):
    """Schema for confirming a hold into a booking."""

    reservation_token: str = Field(..., min_length=1, max_length=64)
    customer: CustomerInfo
    payment: PaymentInfo


class BookingSeatResponse(BaseSchema):
    """Seat in a booking with the price it sold at."""

    seat_id: int
    seat_number: str
    price: Decimal


class BookingResponse(BaseSchema):
    """Schema for booking response."""

    booking_id: int
    booking_reference: str
    event_id: int
    customer_name: str
    customer_email: str
    customer_phone: str | None
    payment_method: str
    payment_transaction_id: str
    total_amount: Decimal
    status: BookingStatus
    created_at: datetime
    seats: list[BookingSeatResponse] = Field(
        default_factory=list, validation_alias="booking_seats"
    )
