"""Seat schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from seathold.models.seat import SeatStatus
from seathold.schemas.common import BaseSchema


class SeatCreate(BaseSchema):
    """Schema for creating a seat."""

    seat_number: str = Field(..., min_length=1, max_length=20)
    section: str | None = Field(None, max_length=50)
    row_number: str | None = Field(None, max_length=10)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class SeatResponse(BaseSchema):
    """Seat as shown on the seat map."""

    seat_id: int
    event_id: int
    seat_number: str
    section: str | None
    row_number: str | None
    price: Decimal
    status: SeatStatus
    reserved_until: datetime | None = None


class HeldSeatResponse(BaseSchema):
    """Seat captured in a hold or booking."""

    seat_id: int
    seat_number: str
    section: str | None = None
    row_number: str | None = None
    price: Decimal
