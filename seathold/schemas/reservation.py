"""Reservation schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from seathold.schemas.common import BaseSchema
from seathold.schemas.seat import HeldSeatResponse


class ReservationCreate(BaseSchema):
    """Schema for requesting a seat hold."""

    event_id: int
    seat_ids: list[int] = Field(..., min_length=1)


class ReservationResponse(BaseSchema):
    """Hold created by a reserve call."""

    token: str
    event_id: int
    seats: list[HeldSeatResponse]
    total_amount: Decimal
    expires_at: datetime
    expires_in: int


class ReservationVerifyResponse(BaseSchema):
    """Validity of a hold."""

    valid: bool
    remaining_seconds: int | None = None
    event_id: int | None = None
    seats: list[HeldSeatResponse] = []
    total_amount: Decimal | None = None
    expires_at: datetime | None = None
