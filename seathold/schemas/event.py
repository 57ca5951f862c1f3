"""Event schemas."""

from datetime import datetime

from pydantic import Field

from seathold.schemas.common import BaseSchema
from seathold.schemas.seat import SeatCreate


class EventCreate(BaseSchema):
    """Schema for creating an event together with its seats."""

    event_name: str = Field(..., min_length=1, max_length=255)
    event_date: datetime
    venue_name: str | None = Field(None, max_length=255)
    hold_ttl_seconds: int | None = Field(None, gt=0, le=3600)
    seats: list[SeatCreate] = Field(default_factory=list)


class EventResponse(BaseSchema):
    """Schema for event response."""

    event_id: int
    event_name: str
    event_date: datetime
    venue_name: str | None
    hold_ttl_seconds: int | None


class EventAvailabilityResponse(EventResponse):
    """Event with seat counts per status."""

    total_seats: int = 0
    available_seats: int = 0
    reserved_seats: int = 0
    booked_seats: int = 0
