"""Events API endpoints."""

from fastapi import APIRouter, Query, status

from seathold.api.v1.dependencies import BookingServiceDep, SeatServiceDep
from seathold.models.seat import SeatStatus
from seathold.schemas.booking import BookingResponse
from seathold.schemas.event import (
    EventAvailabilityResponse,
    EventCreate,
    EventResponse,
)
from seathold.schemas.seat import SeatResponse

router = APIRouter()


@router.post(
    "",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an event with its seats",
)
async def create_event(
    event_data: EventCreate,
    seat_service: SeatServiceDep,
) -> EventResponse:
    """Create a new event."""
    event = await seat_service.create_event(event_data)
    return EventResponse.model_validate(event)


@router.get(
    "/{event_id}",
    response_model=EventAvailabilityResponse,
    summary="Get event availability",
)
async def get_event(
    event_id: int,
    seat_service: SeatServiceDep,
) -> EventAvailabilityResponse:
    """Get event with seat counts."""
    availability = await seat_service.get_availability(event_id)
    response = EventAvailabilityResponse.model_validate(availability.event)
    response.total_seats = availability.total
    response.available_seats = availability.available
    response.reserved_seats = availability.reserved
    response.booked_seats = availability.booked
    return response


@router.get(
    "/{event_id}/seats",
    response_model=list[SeatResponse],
    summary="Get seat map",
)
async def get_event_seats(
    event_id: int,
    seat_service: SeatServiceDep,
    status_filter: SeatStatus | None = Query(None, alias="status"),
) -> list[SeatResponse]:
    """Get seats for an event."""
    seats = await seat_service.get_seat_map(event_id, status=status_filter)
    return [SeatResponse.model_validate(s) for s in seats]


@router.get(
    "/{event_id}/bookings",
    response_model=list[BookingResponse],
    summary="List event bookings",
)
async def list_event_bookings(
    event_id: int,
    booking_service: BookingServiceDep,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> list[BookingResponse]:
    """Bookings for an event, newest first."""
    bookings = await booking_service.list_event_bookings(
        event_id, limit=limit, offset=offset
    )
    return [BookingResponse.model_validate(b) for b in bookings]
