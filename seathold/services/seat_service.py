"""Event setup and seat map."""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from seathold.exceptions import EventNotFound
from seathold.models.event import Event
from seathold.models.seat import Seat, SeatStatus
from seathold.schemas.event import EventCreate
from seathold.services.reservation_service import Clock
from seathold.stores.seat_store import SeatStateStore


@dataclass(frozen=True)
class SeatAvailability:
    """Seat counts for an event as customers see them."""

    event: Event
    total: int
    available: int
    reserved: int
    booked: int


class SeatService:
    """Service for event and seat map operations."""

    def __init__(self, db: AsyncSession, clock: Clock = datetime.now):
        self.db = db
        self.clock = clock
        self.store = SeatStateStore(db)

    async def create_event(self, event_data: EventCreate) -> Event:
        """Create an event and its seats."""
        event = Event(
            event_name=event_data.event_name,
            event_date=event_data.event_date,
            venue_name=event_data.venue_name,
            hold_ttl_seconds=event_data.hold_ttl_seconds,
        )
        event.seats = [
            Seat(
                seat_number=seat_data.seat_number,
                section=seat_data.section,
                row_number=seat_data.row_number,
                price=seat_data.price,
                status=SeatStatus.AVAILABLE,
            )
            for seat_data in event_data.seats
        ]
        self.db.add(event)
        await self.db.commit()
        return event

    async def _require_event(self, event_id: int) -> Event:
        event = await self.store.get_event(event_id)
        if event is None:
            raise EventNotFound(event_id)
        return event

    def effective_status(self, seat: Seat, now: datetime) -> SeatStatus:
        """A reservation past its hold time is shown as available."""
        if (
            seat.status == SeatStatus.RESERVED
            and seat.reserved_until is not None
            and seat.reserved_until <= now
        ):
            return SeatStatus.AVAILABLE
        return seat.status

    async def get_seat_map(
        self,
        event_id: int,
        status: SeatStatus | None = None,
    ) -> list[dict]:
        """Seats of an event with their effective status."""
        await self._require_event(event_id)
        now = self.clock()

        seat_map = []
        for seat in await self.store.list_seats(event_id):
            current = self.effective_status(seat, now)
            if status and current != status:
                continue
            seat_map.append(
                {
                    "seat_id": seat.seat_id,
                    "event_id": seat.event_id,
                    "seat_number": seat.seat_number,
                    "section": seat.section,
                    "row_number": seat.row_number,
                    "price": seat.price,
                    "status": current,
                    "reserved_until": (
                        seat.reserved_until if current == SeatStatus.RESERVED else None
                    ),
                }
            )
        return seat_map

    async def get_availability(self, event_id: int) -> SeatAvailability:
        """Seat counts per effective status."""
        event = await self._require_event(event_id)
        counts = await self.store.count_by_status(event_id)

        lapsed = (
            await self.db.execute(
                select(func.count(Seat.seat_id)).where(
                    and_(
                        Seat.event_id == event_id,
                        Seat.status == SeatStatus.RESERVED,
                        Seat.reserved_until <= self.clock(),
                    )
                )
            )
        ).scalar() or 0

        return SeatAvailability(
            event=event,
            total=sum(counts.values()),
            available=counts[SeatStatus.AVAILABLE] + lapsed,
            reserved=counts[SeatStatus.RESERVED] - lapsed,
            booked=counts[SeatStatus.BOOKED],
        )
