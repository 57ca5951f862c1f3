"""Booking lookups."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from seathold.exceptions import BookingNotFound
from seathold.models.booking import Booking


class BookingService:
    """Read access to confirmed bookings."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _query(self):
        return select(Booking).options(selectinload(Booking.booking_seats))

    async def get_booking(self, booking_id: int) -> Booking:
        """Get booking by ID."""
        result = await self.db.execute(
            self._query().where(Booking.booking_id == booking_id)
        )
        booking = result.scalar_one_or_none()
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    async def get_booking_by_reference(self, reference: str) -> Booking:
        """Get booking by reference."""
        result = await self.db.execute(
            self._query().where(Booking.booking_reference == reference)
        )
        booking = result.scalar_one_or_none()
        if booking is None:
            raise BookingNotFound(reference)
        return booking

    async def list_event_bookings(
        self,
        event_id: int,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Booking]:
        """Bookings for an event, newest first."""
        result = await self.db.execute(
            self._query()
            .where(Booking.event_id == event_id)
            .order_by(Booking.created_at.desc(), Booking.booking_id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())
