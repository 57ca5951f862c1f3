"""Durable seat state backed by the relational store.

Every state change is a single conditional UPDATE so concurrent writers are
serialized by the database: a transition only applies to rows still in the
expected state, and callers compare the matched row count with what they
asked for.
"""

from datetime import datetime

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from seathold.models.event import Event
from seathold.models.seat import Seat, SeatStatus


class SeatStateStore:
    """Seat status transitions on a caller-owned session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_event(self, event_id: int) -> Event | None:
        result = await self.db.execute(
            select(Event).where(Event.event_id == event_id)
        )
        return result.scalar_one_or_none()

    async def get_seats_for_update(
        self,
        event_id: int,
        seat_ids: list[int],
    ) -> list[Seat]:
        """
        Get seats of an event with row-level locks.
        Orders by seat_id to prevent deadlocks.
        """
        result = await self.db.execute(
            select(Seat)
            .where(and_(Seat.event_id == event_id, Seat.seat_id.in_(seat_ids)))
            .order_by(Seat.seat_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def release_lapsed(
        self,
        now: datetime,
        seat_ids: list[int] | None = None,
        token: str | None = None,
    ) -> int:
        """
        Return reserved seats whose hold time has passed to available.

        Optionally limited to the given seats or to seats held under ``token``.

        Returns:
            Number of seats released
        """
        conditions = [
            Seat.status == SeatStatus.RESERVED,
            Seat.reserved_until <= now,
        ]
        if seat_ids is not None:
            conditions.append(Seat.seat_id.in_(seat_ids))
        if token is not None:
            conditions.append(Seat.reservation_token == token)

        result = await self.db.execute(
            update(Seat)
            .where(and_(*conditions))
            .values(
                status=SeatStatus.AVAILABLE,
                reservation_token=None,
                reserved_until=None,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def claim(
        self,
        event_id: int,
        seat_ids: list[int],
        token: str,
        reserved_until: datetime,
    ) -> bool:
        """
        Move every listed seat from available to reserved under ``token``.

        Returns:
            True if all seats were claimed. On False some rows may have been
            updated and the caller must roll back.
        """
        result = await self.db.execute(
            update(Seat)
            .where(
                and_(
                    Seat.event_id == event_id,
                    Seat.seat_id.in_(seat_ids),
                    Seat.status == SeatStatus.AVAILABLE,
                )
            )
            .values(
                status=SeatStatus.RESERVED,
                reservation_token=token,
                reserved_until=reserved_until,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == len(seat_ids)

    async def mark_booked(
        self,
        token: str,
        seat_ids: list[int],
        booking_id: int,
        now: datetime,
    ) -> bool:
        """
        Move seats held by ``token`` to booked.

        Only rows still reserved under the token with an unexpired hold match.

        Returns:
            True if every seat was booked.
        """
        result = await self.db.execute(
            update(Seat)
            .where(
                and_(
                    Seat.seat_id.in_(seat_ids),
                    Seat.status == SeatStatus.RESERVED,
                    Seat.reservation_token == token,
                    Seat.reserved_until > now,
                )
            )
            .values(
                status=SeatStatus.BOOKED,
                booking_id=booking_id,
                reservation_token=None,
                reserved_until=None,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == len(seat_ids)

    async def release_token(self, token: str) -> int:
        """
        Return every seat reserved under ``token`` to available.

        Returns:
            Number of seats released
        """
        result = await self.db.execute(
            update(Seat)
            .where(
                and_(
                    Seat.reservation_token == token,
                    Seat.status == SeatStatus.RESERVED,
                )
            )
            .values(
                status=SeatStatus.AVAILABLE,
                reservation_token=None,
                reserved_until=None,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def list_seats(self, event_id: int) -> list[Seat]:
        """Get seats for an event in seat map order."""
        query = (
            select(Seat)
            .where(Seat.event_id == event_id)
            .order_by(Seat.section, Seat.row_number, Seat.seat_id)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_by_status(self, event_id: int) -> dict[SeatStatus, int]:
        """Seat counts per status; missing statuses count as zero."""
        result = await self.db.execute(
            select(Seat.status, func.count(Seat.seat_id))
            .where(Seat.event_id == event_id)
            .group_by(Seat.status)
        )
        counts = {status: 0 for status in SeatStatus}
        for status, count in result.all():
            counts[status] = count
        return counts
