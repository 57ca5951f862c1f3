"""Reservation service: seat holds with expiry."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable

import redis.asyncio as redis
from sqlalchemy.exc import SQLAlchemyError

from seathold.config import Settings
from seathold.database import Database
from seathold.distributed_lock import DistributedLockError, LockOptions, multi_lock
from seathold.exceptions import (
    EventNotFound,
    InvalidSeatCount,
    InvalidSeatSelection,
    SeatUnavailable,
)
from seathold.models.seat import Seat, SeatStatus
from seathold.stores.ledger import HeldSeat, ReservationHold, ReservationLedger
from seathold.stores.seat_store import SeatStateStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class VerifyResult:
    """Outcome of checking a reservation token."""

    valid: bool
    hold: ReservationHold | None = None
    remaining_seconds: int | None = None


class ReservationService:
    """
    Creates, checks and releases seat holds.

    A hold exists in two places: the seats carry its token in the durable
    store, and the ledger carries the hold record with its expiry. Taking the
    record out of the ledger is what decides which of confirm, cancel or
    expiry gets to act on a hold.
    """

    def __init__(
        self,
        database: Database,
        redis_client: redis.Redis,
        settings: Settings,
        clock: Clock = datetime.now,
    ):
        self.database = database
        self.redis = redis_client
        self.settings = settings
        self.clock = clock
        self.ledger = ReservationLedger(
            redis_client,
            grace_seconds=settings.LEDGER_GRACE_SECONDS,
            expired_retention_seconds=settings.EXPIRED_TOKEN_RETENTION_SECONDS,
        )
        self.lock_options = LockOptions(
            timeout_seconds=settings.LOCK_TIMEOUT_SECONDS,
            retry_delay_ms=settings.LOCK_RETRY_DELAY_MS,
            max_retries=settings.LOCK_MAX_RETRIES,
        )

    async def reserve(self, event_id: int, seat_ids: list[int]) -> ReservationHold:
        """
        Hold seats for an event, all or nothing.

        Args:
            event_id: Event ID
            seat_ids: Seats to hold, in the order they should be reported

        Returns:
            The new hold

        Raises:
            InvalidSeatCount: No seats, or more than the per-booking maximum
            EventNotFound: Unknown event
            InvalidSeatSelection: Seats that are not part of the event
            SeatUnavailable: Seats already held or booked
        """
        requested = list(dict.fromkeys(seat_ids))
        if not requested or len(requested) > self.settings.MAX_SEATS_PER_BOOKING:
            raise InvalidSeatCount(len(requested), self.settings.MAX_SEATS_PER_BOOKING)

        lock_keys = [f"seat:{seat_id}" for seat_id in requested]

        try:
            async with multi_lock(self.redis, lock_keys, self.lock_options):
                return await self._do_reserve(event_id, requested)
        except DistributedLockError as e:
            contended = [int(e.key.split(":")[-1])] if e.key else requested
            logger.warning(
                "Lock contention reserving seats %s for event %s", contended, event_id
            )
            raise SeatUnavailable(
                contended,
                message="Seats are being reserved by another customer. Please try again.",
            )

    async def _do_reserve(
        self,
        event_id: int,
        seat_ids: list[int],
    ) -> ReservationHold:
        """
        Internal method to perform seat reservation.
        Should be called within a distributed lock context.
        """
        now = self.clock()

        async with self.database.session() as db:
            store = SeatStateStore(db)

            event = await store.get_event(event_id)
            if event is None:
                raise EventNotFound(event_id)

            # Heal holds on these seats that outlived their ledger entry
            await store.release_lapsed(now, seat_ids)

            seats = await store.get_seats_for_update(event_id, seat_ids)
            by_id = {seat.seat_id: seat for seat in seats}

            missing = [seat_id for seat_id in seat_ids if seat_id not in by_id]
            if missing:
                raise InvalidSeatSelection(event_id, missing)

            unavailable = [
                by_id[seat_id]
                for seat_id in seat_ids
                if by_id[seat_id].status != SeatStatus.AVAILABLE
            ]
            if unavailable:
                logger.warning(
                    "Seats %s for event %s are not available",
                    [s.seat_number for s in unavailable],
                    event_id,
                )
                raise SeatUnavailable(
                    [s.seat_id for s in unavailable],
                    [s.seat_number for s in unavailable],
                )

            ttl = event.hold_ttl_seconds or self.settings.RESERVATION_TIMEOUT_SECONDS
            expires_at = now + timedelta(seconds=ttl)
            token = uuid.uuid4().hex

            if not await store.claim(event_id, seat_ids, token, expires_at):
                await db.rollback()
                current = await store.get_seats_for_update(event_id, seat_ids)
                taken = [s for s in current if s.status != SeatStatus.AVAILABLE]
                raise SeatUnavailable(
                    [s.seat_id for s in taken],
                    [s.seat_number for s in taken],
                )

            ordered = [by_id[seat_id] for seat_id in seat_ids]
            hold = ReservationHold(
                token=token,
                event_id=event_id,
                seat_ids=seat_ids,
                seats=[self._snapshot(seat) for seat in ordered],
                total_amount=sum((seat.price for seat in ordered), Decimal("0")),
                created_at=now,
                expires_at=expires_at,
            )

            await self.ledger.put(hold, now)
            try:
                await db.commit()
            except Exception:
                await self.ledger.take(token)
                raise

        logger.info(
            "Reserved %d seats for event %s until %s (token %s)",
            len(seat_ids),
            event_id,
            expires_at.isoformat(),
            token,
        )
        return hold

    @staticmethod
    def _snapshot(seat: Seat) -> HeldSeat:
        return HeldSeat(
            seat_id=seat.seat_id,
            seat_number=seat.seat_number,
            section=seat.section,
            row_number=seat.row_number,
            price=seat.price,
        )

    async def verify(self, token: str) -> VerifyResult:
        """
        Check whether a hold can still be confirmed.

        An expired hold that is still in the ledger is released on the spot.
        Never raises for unknown or expired tokens.
        """
        hold = await self.ledger.get(token)
        if hold is None:
            return VerifyResult(valid=False)

        now = self.clock()
        if hold.is_expired(now):
            taken = await self.ledger.take(token)
            if taken is not None:
                try:
                    await self.release(taken, expired=True)
                except SQLAlchemyError:
                    # Seats stay reserved past reserved_until; the sweep heals them
                    logger.exception("Failed to release expired hold %s", token)
            return VerifyResult(valid=False)

        return VerifyResult(
            valid=True,
            hold=hold,
            remaining_seconds=hold.remaining_seconds(now),
        )

    async def cancel(self, token: str) -> None:
        """
        Release a hold. Unknown, confirmed or already released tokens are a no-op.
        """
        hold = await self.ledger.take(token)
        if hold is None:
            await self.release_orphaned(token)
            return

        try:
            await self.release(hold, expired=hold.is_expired(self.clock()))
        except Exception:
            await self.ledger.restore(hold, self.clock())
            raise

    async def release(self, hold: ReservationHold, expired: bool) -> int:
        """
        Return a taken hold's seats to available.

        Returns:
            Number of seats released
        """
        if expired:
            await self.ledger.mark_expired(hold.token)

        async with self.database.session() as db:
            released = await SeatStateStore(db).release_token(hold.token)
            await db.commit()

        logger.info(
            "Released %d seats of %s hold %s",
            released,
            "expired" if expired else "cancelled",
            hold.token,
        )
        return released

    async def release_orphaned(self, token: str) -> int:
        """
        Release seats still held under a token whose ledger entry is gone.

        Only seats past their hold time are touched, so a hold that another
        caller has just taken out of the ledger is left alone.

        Returns:
            Number of seats released
        """
        async with self.database.session() as db:
            released = await SeatStateStore(db).release_lapsed(
                self.clock(), token=token
            )
            await db.commit()

        if released:
            await self.ledger.mark_expired(token)
            logger.info("Released %d orphaned seats of hold %s", released, token)
        return released

    async def sweep_expired(self, limit: int = 100) -> int:
        """
        Release holds past their expiry and seats left reserved without a hold.

        Returns:
            Number of seats released
        """
        now = self.clock()
        released = 0

        for token in await self.ledger.expired_tokens(now, limit):
            hold = await self.ledger.take(token)
            if hold is None:
                continue
            released += await self.release(hold, expired=True)

        async with self.database.session() as db:
            orphaned = await SeatStateStore(db).release_lapsed(now)
            await db.commit()

        if orphaned:
            logger.info("Released %d orphaned seat reservations", orphaned)

        return released + orphaned
