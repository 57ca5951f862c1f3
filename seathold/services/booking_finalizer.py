"""Turns a live seat hold into a permanent booking."""

import logging
from datetime import datetime
from typing import Any

import redis.asyncio as redis
from pydantic import ValidationError
from ulid import ULID

from seathold.config import Settings
from seathold.database import Database
from seathold.exceptions import (
    InvalidCustomerInfo,
    InvalidPaymentInfo,
    ReservationExpired,
    ReservationNotFound,
)
from seathold.models.booking import Booking, BookingSeat, BookingStatus
from seathold.schemas.booking import CustomerInfo, PaymentInfo
from seathold.services.reservation_service import Clock, ReservationService
from seathold.stores.ledger import ReservationHold
from seathold.stores.seat_store import SeatStateStore

logger = logging.getLogger(__name__)


class BookingFinalizer:
    """The only path by which seats become booked."""

    def __init__(
        self,
        database: Database,
        redis_client: redis.Redis,
        settings: Settings,
        clock: Clock = datetime.now,
    ):
        self.database = database
        self.clock = clock
        self.reservation_service = ReservationService(
            database, redis_client, settings, clock
        )
        self.ledger = self.reservation_service.ledger

    def _generate_booking_reference(self) -> str:
        """Generate unique booking reference using ULID."""
        return f"BK-{str(ULID())}"

    async def confirm(
        self,
        token: str,
        customer: CustomerInfo | dict[str, Any],
        payment: PaymentInfo | dict[str, Any],
    ) -> Booking:
        """
        Confirm a hold into a booking.

        Payment must already be authorized; this only records it.

        Args:
            token: Reservation token from reserve
            customer: Name and email are required
            payment: Method and transaction id are required

        Returns:
            The created booking with its seats

        Raises:
            InvalidCustomerInfo, InvalidPaymentInfo: Bad input; the hold is untouched
            ReservationNotFound: Unknown or already confirmed token
            ReservationExpired: Hold expired; its seats are released
        """
        customer = self._validate(CustomerInfo, customer, InvalidCustomerInfo)
        payment = self._validate(PaymentInfo, payment, InvalidPaymentInfo)

        # Input is checked against the stored hold before it is consumed
        current = await self.ledger.get(token)
        if current is not None:
            self._check_amount(current, payment)

        hold = await self.ledger.take(token)
        now = self.clock()

        if hold is None:
            # Seats can outlive a ledger entry that lapsed unswept
            released = await self.reservation_service.release_orphaned(token)
            if released or await self.ledger.was_expired(token):
                raise ReservationExpired(token)
            raise ReservationNotFound(token)

        if hold.is_expired(now):
            logger.warning("Confirm attempted on expired hold %s", token)
            await self.reservation_service.release(hold, expired=True)
            raise ReservationExpired(token)

        if current is None:
            # Hold was put back by a failed confirm after the lookup above
            try:
                self._check_amount(hold, payment)
            except InvalidPaymentInfo:
                await self.ledger.restore(hold, now)
                raise

        try:
            booking = await self._do_confirm(hold, customer, payment, now)
        except ReservationExpired:
            raise
        except Exception:
            restored = await self.ledger.restore(hold, self.clock())
            logger.error(
                "Failed to confirm hold %s (restored=%s)", token, restored, exc_info=True
            )
            raise

        logger.info(
            "Confirmed booking %s for %d seats of event %s",
            booking.booking_reference,
            len(hold.seat_ids),
            hold.event_id,
        )
        return booking

    async def _do_confirm(
        self,
        hold: ReservationHold,
        customer: CustomerInfo,
        payment: PaymentInfo,
        now: datetime,
    ) -> Booking:
        """Write the booking and flip the seats in one transaction."""
        async with self.database.session() as db:
            booking = Booking(
                booking_reference=self._generate_booking_reference(),
                event_id=hold.event_id,
                customer_name=customer.name,
                customer_email=customer.email,
                customer_phone=customer.phone,
                payment_method=payment.method,
                payment_transaction_id=payment.transaction_id,
                total_amount=hold.total_amount,
                status=BookingStatus.CONFIRMED,
                reservation_token=hold.token,
                created_at=now,
            )
            booking.booking_seats = [
                BookingSeat(
                    seat_id=seat.seat_id,
                    seat_number=seat.seat_number,
                    price=seat.price,
                )
                for seat in hold.seats
            ]
            db.add(booking)
            await db.flush()  # Get booking_id

            store = SeatStateStore(db)
            if not await store.mark_booked(
                hold.token, hold.seat_ids, booking.booking_id, now
            ):
                await db.rollback()
                booked = False
            else:
                await db.commit()
                booked = True

        if not booked:
            # Seats were reclaimed by expiry between take and update
            logger.warning("Seats of hold %s were no longer reserved", hold.token)
            await self.reservation_service.release(hold, expired=True)
            raise ReservationExpired(hold.token)

        return booking

    @staticmethod
    def _check_amount(hold: ReservationHold, payment: PaymentInfo) -> None:
        if payment.amount is not None and payment.amount != hold.total_amount:
            raise InvalidPaymentInfo(
                f"Payment amount {payment.amount} does not match total {hold.total_amount}"
            )

    @staticmethod
    def _validate(schema, value, error_cls):
        if isinstance(value, schema):
            return value
        try:
            return schema.model_validate(value)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise error_cls(f"Invalid {schema.__name__}: {fields}") from e
