import asyncio
from decimal import Decimal

import pytest

from seathold.exceptions import (
    BookingNotFound,
    InvalidCustomerInfo,
    InvalidPaymentInfo,
    ReservationExpired,
    ReservationNotFound,
    SeatUnavailable,
)
from seathold.models.booking import BookingStatus
from seathold.models.seat import SeatStatus
from seathold.schemas.booking import CustomerInfo, PaymentInfo
from seathold.services.booking_service import BookingService
from seathold.stores.seat_store import SeatStateStore
from tests.helpers import CUSTOMER, PAYMENT, seat_statuses, seed_event

pytestmark = pytest.mark.asyncio


async def test_confirm_books_seats_and_consumes_hold(
    reservation_service, finalizer, database
):
    event_id, seats = await seed_event(database)
    hold = await reservation_service.reserve(event_id, [seats["A1"]])

    booking = await finalizer.confirm(hold.token, CUSTOMER, PAYMENT)

    assert booking.booking_id is not None
    assert booking.booking_reference.startswith("BK-")
    assert booking.status == BookingStatus.CONFIRMED
    assert booking.customer_email == "ada@example.com"
    assert len(booking.booking_seats) == 1
    assert (await seat_statuses(database, event_id))["A1"] == SeatStatus.BOOKED
    assert (await reservation_service.verify(hold.token)).valid is False


async def test_booking_snapshot_matches_reserved_seats(
    reservation_service, finalizer, database
):
    event_id, seats = await seed_event(
        database, [("A1", "75.00"), ("A2", "50.00"), ("A3", "25.00")]
    )
    requested = [seats["A3"], seats["A1"], seats["A2"]]
    hold = await reservation_service.reserve(event_id, requested)

    booking = await finalizer.confirm(
        hold.token,
        CustomerInfo(name="Grace Hopper", email="grace@example.com"),
        PaymentInfo(method="card", transaction_id="txn_42", amount=Decimal("150.00")),
    )

    assert [(bs.seat_id, bs.price) for bs in booking.booking_seats] == [
        (seats["A3"], Decimal("25.00")),
        (seats["A1"], Decimal("75.00")),
        (seats["A2"], Decimal("50.00")),
    ]
    assert booking.total_amount == Decimal("150.00")
    statuses = await seat_statuses(database, event_id)
    assert {statuses["A1"], statuses["A2"], statuses["A3"]} == {SeatStatus.BOOKED}


async def test_booked_seats_are_never_offered_again(
    reservation_service, finalizer, database, clock
):
    event_id, seats = await seed_event(database)
    hold = await reservation_service.reserve(event_id, [seats["A1"]])
    await finalizer.confirm(hold.token, CUSTOMER, PAYMENT)
    clock.advance(3600)
    await reservation_service.sweep_expired()

    with pytest.raises(SeatUnavailable):
        await reservation_service.reserve(event_id, [seats["A1"]])
    assert (await seat_statuses(database, event_id))["A1"] == SeatStatus.BOOKED


async def test_confirm_after_ttl_fails_without_sweep(
    reservation_service, finalizer, database, clock
):
    event_id, seats = await seed_event(database)
    hold = await reservation_service.reserve(event_id, [seats["A1"]])
    clock.advance(600)

    with pytest.raises(ReservationExpired):
        await finalizer.confirm(hold.token, CUSTOMER, PAYMENT)

    assert (await seat_statuses(database, event_id))["A1"] == SeatStatus.AVAILABLE
    # Retrying keeps reporting expiry rather than an unknown token
    with pytest.raises(ReservationExpired):
        await finalizer.confirm(hold.token, CUSTOMER, PAYMENT)


async def test_confirm_after_sweep_reports_expired(
    reservation_service, finalizer, database, clock
):
    event_id, seats = await seed_event(database)
    hold = await reservation_service.reserve(event_id, [seats["A1"]])
    clock.advance(700)
    await reservation_service.sweep_expired()

    with pytest.raises(ReservationExpired):
        await finalizer.confirm(hold.token, CUSTOMER, PAYMENT)

    async with database.session() as db:
        assert await BookingService(db).list_event_bookings(event_id) == []


async def test_confirm_unknown_token(finalizer):
    with pytest.raises(ReservationNotFound):
        await finalizer.confirm("not-a-token", CUSTOMER, PAYMENT)


async def test_second_confirm_of_same_token_fails(
    reservation_service, finalizer, database
):
    event_id, seats = await seed_event(database)
    hold = await reservation_service.reserve(event_id, [seats["A1"]])
    await finalizer.confirm(hold.token, CUSTOMER, PAYMENT)

    with pytest.raises(ReservationNotFound):
        await finalizer.confirm(hold.token, CUSTOMER, PAYMENT)

    async with database.session() as db:
        assert len(await BookingService(db).list_event_bookings(event_id)) == 1


async def test_confirm_after_cancel(reservation_service, finalizer, database):
    event_id, seats = await seed_event(database)
    hold = await reservation_service.reserve(event_id, [seats["A1"]])
    await reservation_service.cancel(hold.token)

    with pytest.raises(ReservationNotFound):
        await finalizer.confirm(hold.token, CUSTOMER, PAYMENT)
    assert (await seat_statuses(database, event_id))["A1"] == SeatStatus.AVAILABLE


async def test_cancel_after_confirm_keeps_booking(
    reservation_service, finalizer, database
):
    event_id, seats = await seed_event(database)
    hold = await reservation_service.reserve(event_id, [seats["A1"]])
    await finalizer.confirm(hold.token, CUSTOMER, PAYMENT)

    await reservation_service.cancel(hold.token)

    assert (await seat_statuses(database, event_id))["A1"] == SeatStatus.BOOKED


@pytest.mark.parametrize(
    "customer",
    [
        {"name": "", "email": "ada@example.com"},
        {"name": "Ada", "email": "not-an-email"},
        {"email": "ada@example.com"},
        {"name": "Ada"},
    ],
)
async def test_invalid_customer_leaves_hold_intact(
    reservation_service, finalizer, database, customer
):
    event_id, seats = await seed_event(database)
    hold = await reservation_service.reserve(event_id, [seats["A1"]])

    with pytest.raises(InvalidCustomerInfo):
        await finalizer.confirm(hold.token, customer, PAYMENT)

    assert (await reservation_service.verify(hold.token)).valid is True
    assert (await seat_statuses(database, event_id))["A1"] == SeatStatus.RESERVED


async def test_missing_transaction_id(reservation_service, finalizer, database):
    event_id, seats = await seed_event(database)
    hold = await reservation_service.reserve(event_id, [seats["A1"]])

    with pytest.raises(InvalidPaymentInfo):
        await finalizer.confirm(hold.token, CUSTOMER, {"method": "card"})

    assert (await reservation_service.verify(hold.token)).valid is True


async def test_payment_amount_must_match_total(
    reservation_service, finalizer, database
):
    event_id, seats = await seed_event(database)
    hold = await reservation_service.reserve(event_id, [seats["A1"], seats["A2"]])

    with pytest.raises(InvalidPaymentInfo):
        await finalizer.confirm(
            hold.token, CUSTOMER, {**PAYMENT, "amount": "50.00"}
        )

    result = await reservation_service.verify(hold.token)
    assert result.valid is True
    assert result.hold.expires_at == hold.expires_at

    booking = await finalizer.confirm(
        hold.token, CUSTOMER, {**PAYMENT, "amount": "100.00"}
    )
    assert booking.total_amount == Decimal("100.00")


async def test_seats_reclaimed_underneath_hold(
    reservation_service, finalizer, database, clock
):
    event_id, seats = await seed_event(database)
    hold = await reservation_service.reserve(event_id, [seats["A1"], seats["A2"]])
    # Seat rows released while the ledger entry survives
    async with database.session() as db:
        await SeatStateStore(db).release_token(hold.token)
        await db.commit()

    with pytest.raises(ReservationExpired):
        await finalizer.confirm(hold.token, CUSTOMER, PAYMENT)

    statuses = await seat_statuses(database, event_id)
    assert statuses["A1"] == statuses["A2"] == SeatStatus.AVAILABLE
    async with database.session() as db:
        assert await BookingService(db).list_event_bookings(event_id) == []


async def test_booking_lookups(reservation_service, finalizer, database):
    event_id, seats = await seed_event(database)
    first = await finalizer.confirm(
        (await reservation_service.reserve(event_id, [seats["A1"]])).token,
        CUSTOMER,
        PAYMENT,
    )
    second = await finalizer.confirm(
        (await reservation_service.reserve(event_id, [seats["A2"], seats["A3"]])).token,
        CUSTOMER,
        {**PAYMENT, "transaction_id": "txn_0002"},
    )

    async with database.session() as db:
        service = BookingService(db)
        by_id = await service.get_booking(first.booking_id)
        by_ref = await service.get_booking_by_reference(second.booking_reference)
        listed = await service.list_event_bookings(event_id)

        assert by_id.booking_reference == first.booking_reference
        assert [bs.seat_number for bs in by_ref.booking_seats] == ["A2", "A3"]
        assert {b.booking_id for b in listed} == {first.booking_id, second.booking_id}

        with pytest.raises(BookingNotFound):
            await service.get_booking(12345)
        with pytest.raises(BookingNotFound):
            await service.get_booking_by_reference("BK-MISSING")


async def test_confirm_after_ledger_entry_lapsed_unswept(
    reservation_service, finalizer, database, redis_client, clock
):
    event_id, seats = await seed_event(database)
    hold = await reservation_service.reserve(event_id, [seats["A1"]])
    clock.advance(601)
    # Record dropped by its Redis TTL; nothing has swept the token
    await redis_client.delete(f"reservation:{hold.token}")
    assert (await seat_statuses(database, event_id))["A1"] == SeatStatus.RESERVED

    with pytest.raises(ReservationExpired):
        await finalizer.confirm(hold.token, CUSTOMER, PAYMENT)

    assert (await seat_statuses(database, event_id))["A1"] == SeatStatus.AVAILABLE
    with pytest.raises(ReservationExpired):
        await finalizer.confirm(hold.token, CUSTOMER, PAYMENT)


async def test_confirm_after_ledger_lost_and_hold_time_passed(
    reservation_service, finalizer, database, redis_client, clock
):
    event_id, seats = await seed_event(database)
    hold = await reservation_service.reserve(event_id, [seats["A1"], seats["A2"]])
    await redis_client.flushall()
    clock.advance(601)

    with pytest.raises(ReservationExpired):
        await finalizer.confirm(hold.token, CUSTOMER, PAYMENT)

    statuses = await seat_statuses(database, event_id)
    assert statuses["A1"] == statuses["A2"] == SeatStatus.AVAILABLE


async def test_confirm_without_ledger_entry_leaves_live_seats_alone(
    reservation_service, finalizer, database, redis_client
):
    event_id, seats = await seed_event(database)
    hold = await reservation_service.reserve(event_id, [seats["A1"]])
    # Another confirm has taken the entry and not yet booked the seats
    await reservation_service.ledger.take(hold.token)

    with pytest.raises(ReservationNotFound):
        await finalizer.confirm(hold.token, CUSTOMER, PAYMENT)

    assert (await seat_statuses(database, event_id))["A1"] == SeatStatus.RESERVED


async def test_rejected_payment_does_not_consume_hold(
    reservation_service, finalizer, database, monkeypatch
):
    event_id, seats = await seed_event(database)
    hold = await reservation_service.reserve(event_id, [seats["A1"]])

    taken = []
    original_take = finalizer.ledger.take
    original_get = finalizer.ledger.get

    async def recording_take(token):
        taken.append(token)
        return await original_take(token)

    async def get_then_cancel(token):
        found = await original_get(token)
        # Customer cancels while the confirm is still checking its input
        await reservation_service.cancel(token)
        return found

    monkeypatch.setattr(finalizer.ledger, "take", recording_take)
    monkeypatch.setattr(finalizer.ledger, "get", get_then_cancel)

    with pytest.raises(InvalidPaymentInfo):
        await finalizer.confirm(hold.token, CUSTOMER, {**PAYMENT, "amount": "1.00"})

    assert taken == []
    assert (await seat_statuses(database, event_id))["A1"] == SeatStatus.AVAILABLE
    assert (await reservation_service.verify(hold.token)).valid is False


async def test_concurrent_confirm_and_cancel_agree(
    reservation_service, finalizer, database
):
    event_id, seats = await seed_event(database)
    hold = await reservation_service.reserve(event_id, [seats["A1"], seats["A2"]])

    confirmed, _ = await asyncio.gather(
        finalizer.confirm(hold.token, CUSTOMER, PAYMENT),
        reservation_service.cancel(hold.token),
        return_exceptions=True,
    )

    statuses = await seat_statuses(database, event_id)
    async with database.session() as db:
        bookings = await BookingService(db).list_event_bookings(event_id)

    if isinstance(confirmed, Exception):
        assert isinstance(confirmed, ReservationNotFound)
        assert statuses["A1"] == statuses["A2"] == SeatStatus.AVAILABLE
        assert bookings == []
    else:
        assert statuses["A1"] == statuses["A2"] == SeatStatus.BOOKED
        assert [b.booking_id for b in bookings] == [confirmed.booking_id]
