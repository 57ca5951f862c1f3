from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from seathold.stores.ledger import (
    HeldSeat,
    LedgerConflictError,
    ReservationHold,
    ReservationLedger,
)

pytestmark = pytest.mark.asyncio

NOW = datetime(2026, 3, 14, 19, 30, 0)


def make_hold(token="tok-1", ttl=600, created_at=NOW) -> ReservationHold:
    return ReservationHold(
        token=token,
        event_id=7,
        seat_ids=[3, 1],
        seats=[
            HeldSeat(seat_id=3, seat_number="B3", price=Decimal("40.00")),
            HeldSeat(seat_id=1, seat_number="B1", price=Decimal("40.00")),
        ],
        total_amount=Decimal("80.00"),
        created_at=created_at,
        expires_at=created_at + timedelta(seconds=ttl),
    )


def test_remaining_seconds_rounds_up_and_floors_at_zero():
    hold = make_hold()
    assert hold.remaining_seconds(NOW) == 600
    assert hold.remaining_seconds(NOW + timedelta(seconds=0.5)) == 600
    assert hold.remaining_seconds(NOW + timedelta(seconds=599.2)) == 1
    assert hold.remaining_seconds(NOW + timedelta(seconds=700)) == 0
    assert not hold.is_expired(NOW + timedelta(seconds=599))
    assert hold.is_expired(NOW + timedelta(seconds=600))


async def test_put_and_get_keeps_seat_order_and_amounts(redis_client):
    ledger = ReservationLedger(redis_client)
    await ledger.put(make_hold(), NOW)

    stored = await ledger.get("tok-1")

    assert stored == make_hold()
    assert stored.seat_ids == [3, 1]
    assert stored.total_amount == Decimal("80.00")


async def test_physical_ttl_covers_hold_plus_grace(redis_client):
    ledger = ReservationLedger(redis_client, grace_seconds=120)
    await ledger.put(make_hold(), NOW)

    ttl = await redis_client.ttl("reservation:tok-1")

    assert 600 < ttl <= 720


async def test_token_maps_to_one_hold(redis_client):
    ledger = ReservationLedger(redis_client)
    await ledger.put(make_hold(), NOW)

    with pytest.raises(LedgerConflictError):
        await ledger.put(make_hold(ttl=60), NOW)

    assert (await ledger.get("tok-1")).expires_at == NOW + timedelta(seconds=600)


async def test_take_is_exclusive(redis_client):
    ledger = ReservationLedger(redis_client)
    await ledger.put(make_hold(), NOW)

    first = await ledger.take("tok-1")
    second = await ledger.take("tok-1")

    assert first == make_hold()
    assert second is None
    assert await ledger.get("tok-1") is None
    assert await ledger.expired_tokens(NOW + timedelta(days=1)) == []


async def test_expired_tokens_only_lists_holds_past_expiry(redis_client):
    ledger = ReservationLedger(redis_client)
    await ledger.put(make_hold("short", ttl=60), NOW)
    await ledger.put(make_hold("long", ttl=600), NOW)

    assert await ledger.expired_tokens(NOW) == []
    assert await ledger.expired_tokens(NOW + timedelta(seconds=60)) == ["short"]
    assert set(await ledger.expired_tokens(NOW + timedelta(seconds=600))) == {
        "short",
        "long",
    }


async def test_restore_puts_back_live_hold_only(redis_client):
    ledger = ReservationLedger(redis_client)
    hold = make_hold()

    assert await ledger.restore(hold, NOW + timedelta(seconds=10)) is True
    assert await ledger.get("tok-1") == hold

    await ledger.take("tok-1")
    assert await ledger.restore(hold, NOW + timedelta(seconds=600)) is False
    assert await ledger.get("tok-1") is None


async def test_expired_marker(redis_client):
    ledger = ReservationLedger(redis_client, expired_retention_seconds=90)

    assert await ledger.was_expired("tok-1") is False
    await ledger.mark_expired("tok-1")

    assert await ledger.was_expired("tok-1") is True
    assert 0 < await redis_client.ttl("reservation:expired:tok-1") <= 90


async def test_take_of_lapsed_entry_marks_it_expired(redis_client):
    ledger = ReservationLedger(redis_client)
    await ledger.put(make_hold(), NOW)
    # Record gone by its own TTL, index entry still present
    await redis_client.delete("reservation:tok-1")

    assert await ledger.take("tok-1") is None
    assert await ledger.was_expired("tok-1")
    assert await ledger.expired_tokens(NOW + timedelta(hours=1)) == []


async def test_take_of_unknown_token_leaves_no_marker(redis_client):
    ledger = ReservationLedger(redis_client)

    assert await ledger.take("never-issued") is None
    assert not await ledger.was_expired("never-issued")
