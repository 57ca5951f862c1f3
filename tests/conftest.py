from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis

from seathold.config import Settings
from seathold.database import Database
from seathold.services.booking_finalizer import BookingFinalizer
from seathold.services.reservation_service import ReservationService


class FakeClock:
    """Clock the tests move by hand."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'seathold.db'}",
        LOCK_RETRY_DELAY_MS=10,
        LOCK_MAX_RETRIES=300,
        SWEEP_ENABLED=False,
    )


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 14, 19, 30, 0))


@pytest_asyncio.fixture
async def database(settings):
    db = Database(settings.database_url)
    await db.create_all()
    try:
        yield db
    finally:
        await db.dispose()


@pytest_asyncio.fixture
async def redis_client():
    r = FakeAsyncRedis(decode_responses=True)
    try:
        await r.flushall()
        yield r
    finally:
        await r.flushall()
        await r.aclose()


@pytest.fixture
def reservation_service(database, redis_client, settings, clock):
    return ReservationService(database, redis_client, settings, clock)


@pytest.fixture
def finalizer(database, redis_client, settings, clock):
    return BookingFinalizer(database, redis_client, settings, clock)
