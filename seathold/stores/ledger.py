"""
Redis-backed ledger of active seat holds.

Each hold lives under ``reservation:{token}`` as JSON, with a physical TTL a
little longer than the hold itself so an expired hold can still be observed
and reported as expired. A sorted set scored by expiry time lets the sweeper
find expired holds without scanning keys.
"""

import logging
import math
from datetime import datetime
from decimal import Decimal

import redis.asyncio as redis
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class HeldSeat(BaseModel):
    """Snapshot of a seat at the time it was held."""

    model_config = ConfigDict(frozen=True)

    seat_id: int
    seat_number: str
    section: str | None = None
    row_number: str | None = None
    price: Decimal


class ReservationHold(BaseModel):
    """A time-limited exclusive claim on a set of seats."""

    model_config = ConfigDict(frozen=True)

    token: str
    event_id: int
    seat_ids: list[int]
    seats: list[HeldSeat]
    total_amount: Decimal
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def remaining_seconds(self, now: datetime) -> int:
        """Whole seconds left, rounded up; 0 once expired."""
        remaining = (self.expires_at - now).total_seconds()
        return max(0, math.ceil(remaining))


class LedgerConflictError(Exception):
    """Raised when a token already maps to a hold."""


class ReservationLedger:
    """TTL store of holds keyed by reservation token."""

    KEY_PREFIX = "reservation:"
    EXPIRED_PREFIX = "reservation:expired:"
    EXPIRY_INDEX = "reservation:expiry-index"

    # Get and delete in one step, dropping the index entry too. A token still
    # indexed without a record lapsed on its own and is marked expired.
    TAKE_SCRIPT = """
    local value = redis.call("get", KEYS[1])
    if value then
        redis.call("del", KEYS[1])
    end
    local indexed = redis.call("zrem", KEYS[2], ARGV[1])
    if not value and indexed == 1 then
        redis.call("set", KEYS[3], "1", "EX", ARGV[2])
    end
    return value
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        grace_seconds: int = 300,
        expired_retention_seconds: int = 3600,
    ):
        self.redis = redis_client
        self.grace_seconds = grace_seconds
        self.expired_retention_seconds = expired_retention_seconds
        self._take_script = self.redis.register_script(self.TAKE_SCRIPT)

    def _key(self, token: str) -> str:
        return f"{self.KEY_PREFIX}{token}"

    def _expired_key(self, token: str) -> str:
        return f"{self.EXPIRED_PREFIX}{token}"

    def _physical_ttl(self, hold: ReservationHold, now: datetime) -> int:
        return hold.remaining_seconds(now) + self.grace_seconds

    async def put(self, hold: ReservationHold, now: datetime) -> None:
        """
        Store a new hold.

        Raises:
            LedgerConflictError: If the token is already in use.
        """
        stored = await self.redis.set(
            self._key(hold.token),
            hold.model_dump_json(),
            nx=True,
            ex=self._physical_ttl(hold, now),
        )
        if not stored:
            raise LedgerConflictError(f"Token {hold.token} already holds seats")
        await self.redis.zadd(
            self.EXPIRY_INDEX, {hold.token: hold.expires_at.timestamp()}
        )

    async def get(self, token: str) -> ReservationHold | None:
        raw = await self.redis.get(self._key(token))
        if raw is None:
            return None
        return ReservationHold.model_validate_json(raw)

    async def take(self, token: str) -> ReservationHold | None:
        """
        Atomically remove and return a hold.

        Only one caller can take a given hold; everyone else gets None.
        """
        raw = await self._take_script(
            keys=[self._key(token), self.EXPIRY_INDEX, self._expired_key(token)],
            args=[token, self.expired_retention_seconds],
        )
        if raw is None:
            return None
        return ReservationHold.model_validate_json(raw)

    async def restore(self, hold: ReservationHold, now: datetime) -> bool:
        """Put back a hold that was taken but could not be finalized."""
        if hold.is_expired(now):
            return False
        try:
            await self.put(hold, now)
        except LedgerConflictError:
            logger.error("Hold %s reappeared while being restored", hold.token)
            return False
        return True

    async def mark_expired(self, token: str) -> None:
        """Remember that a token was released by expiry."""
        await self.redis.set(
            self._expired_key(token), "1", ex=self.expired_retention_seconds
        )

    async def was_expired(self, token: str) -> bool:
        return await self.redis.exists(self._expired_key(token)) == 1

    async def expired_tokens(self, now: datetime, limit: int = 100) -> list[str]:
        """Tokens of holds whose expiry time has passed."""
        return await self.redis.zrangebyscore(
            self.EXPIRY_INDEX, "-inf", now.timestamp(), start=0, num=limit
        )
