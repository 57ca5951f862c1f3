"""Redis client factory for the hold ledger and distributed locks."""

import redis.asyncio as redis

from seathold.config import Settings


def create_redis(settings: Settings) -> redis.Redis:
    """Create a Redis client for the given settings."""
    return redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )


async def close_redis(client: redis.Redis) -> None:
    """Close Redis connection."""
    await client.aclose()
