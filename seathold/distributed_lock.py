"""Distributed lock implementation using Redis."""

import asyncio
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncGenerator

import redis.asyncio as redis


class DistributedLockError(Exception):
    """Raised when a lock cannot be acquired."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


@dataclass(frozen=True)
class LockOptions:
    """Timing knobs shared by every lock taken by a component."""

    timeout_seconds: int = 30
    retry_delay_ms: int = 100
    max_retries: int = 50


class DistributedLock:
    """
    Redis-based distributed lock.

    Uses SET NX EX for acquisition so a crashed holder cannot block others
    for longer than the timeout. Release goes through a Lua script so only
    the owner's token can delete the key.
    """

    RELEASE_SCRIPT = """
    if redis.call("get", KEYS[1]) == ARGV[1] then
        return redis.call("del", KEYS[1])
    else
        return 0
    end
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        key: str,
        options: LockOptions | None = None,
    ):
        self.redis = redis_client
        self.key = f"lock:{key}"
        self.options = options or LockOptions()
        self.token: str | None = None
        self._release_script = self.redis.register_script(self.RELEASE_SCRIPT)

    async def acquire(self, blocking: bool = True) -> bool:
        """
        Acquire the lock.

        Args:
            blocking: If True, retry until acquired or retries run out.
                     If False, try once.

        Returns:
            True if the lock was acquired.
        """
        token = uuid.uuid4().hex
        retries = 0

        while True:
            acquired = await self.redis.set(
                self.key,
                token,
                nx=True,
                ex=self.options.timeout_seconds,
            )

            if acquired:
                self.token = token
                return True

            if not blocking or retries >= self.options.max_retries:
                return False

            retries += 1
            await asyncio.sleep(self.options.retry_delay_ms / 1000)

    async def release(self) -> bool:
        """
        Release the lock.

        Returns:
            True if released, False if the lock had already passed to someone else.
        """
        if self.token is None:
            return False

        result = await self._release_script(keys=[self.key], args=[self.token])
        self.token = None
        return bool(result)


class MultiLock:
    """
    Acquire several locks as a unit.

    Keys are taken in sorted order so two callers with overlapping key sets
    cannot deadlock.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        keys: list[str],
        options: LockOptions | None = None,
    ):
        self.redis = redis_client
        self.options = options or LockOptions()
        self.sorted_keys = sorted(set(keys))
        self.locks: list[DistributedLock] = []
        self.contended_key: str | None = None

    async def acquire(self, blocking: bool = True) -> bool:
        """
        Acquire all locks in sorted order.

        Returns:
            True if all locks were acquired. On failure nothing stays held and
            ``contended_key`` names the key that could not be taken.
        """
        for key in self.sorted_keys:
            lock = DistributedLock(self.redis, key, self.options)
            if await lock.acquire(blocking=blocking):
                self.locks.append(lock)
            else:
                self.contended_key = key
                await self.release()
                return False
        return True

    async def release(self) -> None:
        """Release all locks in reverse order."""
        for lock in reversed(self.locks):
            await lock.release()
        self.locks.clear()


@asynccontextmanager
async def multi_lock(
    redis_client: redis.Redis,
    keys: list[str],
    options: LockOptions | None = None,
    blocking: bool = True,
) -> AsyncGenerator[MultiLock, None]:
    """
    Context manager for acquiring multiple locks.

    Usage:
        async with multi_lock(redis, ["seat:1", "seat:2"], options):
            ...

    Raises:
        DistributedLockError: If the locks cannot be acquired
    """
    mlock = MultiLock(redis_client, keys, options)
    acquired = await mlock.acquire(blocking=blocking)

    if not acquired:
        raise DistributedLockError(
            f"Failed to acquire lock for key: {mlock.contended_key}",
            key=mlock.contended_key,
        )

    try:
        yield mlock
    finally:
        await mlock.release()
