"""Redis lock serializing utilization cache writes for the same day."""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncGenerator

import redis.asyncio as redis

from eventdesk.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

LOCK_PREFIX = "lock:"

# Delete the key only while it still carries our token
_RELEASE_IF_OWNER = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class DistributedLockError(Exception):
    """Raised when a lock is held by another worker."""


class DistributedLock:
    """
    Expiring Redis lock (``SET key token NX EX ttl``).

    The key expires on its own, so a crashed worker cannot block a day
    forever. Release is a compare-and-delete script keyed on a random token.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        name: str,
        ttl_seconds: int | None = None,
        retry_delay_ms: int | None = None,
        max_retries: int | None = None,
    ):
        self.redis = redis_client
        self.key = LOCK_PREFIX + name
        self.ttl_seconds = ttl_seconds or settings.LOCK_TIMEOUT_SECONDS
        self.retry_delay = (retry_delay_ms or settings.LOCK_RETRY_DELAY_MS) / 1000
        self.max_retries = max_retries or settings.LOCK_MAX_RETRIES
        self.token: str | None = None
        self._release = self.redis.register_script(_RELEASE_IF_OWNER)

    @property
    def held(self) -> bool:
        return self.token is not None

    async def _try_set(self, token: str) -> bool:
        return bool(
            await self.redis.set(self.key, token, nx=True, ex=self.ttl_seconds)
        )

    async def acquire(self, blocking: bool = True) -> bool:
        """
        Take the lock.

        A non-blocking call makes a single attempt; a blocking one polls
        every ``retry_delay`` seconds up to ``max_retries`` more times.
        """
        token = uuid.uuid4().hex
        attempts = 1 + (self.max_retries if blocking else 0)

        for attempt in range(attempts):
            if await self._try_set(token):
                self.token = token
                return True
            if attempt + 1 < attempts:
                await asyncio.sleep(self.retry_delay)

        logger.debug(f"Lock {self.key} busy after {attempts} attempt(s)")
        return False

    async def release(self) -> bool:
        """Give the lock back; False if it had already expired or changed hands."""
        if self.token is None:
            return False

        token, self.token = self.token, None
        released = bool(await self._release(keys=[self.key], args=[token]))
        if not released:
            logger.warning(f"Lock {self.key} expired before release")
        return released


def utilization_lock_key(day: date) -> str:
    """Lock name for writing the utilization row of one day."""
    return f"utilization:{day.isoformat()}"


@asynccontextmanager
async def distributed_lock(
    redis_client: redis.Redis,
    name: str,
    ttl_seconds: int | None = None,
    blocking: bool = True,
) -> AsyncGenerator[DistributedLock, None]:
    """
    Hold ``name`` for the duration of the block.

    Raises:
        DistributedLockError: If the lock could not be taken.
    """
    lock = DistributedLock(redis_client, name, ttl_seconds)
    if not await lock.acquire(blocking=blocking):
        raise DistributedLockError(f"Lock {name} is held by another worker")

    try:
        yield lock
    finally:
        await lock.release()
