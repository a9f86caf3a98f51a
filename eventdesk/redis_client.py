"""Shared async Redis connection, used for cache write locks."""

import logging

import redis.asyncio as redis

from eventdesk.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

_redis_client: redis.Redis | None = None


async def get_redis() -> redis.Redis | None:
    """
    Return the process-wide client, connecting lazily on first use.

    Returns None when ``REDIS_ENABLED`` is off.
    """
    global _redis_client
    if not settings.REDIS_ENABLED:
        return None
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        logger.debug(f"Redis client created for {settings.REDIS_HOST}:{settings.REDIS_PORT}")
    return _redis_client


async def close_redis() -> None:
    """Close the shared client, if one was opened."""
    global _redis_client
    if _redis_client is None:
        return
    await _redis_client.aclose()
    _redis_client = None
