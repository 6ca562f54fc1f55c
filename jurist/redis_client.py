"""Shared Redis connection for sessions and the notification queue."""

from typing import Optional

import redis.asyncio as redis
import structlog

from jurist.config import settings

logger = structlog.get_logger()

_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """Return the process-wide client, connecting on first use."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            decode_responses=True,
            health_check_interval=30,
        )
    return _redis_client


async def close_redis_client() -> None:
    """Close the shared client; the next get_redis_client() reconnects."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
        logger.info("redis_closed")


async def get_redis() -> redis.Redis:
    """FastAPI dependency for the Redis client."""
    return get_redis_client()
