"""
Redis Connection

Shared async Redis client. The API only uses Redis for rate limiting, so
every caller must cope with the client being unavailable.
"""

import logging

from redis.asyncio import Redis, from_url

from chenaniah.core.config import settings

logger = logging.getLogger(__name__)

redis_client: Redis | None = None


async def init_redis() -> Redis:
    """Connect to Redis on startup and verify the connection."""
    global redis_client
    client = from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
    await client.ping()
    redis_client = client
    return client


def get_redis() -> Redis | None:
    """Return the connected client, or None when Redis is not in use."""
    return redis_client


async def close_redis() -> None:
    """Close the Redis connection on shutdown."""
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None
