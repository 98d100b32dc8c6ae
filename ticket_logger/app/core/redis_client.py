"""
Redis client initialization.

Redis is optional: it only backs the rate limiter when several processes
must share request counters.
"""

from typing import Optional

import redis.asyncio as redis


def create_redis_client(url: str) -> redis.Redis:
    """Create an async Redis client; connections are opened lazily."""
    return redis.from_url(url, decode_responses=True)


async def ping_redis(client: Optional[redis.Redis]) -> bool:
    """
    Test Redis connection.

    Returns:
        True if connection successful, False otherwise
    """
    if client is None:
        return False
    try:
        return await client.ping()
    except Exception:
        return False
