"""
Redis client initialization and connection management.

Redis carries the ride event channel when the broadcaster runs in
"redis" mode (several API workers sharing one fan-out).
"""

import logging

import redis.asyncio as redis
from redis.exceptions import RedisError
from mototaxi.app.core.config import settings

logger = logging.getLogger(__name__)

# Create async Redis client (connects lazily on first command)
redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def ping_redis() -> bool:
    """
    Test Redis connection.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        return await redis_client.ping()
    except (RedisError, OSError) as exc:
        logger.warning("Redis ping failed: %s", exc)
        return False
