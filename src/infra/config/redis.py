"""
Redis connection for the shared claim/deposit account locks.
"""

import redis.asyncio as redis
from functools import lru_cache
from redis.exceptions import RedisError

from src.infra.config.settings import settings
from src.core.exceptions.base import ServiceErrorCode, UpstreamFailureError
from src.core.logger.logger import get_logger

logger = get_logger(__name__)


@lru_cache()
def get_redis_pool():
    """Get Redis connection pool (cached)"""
    return redis.ConnectionPool.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        max_connections=settings.REDIS_MAX_CONNECTIONS
    )


def get_lazy_redis() -> redis.Redis:
    """Client on the shared pool; no connection is opened until the first command"""
    return redis.Redis(connection_pool=get_redis_pool())


async def get_redis() -> redis.Redis:
    """
    Get a Redis client on the shared pool and check that it answers.

    Raises:
        UpstreamFailureError: Redis is unreachable; claims and deposits cannot be locked
    """
    redis_client = get_lazy_redis()
    try:
        await redis_client.ping()
    except RedisError as e:
        logger.error(f"Failed to connect to Redis: {e}", extra={"redis_url": settings.REDIS_URL.split("@")[-1]})
        raise UpstreamFailureError(
            "Lock store is unavailable",
            code=ServiceErrorCode.SERVICE_UNAVAILABLE,
        ) from e
    return redis_client


async def close_redis() -> None:
    """Disconnect the shared pool on shutdown"""
    if get_redis_pool.cache_info().currsize:
        await get_redis_pool().disconnect()
        get_redis_pool.cache_clear()
        logger.info("Redis pool closed")
