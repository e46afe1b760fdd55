"""Redis connection for the shared page cache.

Only used when ``PAGE_CACHE_BACKEND=redis``; pages then survive restarts
and are shared by every worker instead of being rendered once per process.
"""

import redis.asyncio as redis

from src.config.settings import Settings
from src.core.logging import get_logger


logger = get_logger(__name__)


async def connect_page_cache_redis(settings: Settings) -> redis.Redis:
    """Open a pool to ``settings.redis_url`` and check it answers.

    Raises:
        redis.RedisError: If the server cannot be reached.
    """
    client = redis.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_connect_timeout,
        retry_on_timeout=settings.redis_retry_on_timeout,
        health_check_interval=settings.redis_health_check_interval,
    )

    try:
        await client.ping()
    except redis.RedisError:
        await client.aclose()
        raise

    logger.info("redis_connected", url=settings.redis_url)
    return client


async def close_page_cache_redis(client: redis.Redis | None) -> None:
    """Close the pool opened by :func:`connect_page_cache_redis`."""
    if client is None:
        return
    await client.aclose()
    logger.info("redis_disconnected")
