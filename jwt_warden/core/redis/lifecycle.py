from collections.abc import Awaitable

from redis.asyncio import Redis
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    TimeoutError as RedisTimeoutError,
)

from jwt_warden.core.redis.core import create_redis_client
from jwt_warden.core.utils.retry import with_retries
from loggers import get_logger

logger = get_logger("redis")

PING_RETRIES = 3
PING_DELAY_SECONDS = 1


@with_retries(
    max_retries=PING_RETRIES,
    delay=PING_DELAY_SECONDS,
    exceptions=(RedisConnectionError, RedisTimeoutError),
)
async def ping_redis(redis_client: Redis) -> None:
    ping_result = redis_client.ping()
    if isinstance(ping_result, Awaitable):
        ping_result = await ping_result
    if not ping_result:
        raise RuntimeError("Redis ping failed during startup")


async def connect_redis(connection_url: str) -> Redis:
    """
    Create a Redis client and make sure the server answers before handing it out.
    """
    redis_client = create_redis_client(connection_url=connection_url)
    await ping_redis(redis_client)
    logger.info("Redis client created successfully.")
    return redis_client


async def close_redis(redis_client: Redis | None) -> None:
    if redis_client is not None:
        logger.info("Closing Redis client...")
        await redis_client.aclose()
        logger.info("Redis client closed.")
