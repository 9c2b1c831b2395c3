from redis.asyncio import Redis

from loggers import get_logger

logger = get_logger(__name__)


def create_redis_client(connection_url: str) -> Redis:
    """
    Create a Redis async client from URL with string-decoded responses.
    """
    try:
        return Redis.from_url(connection_url, decode_responses=True)
    except ValueError:
        logger.exception("Failed to create Redis client from the configured URL")
        raise
