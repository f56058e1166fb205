"""Process-wide Redis client lifecycle."""

import logging
from typing import Optional

import redis

logger = logging.getLogger(__name__)

# Module-level client state (initialized at startup, closed at shutdown)
_client: Optional[redis.Redis] = None


def init_cache_client(redis_url: str, socket_timeout: float = 2.0) -> redis.Redis:
    """
    Create the shared Redis client.

    Connection is lazy; an unreachable server surfaces on first use as a
    cache outage, never at startup.
    """
    global _client
    if _client is not None:
        return _client
    _client = redis.Redis.from_url(
        redis_url,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
        decode_responses=True,
    )
    logger.info("Redis cache client initialized")
    return _client


def close_cache_client() -> None:
    """Close the shared client and release its connection pool."""
    global _client
    if _client is None:
        return
    try:
        _client.close()
    except redis.RedisError as e:
        logger.warning(f"Error closing Redis client: {e}")
    finally:
        _client = None
