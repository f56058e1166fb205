"""Redis implementation of AnalysisCacheStore."""

import logging
from typing import Optional

import redis

from papertrade.core.exceptions import CacheUnavailableError

logger = logging.getLogger(__name__)


class RedisCacheStore:
    """Cache store backed by a shared Redis client."""

    def __init__(self, client: redis.Redis):
        self._client = client

    def get(self, key: str) -> Optional[str]:
        try:
            value = self._client.get(key)
        except redis.RedisError as e:
            raise CacheUnavailableError(f"Redis get failed for {key}: {e}") from e
        if value is None:
            logger.debug(f"Cache miss: {key}")
            return None
        logger.debug(f"Cache hit: {key}")
        return value

    def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            self._client.setex(key, ttl_seconds, value)
        except redis.RedisError as e:
            raise CacheUnavailableError(f"Redis set failed for {key}: {e}") from e
        logger.debug(f"Cache set: {key} (TTL: {ttl_seconds}s)")
