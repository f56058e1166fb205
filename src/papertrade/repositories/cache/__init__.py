"""Analysis cache store implementations."""

from papertrade.repositories.cache.client import (
    init_cache_client,
    close_cache_client,
)
from papertrade.repositories.cache.redis_store import RedisCacheStore
from papertrade.repositories.cache.memory_store import InMemoryCacheStore

__all__ = [
    "init_cache_client",
    "close_cache_client",
    "RedisCacheStore",
    "InMemoryCacheStore",
]
