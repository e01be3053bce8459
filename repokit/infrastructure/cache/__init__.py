"""
Cache package: store contract, implementations and the Redis pool.
"""

from repokit.infrastructure.cache.redis_pool import (
    close_redis_sync_client,
    get_redis_sync_client,
)
from repokit.infrastructure.cache.stores import (
    CacheStore,
    MemoryCacheStore,
    RedisCacheStore,
)

__all__ = [
    "CacheStore",
    "MemoryCacheStore",
    "RedisCacheStore",
    "close_redis_sync_client",
    "get_redis_sync_client",
]
