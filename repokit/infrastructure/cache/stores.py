"""
Cache stores used by CachingRepository.

A store only needs has/get/put/forget. Two implementations ship:

- MemoryCacheStore: process-local dictionary with per-key expiry
- RedisCacheStore: shared store backed by redis-py, values pickled
"""

from __future__ import annotations

import pickle
import threading
import time
from typing import Any, Protocol, runtime_checkable

import redis

from repokit.config.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class CacheStore(Protocol):
    """Minimal key/value cache contract."""

    def has(self, key: str) -> bool:
        ...

    def get(self, key: str) -> Any:
        ...

    def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store value; ``ttl`` in seconds, ``None`` keeps it until evicted."""
        ...

    def forget(self, key: str) -> None:
        ...


class MemoryCacheStore:
    """Thread-safe in-process cache. Expired keys are dropped lazily on access."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._items: dict[str, tuple[Any, float | None]] = {}
        self._lock = threading.Lock()

    def _alive(self, key: str) -> bool:
        item = self._items.get(key)
        if item is None:
            return False
        expires_at = item[1]
        if expires_at is not None and expires_at <= self._clock():
            del self._items[key]
            return False
        return True

    def has(self, key: str) -> bool:
        with self._lock:
            return self._alive(key)

    def get(self, key: str) -> Any:
        with self._lock:
            if not self._alive(key):
                return None
            return self._items[key][0]

    def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        expires_at = self._clock() + ttl if ttl is not None else None
        with self._lock:
            self._items[key] = (value, expires_at)

    def forget(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for key in list(self._items) if self._alive(key))


class RedisCacheStore:
    """
    Redis backed cache.

    Usage:
        from repokit.infrastructure.cache import RedisCacheStore, get_redis_sync_client

        store = RedisCacheStore(get_redis_sync_client())
    """

    def __init__(self, client: redis.Redis):
        self._redis = client

    def has(self, key: str) -> bool:
        return bool(self._redis.exists(key))

    def get(self, key: str) -> Any:
        raw = self._redis.get(key)
        if raw is None:
            return None
        try:
            return pickle.loads(raw)
        except (pickle.UnpicklingError, AttributeError, EOFError, ImportError) as e:
            # Payload written by an incompatible version of the cached class
            logger.warning("Dropping unreadable cache entry", key=key, error=str(e))
            self._redis.delete(key)
            return None

    def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        payload = pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        if ttl is None:
            self._redis.set(key, payload)
        else:
            self._redis.setex(key, ttl, payload)

    def forget(self, key: str) -> None:
        self._redis.delete(key)
