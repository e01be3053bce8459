"""
Redis Connection Pool Management.

Synchronous pool shared by every RedisCacheStore of the process.
Values are stored as pickled bytes, so responses are never decoded.
"""

from __future__ import annotations

import threading

import redis

from repokit.config.logging import get_logger
from repokit.config.settings import RepositorySettings, get_settings

logger = get_logger(__name__)


_redis_sync_pool: redis.ConnectionPool | None = None
_sync_pool_lock = threading.Lock()


def _get_redis_sync_pool(settings: RepositorySettings | None = None) -> redis.ConnectionPool:
    """
    Get or create the synchronous Redis connection pool.

    Double-checked locking keeps concurrent first calls from creating
    two pools.
    """
    global _redis_sync_pool
    if _redis_sync_pool is None:
        with _sync_pool_lock:
            if _redis_sync_pool is None:
                settings = settings or get_settings()
                _redis_sync_pool = redis.ConnectionPool.from_url(
                    settings.redis_url,
                    max_connections=settings.redis_pool_max_connections,
                    decode_responses=False,
                    socket_connect_timeout=settings.redis_socket_timeout,
                    socket_timeout=settings.redis_socket_timeout,
                    health_check_interval=30,
                )
                logger.info(
                    "Redis sync pool initialized",
                    max_connections=settings.redis_pool_max_connections,
                    timeout=settings.redis_socket_timeout,
                )
    return _redis_sync_pool


def get_redis_sync_client(settings: RepositorySettings | None = None) -> redis.Redis:
    """
    Get a Redis client from the sync connection pool.

    Each call returns a client backed by the shared pool.
    """
    return redis.Redis(connection_pool=_get_redis_sync_pool(settings))


def close_redis_sync_client() -> None:
    """
    Close the sync Redis connection pool on application shutdown.

    Holds the pool lock so a concurrent get_redis_sync_client() never
    receives a pool that is being torn down.
    """
    global _redis_sync_pool
    with _sync_pool_lock:
        if _redis_sync_pool is not None:
            try:
                _redis_sync_pool.disconnect()
                logger.info("Redis sync pool closed")
            except redis.RedisError as e:
                logger.warning("Error closing Redis sync pool", error=str(e))
            finally:
                _redis_sync_pool = None
