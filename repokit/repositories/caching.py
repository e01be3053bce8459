"""
Caching decorator for repositories.

Every operation of the repository interface is wrapped explicitly:

- find_or_fail: cached under ``<prefix>:entity:<repr(id)>``. Misses are
  re-raised and never cached, so an entity created later is found right away.
- query operations (find_where, get, get_page, get_cursor_page, count, get_with):
  cached under ``<prefix>:<generation>:<operation>:<md5 of arguments>``.
  ``None`` results are not cached.
- create: rotates the generation token, which orphans every cached query
  result at once.
- save / delete: forget ``<prefix>:entity:<repr(id)>`` and rotate the
  generation token.

Invalidation is best effort: a read racing a write may still serve the old
value until the write's invalidation lands.
"""

from __future__ import annotations

import hashlib
import uuid
from collections.abc import Callable, Sequence
from typing import Any

from repokit.config.constants import (
    DEFAULT_CACHE_TTL,
    get_entity_cache_key,
    get_generation_cache_key,
    get_query_cache_key,
)
from repokit.config.logging import get_logger
from repokit.infrastructure.cache.stores import CacheStore
from repokit.pagination import CursorRequest, CursorResult, Page, PagingInfo, SortOptions
from repokit.repositories.base import EntityT, IRepository

logger = get_logger(__name__)


def fingerprint(*args: Any) -> str:
    """Stable digest of operation arguments."""
    return hashlib.md5(repr(args).encode("utf-8"), usedforsecurity=False).hexdigest()


class CachingRepository(IRepository[EntityT]):
    """
    Repository decorator caching reads in a CacheStore.

    Usage:
        cached = CachingRepository(Repository(db, User), MemoryCacheStore(), prefix="users")
        cached.find_or_fail(42)  # hits the database
        cached.find_or_fail(42)  # served from cache
    """

    def __init__(
        self,
        repository: IRepository[EntityT],
        cache: CacheStore,
        prefix: str | None = None,
        ttl: int | None = DEFAULT_CACHE_TTL,
    ):
        self._repository = repository
        self._cache = cache
        self._prefix = prefix or repository.entity_name.lower()
        self._ttl = ttl

    @property
    def model(self) -> type[EntityT]:
        return self._repository.model

    @property
    def repository(self) -> IRepository[EntityT]:
        """The wrapped repository."""
        return self._repository

    @property
    def prefix(self) -> str:
        return self._prefix

    # =========================================================================
    # Cache keys
    # =========================================================================

    def _generation(self) -> str:
        key = get_generation_cache_key(self._prefix)
        generation = self._cache.get(key)
        if generation is None:
            generation = self._rotate_generation()
        return generation

    def _rotate_generation(self) -> str:
        generation = uuid.uuid4().hex
        # No TTL: the token must outlive the results cached under it
        self._cache.put(get_generation_cache_key(self._prefix), generation)
        return generation

    def _remember(self, key: str, compute: Callable[[], Any]) -> Any:
        if self._cache.has(key):
            logger.debug("Cache hit", key=key)
            return self._cache.get(key)

        logger.debug("Cache miss", key=key)
        value = compute()
        if value is not None:
            self._cache.put(key, value, self._ttl)
        return value

    def _remember_query(self, operation: str, compute: Callable[[], Any], *args: Any) -> Any:
        key = get_query_cache_key(self._prefix, self._generation(), operation, fingerprint(*args))
        return self._remember(key, compute)

    def _invalidate(self, entity_id: Any) -> None:
        if entity_id is not None:
            self._cache.forget(get_entity_cache_key(self._prefix, entity_id))
        self._rotate_generation()
        logger.debug("Cache invalidated", prefix=self._prefix, entity_id=entity_id)

    # =========================================================================
    # Reads
    # =========================================================================

    def find_or_fail(self, entity_id: Any) -> EntityT:
        key = get_entity_cache_key(self._prefix, entity_id)
        return self._remember(key, lambda: self._repository.find_or_fail(entity_id))

    def find_where(self, criteria: Any, sort: SortOptions | None = None) -> EntityT | None:
        return self._remember_query(
            "find_where",
            lambda: self._repository.find_where(criteria, sort),
            criteria,
            sort,
        )

    def get(self, criteria: Any = None, sort: SortOptions | None = None) -> Sequence[EntityT]:
        return self._remember_query("get", lambda: self._repository.get(criteria, sort), criteria, sort)

    def get_page(
        self,
        paging: PagingInfo,
        criteria: Any = None,
        sort: SortOptions | None = None,
    ) -> Page:
        return self._remember_query(
            "get_page",
            lambda: self._repository.get_page(paging, criteria, sort),
            paging,
            criteria,
            sort,
        )

    def get_cursor_page(
        self,
        cursor: CursorRequest,
        criteria: Any = None,
        sort: SortOptions | None = None,
    ) -> CursorResult:
        return self._remember_query(
            "get_cursor_page",
            lambda: self._repository.get_cursor_page(cursor, criteria, sort),
            cursor,
            criteria,
            sort,
        )

    def count(self, criteria: Any = None) -> int:
        return self._remember_query("count", lambda: self._repository.count(criteria), criteria)

    def get_with(
        self,
        eager_relations: Sequence[str],
        eager_counts: Sequence[str] | None = None,
        criteria: Any = None,
        sort: SortOptions | None = None,
    ) -> Sequence[EntityT]:
        return self._remember_query(
            "get_with",
            lambda: self._repository.get_with(eager_relations, eager_counts, criteria, sort),
            eager_relations,
            eager_counts,
            criteria,
            sort,
        )

    # =========================================================================
    # Writes
    # =========================================================================

    def create(self, entity: EntityT) -> EntityT:
        created = self._repository.create(entity)
        self._rotate_generation()
        return created

    def save(self, entity: EntityT) -> EntityT:
        saved = self._repository.save(entity)
        self._invalidate(saved.get_key())
        return saved

    def delete(self, entity: EntityT) -> None:
        entity_id = entity.get_key()
        self._repository.delete(entity)
        self._invalidate(entity_id)
