"""
Repository factory.

The factory is an explicit registry owned by the application: it maps entity
classes to repository classes, validates each pairing when it is registered
and hands out one shared repository instance per entity class.

Usage:
    factory = RepositoryFactory(db, cache=RedisCacheStore(get_redis_sync_client()))
    factory.register(User, UserRepository)

    users = factory.get_repository(User)  # UserRepository wrapped in CachingRepository
    roles = factory.get_repository(Role)  # plain Repository
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session

from repokit.config.logging import get_logger
from repokit.config.settings import RepositorySettings, get_settings
from repokit.infrastructure.cache.stores import CacheStore
from repokit.repositories.base import IRepository
from repokit.repositories.caching import CachingRepository
from repokit.repositories.repository import Repository, is_entity_class
from repokit.utils.exceptions import RepositoryRegisterError

logger = get_logger(__name__)


class RepositoryFactory:
    """
    Registry of repositories for one session.

    Args:
        session: Session shared by every repository handed out
        cache: Cache store; repositories are wrapped in CachingRepository when
            given and caching is enabled in settings
        settings: Defaults to get_settings()
        registrations: Initial entity class -> repository class pairs

    Raises:
        RepositoryRegisterError: on invalid settings or registrations
    """

    def __init__(
        self,
        session: Session,
        *,
        cache: CacheStore | None = None,
        settings: RepositorySettings | None = None,
        registrations: Mapping[type, type[IRepository]] | None = None,
    ):
        self._session = session
        self._cache = cache
        self._settings = settings or get_settings()
        self._registry: dict[type, type[IRepository]] = {}
        self._instances: dict[type, IRepository] = {}

        errors = self._settings.validate_configuration()
        if errors:
            raise RepositoryRegisterError(f"Invalid repository settings: {'; '.join(errors)}", errors=errors)

        for model, repository_class in (registrations or {}).items():
            self.register(model, repository_class)

    @property
    def caching(self) -> bool:
        return self._cache is not None and self._settings.cache_enabled

    def register(self, model: type, repository_class: type[IRepository]) -> None:
        """
        Register the repository class serving ``model``.

        Raises:
            RepositoryRegisterError: if the pairing is invalid
        """
        if not is_entity_class(model):
            raise RepositoryRegisterError(f"{model!r} is not a mapped entity class", model=repr(model))
        if not isinstance(repository_class, type) or not issubclass(repository_class, IRepository):
            raise RepositoryRegisterError(
                f"{repository_class!r} does not implement IRepository",
                model=model.__name__,
            )

        pinned = getattr(repository_class, "entity_class", None)
        if pinned is not None and pinned is not model:
            raise RepositoryRegisterError(
                f"{repository_class.__name__} serves {pinned.__name__}, not {model.__name__}",
                model=model.__name__,
            )

        self._registry[model] = repository_class
        self._instances.pop(model, None)
        logger.debug("Repository registered", model=model.__name__, repository=repository_class.__name__)

    def is_registered(self, model: type) -> bool:
        return model in self._registry

    def get_repository(self, model: type) -> IRepository:
        """Shared repository instance for ``model``, created on first use."""
        instance = self._instances.get(model)
        if instance is None:
            instance = self._build(model)
            self._instances[model] = instance
        return instance

    def _build(self, model: type) -> IRepository:
        repository_class = self._registry.get(model, Repository)
        repository: Any = repository_class(self._session, model, settings=self._settings)

        if self.caching:
            prefix = f"{self._settings.cache_prefix}:{model.__name__.lower()}"
            repository = CachingRepository(repository, self._cache, prefix=prefix, ttl=self._settings.cache_ttl)
        return repository
