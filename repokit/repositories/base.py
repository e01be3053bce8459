"""
Repository interface.
Every repository implementation, including decorators, provides this contract.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from repokit.pagination import CursorRequest, CursorResult, Page, PagingInfo, SortOptions

EntityT = TypeVar("EntityT")


class IRepository(ABC, Generic[EntityT]):
    """
    Data access contract for one entity type.

    ``criteria`` arguments accept any filter input understood by
    repokit.criteria (mapping, list of positional tuples, terms, nested lists).
    """

    @property
    @abstractmethod
    def model(self) -> type[EntityT]:
        """Entity class served by this repository."""
        ...

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    @abstractmethod
    def find_or_fail(self, entity_id: Any) -> EntityT:
        """
        Find entity by primary key.

        Raises:
            ModelNotFoundError: if no entity has this key
            RepositoryError: if the key is empty or of the wrong type
        """
        ...

    @abstractmethod
    def find_where(self, criteria: Any, sort: SortOptions | None = None) -> EntityT | None:
        """First entity matching ``criteria`` in ``sort`` order, None when nothing matches."""
        ...

    @abstractmethod
    def create(self, entity: EntityT) -> EntityT:
        ...

    @abstractmethod
    def save(self, entity: EntityT) -> EntityT:
        ...

    @abstractmethod
    def delete(self, entity: EntityT) -> None:
        ...

    @abstractmethod
    def get(self, criteria: Any = None, sort: SortOptions | None = None) -> Sequence[EntityT]:
        ...

    @abstractmethod
    def get_page(
        self,
        paging: PagingInfo,
        criteria: Any = None,
        sort: SortOptions | None = None,
    ) -> Page:
        ...

    @abstractmethod
    def get_cursor_page(
        self,
        cursor: CursorRequest,
        criteria: Any = None,
        sort: SortOptions | None = None,
    ) -> CursorResult:
        ...

    @abstractmethod
    def count(self, criteria: Any = None) -> int:
        ...

    @abstractmethod
    def get_with(
        self,
        eager_relations: Sequence[str],
        eager_counts: Sequence[str] | None = None,
        criteria: Any = None,
        sort: SortOptions | None = None,
    ) -> Sequence[EntityT]:
        """
        Fetch entities with relations eagerly loaded.

        Args:
            eager_relations: Relation names, dotted for nested relations ("roles.permissions")
            eager_counts: Relation names whose row count is set on each entity as ``<relation>_count``
        """
        ...
