"""
SQLAlchemy repository implementation.

Usage:
    from repokit import Repository, SortOptions, PagingInfo

    users = Repository(db, User)
    youngest_adult = users.find_where([["age", ">=", 18]], SortOptions("age"))
    page = users.get_page(PagingInfo(page=2, page_size=20), {"status": "active"})

    # Subclasses can pin the entity class
    class UserRepository(Repository[User]):
        entity_class = User
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any, ClassVar

from sqlalchemy import Select, func, inspect, select
from sqlalchemy.exc import NoInspectionAvailable, SQLAlchemyError
from sqlalchemy.orm import Session

from repokit.config.logging import get_logger
from repokit.config.settings import RepositorySettings, get_settings
from repokit.criteria import CriteriaCompiler
from repokit.infrastructure.db import safe_commit
from repokit.models.base import EntityMixin
from repokit.pagination import (
    CursorQueryBuilder,
    CursorRequest,
    CursorResult,
    Page,
    PagingInfo,
    SortOptions,
)
from repokit.repositories.base import EntityT, IRepository
from repokit.repositories.relations import (
    count_label,
    eager_load_options,
    join_relation,
    relation_count,
    resolve_path,
)
from repokit.utils.exceptions import BadCriteriaError, ModelNotFoundError, RepositoryError

logger = get_logger(__name__)


def is_entity_class(model: Any) -> bool:
    """Whether ``model`` is a mapped class using EntityMixin."""
    if not isinstance(model, type) or not issubclass(model, EntityMixin):
        return False
    try:
        inspect(model)
    except NoInspectionAvailable:
        return False
    return True


class Repository(IRepository[EntityT]):
    """
    Repository for one mapped entity class.

    Reads go through the criteria compiler; writes flush and, unless
    ``commit_on_write`` is disabled in settings, commit right away.
    """

    entity_class: ClassVar[type | None] = None

    def __init__(
        self,
        session: Session,
        model: type[EntityT] | None = None,
        *,
        settings: RepositorySettings | None = None,
    ):
        model = model or self.entity_class
        if not is_entity_class(model):
            raise RepositoryError(
                f"{model!r} is not a mapped entity class",
                entity_type=model,
                operation="init",
            )
        self._model = model
        self._session = session
        self._settings = settings or get_settings()
        self._mapper = inspect(model)
        self._compiler = CriteriaCompiler(model)

    @property
    def model(self) -> type[EntityT]:
        return self._model

    @property
    def session(self) -> Session:
        return self._session

    # =========================================================================
    # Query building
    # =========================================================================

    def _base_query(self) -> Select:
        return select(self._model)

    def _filtered_query(self, criteria: Any = None, query: Select | None = None) -> Select:
        query = self._base_query() if query is None else query
        if criteria:
            query = self._compiler.apply(query, criteria)
        return query

    def _apply_sort(self, query: Select, sort: SortOptions | None) -> Select:
        """
        ORDER BY from sort options.

        Dotted paths join the relation (LEFT OUTER) and sort by the related
        column.
        """
        if sort is None:
            return query

        target = self._model
        if sort.relation_path is not None:
            query = join_relation(query, self._model, sort.relation_path)
            target = resolve_path(self._model, sort.relation_path)[-1].mapper.class_

        if sort.attribute not in inspect(target).column_attrs:
            raise BadCriteriaError(f"Cannot sort by unknown attribute '{sort.order_by}'", entity_type=self._model)

        column = getattr(target, sort.attribute)
        return query.order_by(column.desc() if sort.descending else column.asc())

    def _select(self, criteria: Any = None, sort: SortOptions | None = None) -> Select:
        query = self._apply_sort(self._filtered_query(criteria), sort)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Compiled query", entity=self.entity_name, sql=str(query))
        return query

    # =========================================================================
    # Reads
    # =========================================================================

    def find_or_fail(self, entity_id: Any) -> EntityT:
        if entity_id is None or entity_id == "":
            raise RepositoryError("Entity ID must not be empty", entity_type=self._model, operation="find")

        key_columns = self._mapper.primary_key
        if len(key_columns) == 1:
            self._check_key_type(key_columns[0], entity_id)

        entity = self._session.get(self._model, entity_id)
        if entity is None:
            raise ModelNotFoundError(self._model, entity_id)
        return entity

    def _check_key_type(self, column: Any, entity_id: Any) -> None:
        """Reject IDs whose type cannot match an integer or string primary key."""
        try:
            key_type = column.type.python_type
        except NotImplementedError:
            return
        if key_type is int and (isinstance(entity_id, bool) or not isinstance(entity_id, int)):
            raise RepositoryError(
                f"Entity ID must be an integer, got {type(entity_id).__name__}",
                entity_type=self._model,
                operation="find",
            )
        if key_type is str and not isinstance(entity_id, str):
            raise RepositoryError(
                f"Entity ID must be a string, got {type(entity_id).__name__}",
                entity_type=self._model,
                operation="find",
            )

    def find_where(self, criteria: Any, sort: SortOptions | None = None) -> EntityT | None:
        return self._session.scalars(self._select(criteria, sort).limit(1)).first()

    def get(self, criteria: Any = None, sort: SortOptions | None = None) -> Sequence[EntityT]:
        return self._session.scalars(self._select(criteria, sort)).unique().all()

    def count(self, criteria: Any = None) -> int:
        query = self._filtered_query(criteria, select(func.count()).select_from(self._model))
        return self._session.scalar(query) or 0

    def get_page(
        self,
        paging: PagingInfo,
        criteria: Any = None,
        sort: SortOptions | None = None,
    ) -> Page:
        """
        Offset paginated listing.

        The page size is capped at ``max_page_size`` from settings.
        """
        page_size = min(paging.page_size, self._settings.max_page_size)
        total = self.count(criteria)
        query = self._select(criteria, sort).offset((paging.page - 1) * page_size).limit(page_size)
        items = list(self._session.scalars(query).unique().all())
        return Page(items=items, total=total, page=paging.page, page_size=page_size)

    def get_cursor_page(
        self,
        cursor: CursorRequest,
        criteria: Any = None,
        sort: SortOptions | None = None,
    ) -> CursorResult:
        if cursor.page_size > self._settings.max_page_size:
            cursor = CursorRequest(current=cursor.current, page_size=self._settings.max_page_size)
        builder = CursorQueryBuilder(cursor, self._select(criteria, sort), self._model)
        return builder.get_cursor(self._session)

    def get_with(
        self,
        eager_relations: Sequence[str],
        eager_counts: Sequence[str] | None = None,
        criteria: Any = None,
        sort: SortOptions | None = None,
    ) -> Sequence[EntityT]:
        if isinstance(eager_relations, str):
            eager_relations = [eager_relations]
        eager_counts = [eager_counts] if isinstance(eager_counts, str) else list(eager_counts or [])

        query = self._select(criteria, sort).options(*eager_load_options(self._model, eager_relations))
        if not eager_counts:
            return self._session.scalars(query).unique().all()

        query = query.add_columns(*(relation_count(self._model, name) for name in eager_counts))
        entities = []
        for row in self._session.execute(query):
            entity = row[0]
            for name, value in zip(eager_counts, row[1:]):
                entity.set_parameter(count_label(name), value or 0)
            entities.append(entity)
        return entities

    def join_relation(self, query: Select, relations: str | Sequence[str]) -> Select:
        """LEFT OUTER JOIN relations of the served entity onto ``query``."""
        return join_relation(query, self._model, relations)

    # =========================================================================
    # Writes
    # =========================================================================

    def _ensure_instance(self, entity: Any, operation: str) -> None:
        if not isinstance(entity, self._model):
            raise RepositoryError(
                f"Expected {self.entity_name} instance, got {type(entity).__name__}",
                entity_type=self._model,
                operation=operation,
            )

    @contextmanager
    def _writing(self, operation: str) -> Iterator[None]:
        """Flush (and commit) the unit of work, wrapping store failures."""
        try:
            yield
            self._session.flush()
            if self._settings.commit_on_write:
                safe_commit(self._session)
        except SQLAlchemyError as e:
            self._session.rollback()
            raise RepositoryError(
                f"Failed to {operation} entity: {e}",
                entity_type=self._model,
                operation=operation,
            ) from e

    def create(self, entity: EntityT) -> EntityT:
        self._ensure_instance(entity, "create")
        with self._writing("create"):
            self._session.add(entity)
        logger.info("Entity created", entity=self.entity_name, entity_id=entity.get_key())
        return entity

    def save(self, entity: EntityT) -> EntityT:
        self._ensure_instance(entity, "save")
        with self._writing("save"):
            self._session.add(entity)
        logger.info("Entity saved", entity=self.entity_name, entity_id=entity.get_key())
        return entity

    def delete(self, entity: EntityT) -> None:
        self._ensure_instance(entity, "delete")
        entity_id = entity.get_key()
        with self._writing("delete"):
            self._session.delete(entity)
        logger.info("Entity deleted", entity=self.entity_name, entity_id=entity_id)
