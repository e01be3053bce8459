"""
Relation helpers built on the mapper's relationship registry.

Relations are declared once with ``relationship()`` on the model; these helpers
only look them up by name. Nested relations use dotted paths ("role.permissions").

Usage:
    query = join_relation(select(User), User, "role")
    query = query.order_by(Role.name)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy import Select, func, inspect, select
from sqlalchemy.orm import RelationshipProperty, selectinload

from repokit.criteria.compiler import joined_tables
from repokit.utils.exceptions import RelationNotFoundError, RelationNotSupportedError

POLYMORPHIC = "polymorphic"
SELF_REFERENTIAL = "self-referential"


def resolve_relationship(model: type, name: str) -> RelationshipProperty:
    """
    Relationship ``name`` declared on ``model``.

    Raises:
        RelationNotFoundError: if the model declares no such relationship
    """
    relationship = inspect(model).relationships.get(name)
    if relationship is None:
        raise RelationNotFoundError(model, name)
    return relationship


def resolve_path(model: type, path: str) -> list[RelationshipProperty]:
    """Relationships along a dotted path, starting at ``model``."""
    relationships = []
    current = model
    for name in path.split("."):
        relationship = resolve_relationship(current, name)
        relationships.append(relationship)
        current = relationship.mapper.class_
    return relationships


def relation_kind(relationship: RelationshipProperty) -> str | None:
    """Unsupported kind of a relationship for joins, None when it can be joined."""
    if relationship.mapper.polymorphic_on is not None:
        return POLYMORPHIC
    if relationship.mapper.local_table is relationship.parent.local_table:
        return SELF_REFERENTIAL
    return None


def join_relation(query: Select, model: type, relations: str | Iterable[str]) -> Select:
    """
    LEFT OUTER JOIN one or more relations of ``model`` onto ``query``.

    Many-to-many relations join the association table first. Tables already
    in the FROM list are not joined again.

    Raises:
        RelationNotFoundError: for unknown relation names
        RelationNotSupportedError: for polymorphic or self-referential relations
    """
    if isinstance(relations, str):
        relations = [relations]

    for path in relations:
        for relationship in resolve_path(model, path):
            kind = relation_kind(relationship)
            if kind is not None:
                raise RelationNotSupportedError(relationship.parent.class_, relationship.key, kind)

            present = joined_tables(query)
            target = relationship.mapper.local_table
            if relationship.secondary is not None:
                if relationship.secondary not in present:
                    query = query.outerjoin(relationship.secondary, relationship.primaryjoin)
                if target not in present:
                    query = query.outerjoin(target, relationship.secondaryjoin)
            elif target not in present:
                query = query.outerjoin(target, relationship.primaryjoin)
    return query


def eager_load_options(model: type, paths: Iterable[str]) -> list[Any]:
    """``selectinload`` loader options for (dotted) relation paths."""
    options = []
    for path in paths:
        loader = None
        current = model
        for relationship in resolve_path(model, path):
            attribute = getattr(current, relationship.key)
            loader = selectinload(attribute) if loader is None else loader.selectinload(attribute)
            current = relationship.mapper.class_
        options.append(loader)
    return options


def count_label(name: str) -> str:
    return f"{name}_count"


def relation_count(model: type, name: str):
    """
    Correlated ``COUNT(*)`` of the rows related through ``name``, labelled
    ``<name>_count``.

    Raises:
        RelationNotFoundError: for unknown relation names
        RelationNotSupportedError: for self-referential relations
    """
    relationship = resolve_relationship(model, name)
    if relation_kind(relationship) == SELF_REFERENTIAL:
        raise RelationNotSupportedError(model, name, SELF_REFERENTIAL)

    counted = relationship.secondary if relationship.secondary is not None else relationship.mapper.local_table
    return (
        select(func.count())
        .select_from(counted)
        .where(relationship.primaryjoin)
        .correlate(inspect(model).local_table)
        .scalar_subquery()
        .label(count_label(name))
    )
