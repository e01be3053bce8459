"""
Filter terms accepted by repositories.

A filter is a tree of terms:

- Criterion: compare one attribute with a value
- Group: parenthesised list of terms
- RelationCriterion: at least one related record matches nested criteria

Every term carries ``boolean``, the joiner ("and"/"or") relative to the
previous sibling on the same level. Loosely shaped input (dicts, lists,
positional tuples) is turned into terms by repokit.criteria.parser.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from repokit.config.constants import BOOLEAN_AND


@dataclass(frozen=True)
class Term:
    boolean: str = field(default=BOOLEAN_AND, kw_only=True)


@dataclass(frozen=True)
class Criterion(Term):
    """
    Data retrieving criterion that retrieved items should match.

    Usage:
        Criterion("age", ">=", 18)
        Criterion("status", "in", ["new", "open"], boolean="or")
    """

    attribute: str | None
    operator: str | None = "="
    value: Any = None


@dataclass(frozen=True)
class Group(Term):
    """Nested list of terms compiled inside parentheses."""

    terms: Sequence[Any] = ()


@dataclass(frozen=True)
class RelationCriterion(Term):
    """
    Criterion checking existence of related records.

    Usage:
        RelationCriterion("cars", [["brand", "=", "Volvo"]])
    """

    relation: str
    criteria: Sequence[Any] = ()
