"""
Parsing of loosely shaped filter input into criteria terms.

Input is either a mapping or a list/tuple. Each entry is classified by the
first matching rule:

1. RelationCriterion instance         -> kept as is
2. Criterion instance                 -> kept as is
3. Group instance                     -> kept as is
4. string key with a scalar value     -> Criterion(key, "=", value)
5. integer key with a nested group    -> Group (joiner from the "boolean" key)
6. integer key with a list/tuple      -> positional [attribute, operator, value, boolean]
7. anything else                      -> BadCriteriaError

List input uses positional integer keys. A nested group is a non-empty
list/tuple whose every element is a list, tuple or term, or a mapping whose
every item is an integer key with such a value or the reserved
``"boolean": "and" | "or"`` item.

Examples:
    {"status": "open", "owner_id": 7}
    [["age", ">", 18], ["status", "in", ["new", "open"], "or"]]
    [[["f1", "<", 10], ["f1", ">", 100]], {0: ["f2", "=", 1], "boolean": "or"}]
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Any

from repokit.config.constants import (
    BOOLEAN_AND,
    BOOLEANS,
    GROUP_BOOLEAN_KEY,
    MULTIPLE_OPERATORS,
    SINGLE_OPERATORS,
)
from repokit.criteria.terms import Criterion, Group, RelationCriterion, Term
from repokit.utils.exceptions import BadCriteriaError

_SCALAR_TYPES = (str, bytes, int, float, Decimal, date, time, uuid.UUID, Enum)
_COLLECTION_TYPES = (list, tuple, set, frozenset)
_POSITIONAL_DEFAULTS = (None, None, None, BOOLEAN_AND)


def is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, _SCALAR_TYPES)


def is_collection(value: Any) -> bool:
    return isinstance(value, _COLLECTION_TYPES)


def _entries(criteria: Any) -> Iterable[tuple[Any, Any]]:
    if isinstance(criteria, Mapping):
        return criteria.items()
    if isinstance(criteria, (list, tuple)):
        return enumerate(criteria)
    raise BadCriteriaError(f"Criteria must be a mapping or a list, got {type(criteria).__name__}")


def _is_int_key(key: Any) -> bool:
    return isinstance(key, int) and not isinstance(key, bool)


def _is_group_member(value: Any) -> bool:
    return isinstance(value, (list, tuple, Term))


def is_nested_group(data: Any) -> bool:
    """Whether data is a well-formed, non-empty nested group."""
    if not data:
        return False
    if isinstance(data, Mapping):
        has_member = False
        for key, value in data.items():
            if key == GROUP_BOOLEAN_KEY:
                if value not in BOOLEANS:
                    return False
            elif _is_int_key(key) and _is_group_member(value):
                has_member = True
            else:
                return False
        return has_member
    if isinstance(data, (list, tuple)):
        return all(_is_group_member(value) for value in data)
    return False


def parse_positional(data: list | tuple) -> Criterion:
    """[attribute, operator, value, boolean] with missing trailing elements defaulted."""
    padded = tuple(data[:4]) + _POSITIONAL_DEFAULTS[len(data):]
    attribute, operator, value, boolean = padded
    return Criterion(attribute, operator, value, boolean=boolean)


def _parse_group(data: Any, entity_type: Any) -> Group:
    boolean = BOOLEAN_AND
    if isinstance(data, Mapping):
        boolean = data.get(GROUP_BOOLEAN_KEY, BOOLEAN_AND)
        data = {key: value for key, value in data.items() if key != GROUP_BOOLEAN_KEY}
    return Group(parse_terms(data, entity_type), boolean=boolean)


def parse_entry(key: Any, data: Any, entity_type: Any = None) -> Term:
    """Classify a single filter entry. Rule order is significant."""
    if isinstance(data, RelationCriterion):
        return data
    if isinstance(data, Criterion):
        return data
    if isinstance(data, Group):
        return Group(parse_terms(data.terms, entity_type), boolean=data.boolean)
    if isinstance(key, str) and is_scalar(data):
        return Criterion(key, "=", data)
    if _is_int_key(key) and is_nested_group(data):
        return _parse_group(data, entity_type)
    if _is_int_key(key) and isinstance(data, (list, tuple)) and data:
        return parse_positional(data)
    raise BadCriteriaError(
        f"Unsupported criterion {data!r} at key {key!r}",
        entity_type=entity_type,
    )


def parse_terms(criteria: Any, entity_type: Any = None) -> tuple[Term, ...]:
    return tuple(parse_entry(key, data, entity_type) for key, data in _entries(criteria))


def parse_criteria(criteria: Any, entity_type: Any = None) -> Group:
    """
    Parse filter input into a top level Group.

    Raises:
        BadCriteriaError: if any entry matches no rule
    """
    if isinstance(criteria, Group):
        return Group(parse_terms(criteria.terms, entity_type), boolean=criteria.boolean)
    if isinstance(criteria, Term):
        criteria = [criteria]
    return Group(parse_terms(criteria or (), entity_type))


def validate_boolean(boolean: Any, entity_type: Any = None) -> str:
    """Lower-cased joiner; anything but and/or is rejected."""
    if not isinstance(boolean, str) or boolean.lower() not in BOOLEANS:
        raise BadCriteriaError(f"Criterion joiner must be 'and' or 'or', got {boolean!r}", entity_type=entity_type)
    return boolean.lower()


def validate_criterion(criterion: Criterion, entity_type: Any = None) -> Criterion:
    """
    Check attribute, joiner and operator/value arity of a criterion.

    Returns the criterion with operator and boolean lower-cased.

    Raises:
        BadCriteriaError: when the criterion is not valid
    """
    attribute = criterion.attribute
    if not isinstance(attribute, str) or not attribute:
        raise BadCriteriaError(f"Criterion attribute must be a non-empty string, got {attribute!r}", entity_type=entity_type)

    boolean = validate_boolean(criterion.boolean, entity_type)

    operator = criterion.operator
    if not isinstance(operator, str):
        raise BadCriteriaError(f"Criterion operator must be a string, got {operator!r}", entity_type=entity_type)
    operator = operator.lower()

    if is_collection(criterion.value):
        if operator not in MULTIPLE_OPERATORS:
            raise BadCriteriaError(
                f"Operator '{operator}' does not accept a list of values ({attribute})",
                entity_type=entity_type,
            )
    elif operator not in SINGLE_OPERATORS:
        raise BadCriteriaError(
            f"Operator '{operator}' is not supported for a single value ({attribute})",
            entity_type=entity_type,
        )
    elif not is_scalar(criterion.value):
        raise BadCriteriaError(
            f"Unsupported {type(criterion.value).__name__} value for '{operator}' ({attribute})",
            entity_type=entity_type,
        )

    if operator == criterion.operator and boolean == criterion.boolean:
        return criterion
    return Criterion(attribute, operator, criterion.value, boolean=boolean)
