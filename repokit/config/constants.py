"""
Centralized constants for repokit.
Avoids magic strings repeated across the criteria compiler, pagers and caches.

Usage:
    from repokit.config.constants import SINGLE_OPERATORS, OrderDirections

    if operator in SINGLE_OPERATORS:
        ...
"""

from enum import Enum
from typing import Final


# =============================================================================
# Criteria Operators
# =============================================================================

# Operators comparing an attribute with exactly one value
SINGLE_OPERATORS: Final[tuple[str, ...]] = (
    "=", "<", ">", "<=", ">=", "<>", "!=", "<=>",
    "like", "like binary", "not like", "ilike",
    "&", "|", "^", "<<", ">>",
    "rlike", "regexp", "not regexp",
    "~", "~*", "!~", "!~*", "similar to",
    "not similar to", "not ilike", "~~*", "!~~*",
)

# Operators comparing an attribute with a collection of values
MULTIPLE_OPERATORS: Final[tuple[str, ...]] = ("in", "not in")

# Joiners between criteria on the same nesting level
BOOLEAN_AND: Final[str] = "and"
BOOLEAN_OR: Final[str] = "or"
BOOLEANS: Final[tuple[str, ...]] = (BOOLEAN_AND, BOOLEAN_OR)

# Reserved key of a mapping-shaped nested group
GROUP_BOOLEAN_KEY: Final[str] = "boolean"


# =============================================================================
# Sorting
# =============================================================================


class OrderDirections(str, Enum):
    """Available sort order directions."""

    ASC = "asc"
    DESC = "desc"


# =============================================================================
# Pagination
# =============================================================================

# Synthetic column holding the row sequence number during cursor paging
ROW_NUM_COLUMN: Final[str] = "row_num"


class Limits:
    """Pagination limits."""

    DEFAULT_PAGE_SIZE: Final[int] = 15
    MAX_PAGE_SIZE: Final[int] = 500
    FIRST_PAGE: Final[int] = 1
    CURSOR_START: Final[int] = 0


# =============================================================================
# Cache Keys
# =============================================================================

DEFAULT_CACHE_TTL: Final[int] = 600  # 10 minutes
DEFAULT_CACHE_PREFIX: Final[str] = "repo"

# Suffix of the key holding the current generation token of a cached repository
CACHE_GENERATION_SUFFIX: Final[str] = "generation"
# Segment reserved for single entity keys
CACHE_ENTITY_SEGMENT: Final[str] = "entity"


def get_entity_cache_key(prefix: str, entity_id: object) -> str:
    """
    Cache key of a single entity looked up by its primary key.

    The repr keeps 1 and "1" apart.
    """
    return f"{prefix}:{CACHE_ENTITY_SEGMENT}:{entity_id!r}"


def get_query_cache_key(prefix: str, generation: str, operation: str, fingerprint: str) -> str:
    """Cache key of a query result, scoped to the current generation token."""
    return f"{prefix}:{generation}:{operation}:{fingerprint}"


def get_generation_cache_key(prefix: str) -> str:
    return f"{prefix}:{CACHE_GENERATION_SUFFIX}"
