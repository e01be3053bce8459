"""
Cursor pagination over arbitrary queries.

Rows are numbered in the final order of the base query and the cursor is the
sequence number of the last row already seen, so paging does not depend on a
unique or sequential primary key. Works for joined, custom-sorted and
aggregated queries alike.

The generated SQL has this shape:

    SELECT t2.*, t2.row_num
    FROM (
        SELECT <base columns>, ROW_NUMBER() OVER (ORDER BY <base order>) AS row_num
        FROM ... WHERE ... GROUP BY ...
    ) AS t2
    WHERE t2.row_num > :current
    ORDER BY t2.row_num
    LIMIT :page_size + 1

A base query with its own LIMIT or OFFSET keeps an ORDER BY inside ``t2``
(the numbering order), so it still selects the same rows.
"""

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Select, func, inspect, select
from sqlalchemy.orm import Session, aliased

from repokit.config.constants import ROW_NUM_COLUMN, Limits
from repokit.config.logging import get_logger
from repokit.pagination.paging import default_page_size

logger = get_logger(__name__)

NUMBERED_SUBQUERY_NAME = "t2"


# Select has no public accessors for these clauses
def order_by_clauses(query: Select) -> list[Any]:
    return list(query._order_by_clauses)


def is_grouped(query: Select) -> bool:
    return bool(query._group_by_clauses)


def is_limited(query: Select) -> bool:
    return query._limit_clause is not None or query._offset_clause is not None


@dataclass(frozen=True)
class CursorRequest:
    """
    Position of a cursor page request.

    Attributes:
        current: Sequence number of the last row seen, 0 to start
        page_size: Rows per page (positive)
    """

    current: int = Limits.CURSOR_START
    page_size: int = field(default_factory=default_page_size)

    def __post_init__(self):
        if self.page_size < 1:
            raise ValueError(f"page_size must be a positive integer, got {self.page_size}")


@dataclass
class CursorResult:
    """
    Rows of a cursor page.

    ``next`` is the sequence number of the last returned row, or ``current``
    when the page is empty.
    """

    items: list[Any]
    current: int
    next: int
    page_size: int
    has_more: bool

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": self.items,
            "current": self.current,
            "next": self.next,
            "page_size": self.page_size,
            "has_more": self.has_more,
        }


class CursorQueryBuilder:
    """
    Rewrites a base query into a row numbered, cursor filtered query.

    With ``entity`` the result items are instances of the entity, otherwise
    they are the raw result rows (including ``row_num``).

    Usage:
        builder = CursorQueryBuilder(CursorRequest(current=30, page_size=15), select(User), User)
        result = builder.get_cursor(db)
    """

    def __init__(self, cursor: CursorRequest, query: Select, entity: type | None = None):
        self.cursor = cursor
        self.query = query
        self.entity = entity

    def numbering_order(self) -> list[Any]:
        """
        ORDER BY used to number the rows.

        The base query's own order, followed by the entity primary key as a
        tie-breaker. Grouped queries keep their order untouched since the key
        is usually not part of the GROUP BY.
        """
        order_by = order_by_clauses(self.query)
        if self.entity is None or is_grouped(self.query):
            return order_by
        return order_by + list(inspect(self.entity).primary_key)

    def build_query(self) -> Select:
        order_by = self.numbering_order()
        row_num = func.row_number().over(order_by=order_by or None).label(ROW_NUM_COLUMN)
        numbered = self.query.add_columns(row_num).order_by(None)
        if is_limited(self.query):
            numbered = numbered.order_by(*order_by)
        numbered = numbered.subquery(NUMBERED_SUBQUERY_NAME)
        row_num_column = numbered.c[ROW_NUM_COLUMN]

        if self.entity is not None:
            outer = select(aliased(self.entity, numbered), row_num_column)
        else:
            outer = select(numbered)

        return (
            outer.where(row_num_column > self.cursor.current)
            .order_by(row_num_column)
            .limit(self.cursor.page_size + 1)
        )

    def get_cursor(self, session: Session) -> CursorResult:
        """Execute the page query and assemble the result."""
        page_size = self.cursor.page_size
        rows = session.execute(self.build_query()).all()
        has_more = len(rows) > page_size
        rows = rows[:page_size]

        if self.entity is not None:
            items = [row[0] for row in rows]
            numbers = [row[1] for row in rows]
        else:
            items = list(rows)
            numbers = [row._mapping[ROW_NUM_COLUMN] for row in rows]

        next_cursor = numbers[-1] if numbers else self.cursor.current
        logger.debug(
            "Cursor page fetched",
            current=self.cursor.current,
            next=next_cursor,
            rows=len(items),
            has_more=has_more,
        )
        return CursorResult(
            items=items,
            current=self.cursor.current,
            next=next_cursor,
            page_size=page_size,
            has_more=has_more,
        )
