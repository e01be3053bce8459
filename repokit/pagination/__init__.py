"""
Sorting, offset paging and cursor paging.
"""

from repokit.pagination.cursor import CursorQueryBuilder, CursorRequest, CursorResult
from repokit.pagination.paging import Page, PagingInfo
from repokit.pagination.sorting import SortOptions

__all__ = [
    "CursorQueryBuilder",
    "CursorRequest",
    "CursorResult",
    "Page",
    "PagingInfo",
    "SortOptions",
]
