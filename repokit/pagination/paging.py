"""
Offset pagination value objects.
"""

from dataclasses import dataclass, field
from typing import Any

from repokit.config.constants import Limits
from repokit.config.settings import get_settings


def default_page_size() -> int:
    return get_settings().default_page_size


@dataclass(frozen=True)
class PagingInfo:
    """
    Requested page of an offset paginated listing.

    Attributes:
        page: 1-indexed page number
        page_size: Items per page
    """

    page: int = Limits.FIRST_PAGE
    page_size: int = field(default_factory=default_page_size)

    def __post_init__(self):
        if self.page < Limits.FIRST_PAGE:
            raise ValueError(f"page must be >= {Limits.FIRST_PAGE}, got {self.page}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be a positive integer, got {self.page_size}")

    @property
    def offset(self) -> int:
        """Number of rows skipped before this page."""
        return (self.page - 1) * self.page_size


@dataclass
class Page:
    """One page of entities plus the total number of matching rows."""

    items: list[Any]
    total: int
    page: int
    page_size: int

    @property
    def last_page(self) -> int:
        if self.total == 0:
            return Limits.FIRST_PAGE
        return (self.total + self.page_size - 1) // self.page_size

    @property
    def has_more(self) -> bool:
        return self.page < self.last_page

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for response.

        Items are included as they are; serializing entities is up to the caller.
        """
        return {
            "items": self.items,
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
            "last_page": self.last_page,
            "has_more": self.has_more,
        }
