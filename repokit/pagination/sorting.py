"""
Sort options value object.
"""

from dataclasses import dataclass

from repokit.config.constants import OrderDirections


@dataclass(frozen=True)
class SortOptions:
    """
    Immutable sort order.

    ``order_by`` is an attribute of the served entity, or a dotted
    ``relation.attribute`` path sorted through a LEFT JOIN.
    ``sort_order`` is ``asc`` or ``desc`` (case-insensitive).

    Usage:
        SortOptions("created_at", "desc")
        SortOptions("role.name")
    """

    order_by: str
    sort_order: str = OrderDirections.ASC.value

    def __post_init__(self):
        if not isinstance(self.order_by, str) or not self.order_by:
            raise ValueError("order_by must be a non-empty string")
        direction = str(getattr(self.sort_order, "value", self.sort_order)).lower()
        if direction not in {item.value for item in OrderDirections}:
            raise ValueError(f"Invalid sort order '{self.sort_order}', expected 'asc' or 'desc'")
        object.__setattr__(self, "sort_order", direction)

    @property
    def descending(self) -> bool:
        return self.sort_order == OrderDirections.DESC.value

    @property
    def relation_path(self) -> str | None:
        """Relation part of a dotted ``order_by``, None for plain attributes."""
        if "." not in self.order_by:
            return None
        return self.order_by.rsplit(".", 1)[0]

    @property
    def attribute(self) -> str:
        return self.order_by.rsplit(".", 1)[-1]
