"""
Base class and EntityMixin for entities managed by repositories.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class EntityMixin:
    """
    Mixin giving mapped classes the entity contract used by repositories.

    Methods:
    - get_key(): primary key value of the instance
    - get_parameter(name) / set_parameter(name, value): attribute access by name
    - to_dict(): mapped column values
    """

    def get_key(self) -> Any:
        """
        Primary key value.

        Scalar for single-column keys, tuple for composite keys and None
        while the instance has not been flushed yet.
        """
        state = inspect(self)
        identity = state.identity
        if identity is None:
            identity = state.mapper.primary_key_from_instance(self)
            if all(value is None for value in identity):
                return None
        return identity[0] if len(identity) == 1 else tuple(identity)

    def get_parameter(self, name: str) -> Any:
        return getattr(self, name)

    def set_parameter(self, name: str, value: Any) -> None:
        setattr(self, name, value)

    def to_dict(self) -> dict[str, Any]:
        mapper = inspect(type(self))
        return {attr.key: getattr(self, attr.key) for attr in mapper.column_attrs}
