"""
Entity base classes.
"""

from repokit.models.base import Base, EntityMixin

__all__ = ["Base", "EntityMixin"]
