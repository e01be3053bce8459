"""
repokit: generic repositories over SQLAlchemy models.

Usage:
    from repokit import Repository, Criterion, SortOptions, CursorRequest

    users = Repository(db, User)
    users.find_where([Criterion("age", ">=", 18)], SortOptions("name"))
    users.get_cursor_page(CursorRequest(current=0, page_size=50))
"""

from repokit.criteria import CriteriaCompiler, Criterion, Group, RelationCriterion
from repokit.models import Base, EntityMixin
from repokit.pagination import (
    CursorQueryBuilder,
    CursorRequest,
    CursorResult,
    Page,
    PagingInfo,
    SortOptions,
)
from repokit.repositories import (
    CachingRepository,
    IRepository,
    Repository,
    RepositoryFactory,
)
from repokit.utils.exceptions import (
    BadCriteriaError,
    ModelNotFoundError,
    RelationNotFoundError,
    RelationNotSupportedError,
    RepositoryError,
    RepositoryRegisterError,
)

__all__ = [
    "BadCriteriaError",
    "Base",
    "CachingRepository",
    "CriteriaCompiler",
    "Criterion",
    "CursorQueryBuilder",
    "CursorRequest",
    "CursorResult",
    "EntityMixin",
    "Group",
    "IRepository",
    "ModelNotFoundError",
    "Page",
    "PagingInfo",
    "RelationCriterion",
    "RelationNotFoundError",
    "RelationNotSupportedError",
    "Repository",
    "RepositoryError",
    "RepositoryFactory",
    "RepositoryRegisterError",
    "SortOptions",
]
