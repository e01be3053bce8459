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
    "ModelNotFoundError",
    "RelationNotFoundError",
    "RelationNotSupportedError",
    "RepositoryError",
    "RepositoryRegisterError",
]
