"""
Centralized repository exceptions for consistent error handling.

Every exception logs itself on construction and carries a ``status_code``
hint so that transport layers can translate it (NotFound -> 404, ...).

Usage:
    from repokit.utils.exceptions import ModelNotFoundError, BadCriteriaError

    raise ModelNotFoundError("User", 123)
    raise BadCriteriaError("Unsupported operator 'xor'", entity_type="User")
"""

from typing import Any

from repokit.config.logging import get_logger

logger = get_logger(__name__)


def entity_type_name(entity_type: Any) -> str | None:
    """Human readable name of an entity type (class or already a name)."""
    if entity_type is None:
        return None
    if isinstance(entity_type, str):
        return entity_type
    return getattr(entity_type, "__name__", str(entity_type))


class RepositoryError(Exception):
    """
    Base exception with automatic logging.

    The message is always tagged with the owning repository's entity type
    so errors stay traceable once they leave the repository layer.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        entity_type: Any = None,
        operation: str | None = None,
        log_level: str = "warning",
        **log_context: Any,
    ):
        self.entity_type = entity_type_name(entity_type)
        self.operation = operation
        self.detail = f"{self.entity_type}: {message}" if self.entity_type else message

        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(
            self.detail,
            error=type(self).__name__,
            entity=self.entity_type,
            operation=operation,
            **log_context,
        )

        super().__init__(self.detail)


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class BadCriteriaError(RepositoryError):
    """
    Filter criteria are structurally invalid, fail operator/value validation
    or name a relation the entity does not have.
    """

    status_code = 400

    def __init__(self, reason: str = "Invalid criteria", *, entity_type: Any = None, **log_context: Any):
        super().__init__(reason, entity_type=entity_type, operation="criteria", **log_context)


class RelationNotFoundError(RepositoryError):
    """Requested relation is not defined on the entity."""

    status_code = 400

    def __init__(self, entity_type: Any, relation: str, **log_context: Any):
        self.relation = relation
        super().__init__(
            f"Relation '{relation}' is not defined",
            entity_type=entity_type,
            operation="relation",
            relation=relation,
            **log_context,
        )


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class ModelNotFoundError(RepositoryError):
    """
    Entity lookup by primary key found no row.

    Usage:
        raise ModelNotFoundError("User", 123)
    """

    status_code = 404

    def __init__(self, entity_type: Any, entity_id: Any, **log_context: Any):
        self.entity_id = entity_id
        name = entity_type_name(entity_type)
        super().__init__(
            f"{name} with ID {entity_id} not found",
            entity_type=entity_type,
            operation="find",
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 501 Not Implemented Errors
# =============================================================================


class RelationNotSupportedError(RepositoryError, NotImplementedError):
    """Relation kind cannot be joined (polymorphic or self-referential)."""

    status_code = 501

    def __init__(self, entity_type: Any, relation: str, kind: str, **log_context: Any):
        self.relation = relation
        self.kind = kind
        super().__init__(
            f"Relation '{relation}' of kind [{kind}] is not supported",
            entity_type=entity_type,
            operation="join",
            relation=relation,
            **log_context,
        )


# =============================================================================
# Configuration Errors
# =============================================================================


class RepositoryRegisterError(RepositoryError):
    """Invalid entity/repository pairing or settings detected at startup."""

    def __init__(self, message: str, **log_context: Any):
        super().__init__(message, operation="register", log_level="error", **log_context)
