from repokit.infrastructure.db import (
    create_db_engine,
    create_session_factory,
    get_db_context,
    safe_commit,
)

__all__ = [
    "create_db_engine",
    "create_session_factory",
    "get_db_context",
    "safe_commit",
]
