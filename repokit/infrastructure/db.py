"""
Database engine and session management helpers.
Uses SQLAlchemy 2.0 patterns.
"""

from collections.abc import Callable, Generator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from repokit.config.settings import RepositorySettings, get_settings


def create_db_engine(url: str | None = None, settings: RepositorySettings | None = None, **kwargs) -> Engine:
    """
    Create an engine with pool settings suitable for the target database.

    In-memory SQLite shares one connection (StaticPool) so that every
    session sees the same database; server databases get a sized pool
    with pre-ping and recycling.
    """
    settings = settings or get_settings()
    url = make_url(url or settings.database_url)

    if url.get_backend_name() == "sqlite":
        options = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
    else:
        options = {
            "pool_pre_ping": True,  # Verify connections before using
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_timeout": settings.db_pool_timeout,
            "pool_recycle": settings.db_pool_recycle,
        }
    options["echo"] = settings.debug
    options.update(kwargs)
    return create_engine(url, **options)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory; objects stay usable after commit for cached reads."""
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


@contextmanager
def get_db_context(session_factory: Callable[[], Session]) -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Usage:
        with get_db_context(SessionLocal) as db:
            repository = Repository(db, User)
    """
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def safe_commit(db: Session) -> None:
    """
    Commit with automatic rollback on failure.

    Raises the original exception after rolling back.
    """
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
