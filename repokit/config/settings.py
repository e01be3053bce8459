"""
Library settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.

Every field can be overridden with a ``REPOKIT_`` prefixed environment
variable (``REPOKIT_CACHE_TTL=60``) or from a ``.env`` file.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from repokit.config.constants import DEFAULT_CACHE_PREFIX, DEFAULT_CACHE_TTL, Limits


class RepositorySettings(BaseSettings):
    """Repository settings with defaults for development."""

    model_config = SettingsConfigDict(
        env_prefix="REPOKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///:memory:"
    # Server databases only, ignored for SQLite
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30  # Wait max 30s for a connection from the pool
    db_pool_recycle: int = 1800  # Recycle connections after 30 minutes

    # Redis
    redis_url: str = "redis://localhost:6379/0"
    redis_pool_max_connections: int = 20
    redis_socket_timeout: int = 5  # Socket timeout in seconds (connect and read/write)

    # Caching
    cache_enabled: bool = True
    cache_ttl: int = DEFAULT_CACHE_TTL  # Seconds
    cache_prefix: str = DEFAULT_CACHE_PREFIX

    # Pagination
    default_page_size: int = Limits.DEFAULT_PAGE_SIZE
    max_page_size: int = Limits.MAX_PAGE_SIZE

    # Writes: commit after every create/save/delete, or leave the
    # transaction to the caller (flush only)
    commit_on_write: bool = True

    # Environment
    environment: str = "development"
    debug: bool = False

    def validate_configuration(self) -> list[str]:
        """
        Check settings for inconsistent combinations.
        Returns a list of validation errors. Empty list means all checks pass.
        """
        errors = []

        if self.default_page_size < 1:
            errors.append("DEFAULT_PAGE_SIZE must be a positive integer")
        if self.max_page_size < 1:
            errors.append("MAX_PAGE_SIZE must be a positive integer")
        if self.default_page_size > self.max_page_size:
            errors.append("DEFAULT_PAGE_SIZE cannot exceed MAX_PAGE_SIZE")

        if self.cache_enabled:
            if self.cache_ttl <= 0:
                errors.append("CACHE_TTL must be positive when caching is enabled")
            if not self.cache_prefix:
                errors.append("CACHE_PREFIX must not be empty when caching is enabled")

        if self.environment == "production" and self.debug:
            errors.append("DEBUG must be False in production")

        return errors


@lru_cache
def get_settings() -> RepositorySettings:
    """Get cached settings instance."""
    return RepositorySettings()
