"""
Configuration package: settings, constants and structured logging.
"""

from repokit.config.settings import RepositorySettings, get_settings
from repokit.config.logging import get_logger, setup_logging

__all__ = [
    "RepositorySettings",
    "get_settings",
    "get_logger",
    "setup_logging",
]
