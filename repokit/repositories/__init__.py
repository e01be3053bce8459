"""
Repositories: interface, SQLAlchemy implementation, caching decorator and factory.
"""

from repokit.repositories.base import IRepository
from repokit.repositories.caching import CachingRepository
from repokit.repositories.factory import RepositoryFactory
from repokit.repositories.relations import join_relation, resolve_relationship
from repokit.repositories.repository import Repository

__all__ = [
    "CachingRepository",
    "IRepository",
    "Repository",
    "RepositoryFactory",
    "join_relation",
    "resolve_relationship",
]
