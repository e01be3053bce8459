"""
Pytest configuration and fixtures for repokit tests.
"""

import itertools

import pytest

from repokit.config.settings import RepositorySettings
from repokit.infrastructure.cache import MemoryCacheStore
from repokit.infrastructure.db import create_db_engine, create_session_factory
from repokit.models import Base
from tests.entities import Car, Profile, Role, Supervisor, TestEntity, User


_id_counter = itertools.count(1000)


def next_id() -> int:
    """Generate a unique ID for test entities."""
    return next(_id_counter)


def make_settings(**overrides) -> RepositorySettings:
    """Settings isolated from the environment and any .env file."""
    return RepositorySettings(_env_file=None, **overrides)


# SQLite in-memory database shared through StaticPool
engine = create_db_engine("sqlite://", settings=make_settings())
TestingSessionLocal = create_session_factory(engine)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Tables are created before and dropped after every test.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def cache():
    return MemoryCacheStore()


@pytest.fixture
def seed_test_entities(db_session):
    """
    23 rows; field1 counts up, field2 cycles through four values so that
    sorting by it leaves ties.
    """
    values = ["a", "b", "c", "d"]
    entities = [
        TestEntity(id=i, field1=i * 10, field2=values[i % 4], field3=f"row-{i}")
        for i in range(1, 24)
    ]
    db_session.add_all(entities)
    db_session.commit()
    return entities


@pytest.fixture
def seed_users(db_session):
    """
    Users with roles, cars, a profile and supervisors.

    alice (admin, 2 cars, profile, 1 supervisor), bob (member, 1 car),
    carol (member, no cars), dave (no role, reports to alice).
    """
    admin = Role(id=1, name="admin")
    member = Role(id=2, name="member")
    boss = Supervisor(id=1, name="Boss")

    alice = User(id=1, name="Alice", email="alice@test.com", age=34, role=admin)
    bob = User(id=2, name="Bob", email="bob@test.com", age=17, role=member)
    carol = User(id=3, name="Carol", email=None, age=52, role=member)
    dave = User(id=4, name="Dave", email="dave@test.com", age=25, manager=alice)

    alice.cars = [Car(id=1, brand="Volvo"), Car(id=2, brand="Saab")]
    bob.cars = [Car(id=3, brand="Fiat")]
    alice.profile = Profile(id=1, bio="Likes cars")
    alice.supervisors = [boss]

    db_session.add_all([admin, member, boss, alice, bob, carol, dave])
    db_session.commit()
    return {"alice": alice, "bob": bob, "carol": carol, "dave": dave}
