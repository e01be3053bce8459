"""
Tests for relation helpers: lookups, joins and counts.
"""

import pytest
from sqlalchemy import select

from repokit.repositories import Repository
from repokit.repositories.relations import (
    POLYMORPHIC,
    SELF_REFERENTIAL,
    join_relation,
    relation_count,
    resolve_path,
    resolve_relationship,
)
from repokit.utils.exceptions import RelationNotFoundError, RelationNotSupportedError
from tests.entities import Car, Role, User


class TestResolveRelationship:
    """Tests for relation lookups."""

    def test_known_relation(self):
        assert resolve_relationship(User, "cars").mapper.class_ is Car

    def test_unknown_relation(self):
        with pytest.raises(RelationNotFoundError) as exc_info:
            resolve_relationship(User, "boats")

        assert exc_info.value.relation == "boats"
        assert exc_info.value.status_code == 400

    def test_dotted_path(self):
        path = resolve_path(Role, "users.cars")

        assert [relationship.key for relationship in path] == ["users", "cars"]


class TestJoinRelation:
    """Tests for join_relation()"""

    def test_many_to_one(self):
        sql = str(join_relation(select(User), User, "role"))

        assert "LEFT OUTER JOIN roles ON roles.id = users.role_id" in sql

    def test_one_to_many(self):
        sql = str(join_relation(select(User), User, "cars"))

        assert "LEFT OUTER JOIN cars ON users.id = cars.user_id" in sql

    def test_many_to_many_joins_secondary_first(self):
        sql = str(join_relation(select(User), User, "supervisors"))

        assert sql.count("LEFT OUTER JOIN") == 2
        assert sql.index("JOIN user_supervisors") < sql.index("JOIN supervisors")

    def test_nested_path(self):
        sql = str(join_relation(select(Role), Role, "users.cars"))

        assert "JOIN users" in sql
        assert "JOIN cars" in sql

    def test_joined_table_not_joined_twice(self):
        query = join_relation(select(User), User, "role")
        query = join_relation(query, User, ["role", "cars"])

        sql = str(query)
        assert sql.count("JOIN roles") == 1
        assert sql.count("JOIN cars") == 1

    def test_polymorphic_not_supported(self):
        with pytest.raises(RelationNotSupportedError) as exc_info:
            join_relation(select(User), User, "notes")

        assert exc_info.value.kind == POLYMORPHIC
        assert isinstance(exc_info.value, NotImplementedError)

    def test_self_referential_not_supported(self):
        with pytest.raises(RelationNotSupportedError) as exc_info:
            join_relation(select(User), User, "manager")

        assert exc_info.value.kind == SELF_REFERENTIAL

    def test_unknown_relation(self):
        with pytest.raises(RelationNotFoundError):
            join_relation(select(User), User, "boats")

    def test_joined_rows_filterable(self, db_session, settings, seed_users):
        """Joined columns can be filtered with table.column criteria."""
        repository = Repository(db_session, User, settings=settings)
        query = repository.join_relation(select(User), "role").where(Role.name == "member").order_by(User.id)

        assert [user.name for user in db_session.scalars(query)] == ["Bob", "Carol"]


class TestRelationCount:
    """Tests for relation_count()"""

    def test_label(self):
        assert relation_count(User, "cars").name == "cars_count"

    def test_self_referential_not_supported(self):
        with pytest.raises(RelationNotSupportedError):
            relation_count(User, "manager")

    def test_counts_rows(self, db_session, seed_users):
        query = select(Role.name, relation_count(Role, "users")).order_by(Role.id)

        assert db_session.execute(query).all() == [("admin", 1), ("member", 2)]
