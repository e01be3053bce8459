"""
Tests for EntityMixin.
"""

from tests.entities import Role, Tag, TestEntity


class TestEntityMixin:
    """Tests for the entity contract."""

    def test_transient_key_is_none(self):
        assert Role(name="guest").get_key() is None

    def test_assigned_key_before_flush(self):
        assert Tag(code="py").get_key() == "py"

    def test_key_after_flush(self, db_session):
        role = Role(name="guest")
        db_session.add(role)
        db_session.flush()

        assert role.get_key() == role.id

    def test_parameters(self):
        entity = TestEntity(field1=1)

        entity.set_parameter("field2", "b")

        assert entity.get_parameter("field1") == 1
        assert entity.field2 == "b"

    def test_to_dict(self):
        entity = TestEntity(id=5, field1=1, field2="b", field3=None)

        assert entity.to_dict() == {"id": 5, "field1": 1, "field2": "b", "field3": None}
