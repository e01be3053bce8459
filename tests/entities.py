"""
Mapped entities used across the test suite.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Table, func
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repokit.models import Base, EntityMixin


user_supervisors = Table(
    "user_supervisors",
    Base.metadata,
    Column("user_id", ForeignKey("users.id"), primary_key=True),
    Column("supervisor_id", ForeignKey("supervisors.id"), primary_key=True),
)


class TestEntity(EntityMixin, Base):
    """Flat entity with three filterable fields."""

    __tablename__ = "test_entities"
    __test__ = False

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    field1: Mapped[int | None] = mapped_column(Integer)
    field2: Mapped[str | None] = mapped_column(String(50))
    field3: Mapped[str | None] = mapped_column(String(50))


class Role(EntityMixin, Base):
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50))

    users: Mapped[list["User"]] = relationship(back_populates="role")


class User(EntityMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str | None] = mapped_column(String(255))
    age: Mapped[int | None] = mapped_column(Integer)
    role_id: Mapped[int | None] = mapped_column(ForeignKey("roles.id"))
    manager_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"))

    role: Mapped[Role | None] = relationship(back_populates="users")
    cars: Mapped[list["Car"]] = relationship(back_populates="user", order_by="Car.id")
    profile: Mapped["Profile | None"] = relationship(back_populates="user")
    supervisors: Mapped[list["Supervisor"]] = relationship(secondary=user_supervisors, back_populates="users")
    manager: Mapped["User | None"] = relationship(remote_side=[id])
    notes: Mapped[list["Note"]] = relationship()

    @hybrid_property
    def lower_name(self) -> str:
        return self.name.lower()

    @lower_name.inplace.expression
    @classmethod
    def _lower_name_expression(cls):
        return func.lower(cls.name)


class Car(EntityMixin, Base):
    __tablename__ = "cars"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    brand: Mapped[str] = mapped_column(String(50))
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"))

    user: Mapped[User | None] = relationship(back_populates="cars")


class Profile(EntityMixin, Base):
    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    bio: Mapped[str | None] = mapped_column(String(255))
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), unique=True)

    user: Mapped[User] = relationship(back_populates="profile")


class Supervisor(EntityMixin, Base):
    __tablename__ = "supervisors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))

    users: Mapped[list[User]] = relationship(secondary=user_supervisors, back_populates="supervisors")


class Note(EntityMixin, Base):
    """Polymorphic entity, joins through it are not supported."""

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    kind: Mapped[str] = mapped_column(String(20))
    body: Mapped[str | None] = mapped_column(String(255))
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"))

    __mapper_args__ = {"polymorphic_on": "kind", "polymorphic_identity": "note"}


class Tag(EntityMixin, Base):
    """String keyed entity."""

    __tablename__ = "tags"

    code: Mapped[str] = mapped_column(String(20), primary_key=True)
    label: Mapped[str | None] = mapped_column(String(100))


class PlainRow(Base):
    """Mapped, but not an entity."""

    __tablename__ = "plain_rows"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class UnmappedThing(EntityMixin):
    """Entity mixin without a mapping."""
