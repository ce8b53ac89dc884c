"""User model and role enumeration."""

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, LargeBinary, String, func
from sqlalchemy.dialects import postgresql
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator, TypeEngine

from herald.models.base import Base


class Role(str, enum.Enum):
    """Roles a user can hold."""

    ADMIN = "admin"
    USER = "user"


def parse_roles(names: list[str]) -> list[Role]:
    """Convert role names into roles, preserving order.

    Raises ValueError on an unknown role name.
    """
    return [Role(name) for name in names]


class RoleList(TypeDecorator[list[Role]]):
    """Ordered role list stored as ``text[]`` on PostgreSQL and as JSON elsewhere."""

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect) -> TypeEngine[Any]:
        if dialect.name == "postgresql":
            return dialect.type_descriptor(postgresql.ARRAY(String()))
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value: list[Role] | None, dialect: Dialect) -> list[str] | None:
        if value is None:
            return None
        return [Role(role).value for role in value]

    def process_result_value(self, value: list[str] | None, dialect: Dialect) -> list[Role] | None:
        if value is None:
            return None
        return parse_roles(list(value))


class User(Base):
    """A registered user."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    roles: Mapped[list[Role]] = mapped_column(RoleList(), nullable=False)
    verified: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )
    hashed_password: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User {self.email} ({', '.join(role.value for role in self.roles)})>"
