"""Declarative base shared by every table."""

import uuid
from datetime import UTC, datetime
from typing import Any, Self

from sqlalchemy import DateTime, MetaData, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Constraint names stay stable across Alembic autogenerate runs
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models.

    Models describe the schema and double as the domain records: repositories build
    transient instances from the rows their statements return.
    """

    metadata = MetaData(naming_convention=convention)

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def to_dict(self) -> dict[str, Any]:
        """Column values keyed by column name, ready to bind into a statement."""
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}

    @classmethod
    def from_row(cls, row: Any) -> Self:
        """Build a detached instance from a result row mapping."""
        values = {}
        for column in cls.__table__.columns:
            value = row[column.name]
            # SQLite hands back naive timestamps; everything is stored as UTC
            if isinstance(value, datetime) and value.tzinfo is None:
                value = value.replace(tzinfo=UTC)
            values[column.name] = value
        return cls(**values)
