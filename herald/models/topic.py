"""Topic model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from herald.models.base import Base


class Topic(Base):
    """A named channel users subscribe to."""

    __tablename__ = "topics"

    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Topic {self.name}>"
