"""Subscription model: binds a user to a topic."""

import uuid

from sqlalchemy import ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from herald.models.base import Base


class Subscription(Base):
    """A (topic, user) binding."""

    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint("topic_id", "user_id", name="uq_subscriptions_topic_user"),
    )

    topic_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("topics.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
