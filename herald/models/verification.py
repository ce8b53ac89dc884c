"""Verification model: one-shot email ownership codes."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from herald.models.base import Base


class Verification(Base):
    """A single-use code proving the holder controls ``email``."""

    __tablename__ = "verifications"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Denormalised user email at issue time
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(32), nullable=False)
    used: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )
    expired_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
