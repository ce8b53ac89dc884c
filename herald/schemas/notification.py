"""Notification schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from herald.schemas.common import BaseSchema


class NotificationCreate(BaseSchema):
    topic_id: UUID
    message: str = Field(..., min_length=1)


class NotificationResponse(BaseSchema):
    id: UUID
    topic_id: UUID
    message: str
    created_at: datetime
