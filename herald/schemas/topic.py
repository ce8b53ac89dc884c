"""Topic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from herald.schemas.common import BaseSchema


class TopicCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)


class TopicResponse(BaseSchema):
    id: UUID
    name: str
    created_at: datetime
