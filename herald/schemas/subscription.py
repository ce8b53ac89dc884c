"""Subscription schemas."""

from datetime import datetime
from uuid import UUID

from herald.schemas.common import BaseSchema


class SubscriptionCreate(BaseSchema):
    topic_id: UUID
    user_id: UUID


class SubscriptionResponse(BaseSchema):
    id: UUID
    topic_id: UUID
    user_id: UUID
    created_at: datetime
