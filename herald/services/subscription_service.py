"""Subscription business rules."""

import uuid
from datetime import UTC, datetime

from herald.models.subscription import Subscription
from herald.repositories.subscription import SubscriptionRepository
from herald.repositories.topic import TopicRepository


class SubscriptionService:
    def __init__(self, repo: SubscriptionRepository, topics: TopicRepository) -> None:
        self.repo = repo
        self.topics = topics

    async def create(self, topic_id: uuid.UUID, user_id: uuid.UUID) -> Subscription:
        """Subscribe a user to an existing topic.

        Raises TopicNotFoundError or UserNotFoundError when either side is
        missing and UniqueSubscriptionError when the user is already subscribed.
        """
        await self.topics.query_by_id(topic_id)
        subscription = Subscription(
            id=uuid.uuid4(),
            topic_id=topic_id,
            user_id=user_id,
            created_at=datetime.now(UTC),
        )
        await self.repo.create(subscription)
        return subscription

    async def delete(self, subscription_id: uuid.UUID) -> None:
        await self.repo.delete(subscription_id)

    async def query(self, page_number: int, rows_per_page: int) -> list[Subscription]:
        return await self.repo.query(page_number, rows_per_page)

    async def query_by_id(self, subscription_id: uuid.UUID) -> Subscription:
        return await self.repo.query_by_id(subscription_id)
