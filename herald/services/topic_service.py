"""Topic business rules."""

import uuid
from datetime import UTC, datetime

from herald.models.topic import Topic
from herald.repositories.topic import TopicRepository


class TopicService:
    def __init__(self, repo: TopicRepository) -> None:
        self.repo = repo

    async def create(self, name: str) -> Topic:
        """Create a topic; raises UniqueTopicNameError if the name is taken."""
        topic = Topic(id=uuid.uuid4(), name=name, created_at=datetime.now(UTC))
        await self.repo.create(topic)
        return topic

    async def query(self, page_number: int, rows_per_page: int) -> list[Topic]:
        return await self.repo.query(page_number, rows_per_page)

    async def query_by_id(self, topic_id: uuid.UUID) -> Topic:
        return await self.repo.query_by_id(topic_id)
