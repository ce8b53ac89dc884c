"""Notification business rules."""

import logging
import uuid
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncConnection

from herald.models.notification import Notification
from herald.repositories.notification import NotificationRepository
from herald.repositories.topic import TopicRepository

logger = logging.getLogger(__name__)

AfterCreate = Callable[[Notification], Awaitable[None]]


class NotificationService:
    def __init__(self, repo: NotificationRepository, topics: TopicRepository) -> None:
        self.repo = repo
        self.topics = topics

    @staticmethod
    def _new_notification(topic_id: uuid.UUID, message: str) -> Notification:
        return Notification(
            id=uuid.uuid4(),
            topic_id=topic_id,
            message=message,
            created_at=datetime.now(UTC),
        )

    async def create(self, topic_id: uuid.UUID, message: str) -> Notification:
        """Store a notification for an existing topic without scheduling delivery."""
        await self.topics.query_by_id(topic_id)
        notification = self._new_notification(topic_id, message)
        await self.repo.create(notification)
        return notification

    async def create_tx(
        self,
        topic_id: uuid.UUID,
        message: str,
        after_create: AfterCreate,
    ) -> Notification:
        """Store a notification and run ``after_create`` before committing.

        If ``after_create`` raises, nothing is stored.
        """
        notification = self._new_notification(topic_id, message)

        async def tx(conn: AsyncConnection) -> Notification:
            await self.topics.bind(conn).query_by_id(topic_id)
            await self.repo.bind(conn).create(notification)
            await after_create(notification)
            return notification

        created = await self.repo.within_tran(tx)
        logger.info(
            "notification created",
            extra={"notification_id": str(created.id), "topic_id": str(topic_id)},
        )
        return created

    async def delete(self, notification_id: uuid.UUID) -> None:
        await self.repo.delete(notification_id)

    async def query(
        self,
        page_number: int,
        rows_per_page: int,
        topic_id: uuid.UUID | None = None,
    ) -> list[Notification]:
        return await self.repo.query(page_number, rows_per_page, topic_id)

    async def query_by_id(self, notification_id: uuid.UUID) -> Notification:
        return await self.repo.query_by_id(notification_id)
