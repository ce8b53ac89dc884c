"""Tests for topics, subscriptions and notifications."""

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from herald.models import Notification, Role
from herald.repositories.notification import NotificationRepository
from herald.repositories.subscription import SubscriptionRepository
from herald.repositories.topic import TopicRepository
from herald.services.errors import (
    NotificationNotFoundError,
    SubscriptionNotFoundError,
    TopicNotFoundError,
    UniqueSubscriptionError,
    UniqueTopicNameError,
)
from herald.services.notification_service import NotificationService
from herald.services.subscription_service import SubscriptionService
from herald.services.topic_service import TopicService
from herald.services.user_service import UserService


@pytest.fixture
def topic_service(engine: AsyncEngine) -> TopicService:
    return TopicService(TopicRepository(engine))


@pytest.fixture
def subscription_service(engine: AsyncEngine) -> SubscriptionService:
    return SubscriptionService(SubscriptionRepository(engine), TopicRepository(engine))


@pytest.fixture
def notification_service(engine: AsyncEngine) -> NotificationService:
    return NotificationService(NotificationRepository(engine), TopicRepository(engine))


class TestTopics:
    async def test_create_and_fetch(self, topic_service: TopicService) -> None:
        topic = await topic_service.create("releases")

        stored = await topic_service.query_by_id(topic.id)
        assert stored.name == "releases"
        assert stored.created_at is not None

    async def test_duplicate_name(self, topic_service: TopicService) -> None:
        await topic_service.create("releases")

        with pytest.raises(UniqueTopicNameError, match="topic name is not unique"):
            await topic_service.create("releases")

    async def test_unknown(self, topic_service: TopicService) -> None:
        with pytest.raises(TopicNotFoundError):
            await topic_service.query_by_id(uuid.uuid4())

    async def test_pages(self, topic_service: TopicService) -> None:
        for name in ("a", "b", "c"):
            await topic_service.create(name)

        first = await topic_service.query(1, 2)
        second = await topic_service.query(2, 2)

        assert len(first) == 2
        assert len(second) == 1
        assert {t.name for t in first + second} == {"a", "b", "c"}


class TestSubscriptions:
    async def test_subscribe(
        self,
        topic_service: TopicService,
        subscription_service: SubscriptionService,
        user_service: UserService,
    ) -> None:
        topic = await topic_service.create("releases")
        user = await user_service.create("sub@x.io", [Role.USER], "secret1")

        subscription = await subscription_service.create(topic.id, user.id)

        stored = await subscription_service.query_by_id(subscription.id)
        assert (stored.topic_id, stored.user_id) == (topic.id, user.id)
        assert [u.email for u in await user_service.query_by_topic_id(topic.id)] == ["sub@x.io"]

    async def test_subscribe_twice(
        self,
        topic_service: TopicService,
        subscription_service: SubscriptionService,
        user_service: UserService,
    ) -> None:
        topic = await topic_service.create("releases")
        user = await user_service.create("sub@x.io", [Role.USER], "secret1")
        await subscription_service.create(topic.id, user.id)

        with pytest.raises(UniqueSubscriptionError):
            await subscription_service.create(topic.id, user.id)

    async def test_unknown_topic(
        self, subscription_service: SubscriptionService, user_service: UserService
    ) -> None:
        user = await user_service.create("sub@x.io", [Role.USER], "secret1")

        with pytest.raises(TopicNotFoundError):
            await subscription_service.create(uuid.uuid4(), user.id)

    async def test_unsubscribe(
        self,
        topic_service: TopicService,
        subscription_service: SubscriptionService,
        user_service: UserService,
    ) -> None:
        topic = await topic_service.create("releases")
        user = await user_service.create("sub@x.io", [Role.USER], "secret1")
        subscription = await subscription_service.create(topic.id, user.id)

        await subscription_service.delete(subscription.id)

        with pytest.raises(SubscriptionNotFoundError):
            await subscription_service.query_by_id(subscription.id)
        assert await user_service.query_by_topic_id(topic.id) == []


class TestNotifications:
    async def test_create_requires_topic(self, notification_service: NotificationService) -> None:
        with pytest.raises(TopicNotFoundError):
            await notification_service.create(uuid.uuid4(), "hello")

    async def test_create_tx_runs_hook(
        self, topic_service: TopicService, notification_service: NotificationService
    ) -> None:
        topic = await topic_service.create("releases")
        seen: list[Notification] = []

        async def hook(notification: Notification) -> None:
            seen.append(notification)

        notification = await notification_service.create_tx(topic.id, "v2 is out", hook)

        assert seen == [notification]
        stored = await notification_service.query_by_id(notification.id)
        assert stored.message == "v2 is out"

    async def test_create_tx_rolls_back_on_hook_failure(
        self, topic_service: TopicService, notification_service: NotificationService
    ) -> None:
        topic = await topic_service.create("releases")

        async def hook(_notification: Notification) -> None:
            raise RuntimeError("broker unavailable")

        with pytest.raises(RuntimeError, match="broker unavailable"):
            await notification_service.create_tx(topic.id, "v2 is out", hook)

        assert await notification_service.query(1, 10) == []

    async def test_filter_by_topic(
        self, topic_service: TopicService, notification_service: NotificationService
    ) -> None:
        releases = await topic_service.create("releases")
        outages = await topic_service.create("outages")
        await notification_service.create(releases.id, "v2")
        await notification_service.create(outages.id, "db down")

        everything = await notification_service.query(1, 10)
        only_outages = await notification_service.query(1, 10, topic_id=outages.id)

        assert len(everything) == 2
        assert [n.message for n in only_outages] == ["db down"]

    async def test_delete(
        self, topic_service: TopicService, notification_service: NotificationService
    ) -> None:
        topic = await topic_service.create("releases")
        notification = await notification_service.create(topic.id, "v2")

        await notification_service.delete(notification.id)

        with pytest.raises(NotificationNotFoundError):
            await notification_service.query_by_id(notification.id)
