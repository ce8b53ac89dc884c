"""Tests for the notification routes and the fan-out they schedule."""

import uuid

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine

from herald.models import Topic, User
from herald.repositories.topic import TopicRepository
from herald.services.topic_service import TopicService
from herald.workers.celery_app import QUEUE_CRITICAL, TASK_SEND_NOTIFICATION
from herald.workers.distributor import SendNotificationPayload
from herald.workers.tasks.delivery import process_send_notification

NOTIFICATIONS = "/api/v1/notifications"


@pytest_asyncio.fixture
async def topic(engine: AsyncEngine) -> Topic:
    return await TopicService(TopicRepository(engine)).create("releases")


async def post_notification(
    client: AsyncClient, topic_id: uuid.UUID, message: str, headers: dict[str, str]
) -> dict:
    response = await client.post(
        NOTIFICATIONS, json={"topic_id": str(topic_id), "message": message}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestFanOut:
    async def test_subscribers_get_one_email(
        self,
        client: AsyncClient,
        engine: AsyncEngine,
        topic: Topic,
        user_factory,
        auth_headers,
        fake_distributor,
        fake_mailer,
    ) -> None:
        u1 = await user_factory(email="u1@x.io")
        u2 = await user_factory(email="u2@x.io")
        for user in (u1, u2):
            response = await client.post(
                "/api/v1/subscriptions",
                json={"topic_id": str(topic.id), "user_id": str(user.id)},
                headers=auth_headers(user),
            )
            assert response.status_code == 201

        notification = await post_notification(client, topic.id, "hello", auth_headers(u1))

        [task] = fake_distributor.in_queue(QUEUE_CRITICAL)
        assert task.name == TASK_SEND_NOTIFICATION
        assert task.payload == {"notification_id": notification["id"]}

        await process_send_notification(
            SendNotificationPayload.model_validate(task.payload), db=engine, mailer=fake_mailer
        )
        [email] = fake_mailer.sent
        assert email.subject == "releases"
        assert "hello" in email.content
        assert sorted(email.to) == ["u1@x.io", "u2@x.io"]


class TestNotificationsRoute:
    async def test_unknown_topic(
        self, client: AsyncClient, member: User, auth_headers, fake_distributor
    ) -> None:
        response = await client.post(
            NOTIFICATIONS,
            json={"topic_id": str(uuid.uuid4()), "message": "hello"},
            headers=auth_headers(member),
        )

        assert response.status_code == 404
        assert fake_distributor.tasks == []

    async def test_empty_message(
        self, client: AsyncClient, member: User, topic: Topic, auth_headers
    ) -> None:
        response = await client.post(
            NOTIFICATIONS,
            json={"topic_id": str(topic.id), "message": ""},
            headers=auth_headers(member),
        )
        assert response.status_code == 400

    async def test_list_and_filter(
        self, client: AsyncClient, engine: AsyncEngine, member: User, topic: Topic, auth_headers
    ) -> None:
        headers = auth_headers(member)
        other = await TopicService(TopicRepository(engine)).create("outages")
        await post_notification(client, topic.id, "v2", headers)
        await post_notification(client, other.id, "db down", headers)

        everything = await client.get(NOTIFICATIONS, headers=headers)
        filtered = await client.get(
            NOTIFICATIONS, params={"topic_id": str(other.id)}, headers=headers
        )

        assert len(everything.json()) == 2
        assert [n["message"] for n in filtered.json()] == ["db down"]

    async def test_get(self, client: AsyncClient, member: User, topic: Topic, auth_headers) -> None:
        headers = auth_headers(member)
        created = await post_notification(client, topic.id, "v2", headers)

        response = await client.get(f"{NOTIFICATIONS}/{created['id']}", headers=headers)

        assert response.status_code == 200
        assert response.json() == created

    async def test_delete_is_admin_only(
        self, client: AsyncClient, admin: User, member: User, topic: Topic, auth_headers
    ) -> None:
        created = await post_notification(client, topic.id, "v2", auth_headers(member))
        path = f"{NOTIFICATIONS}/{created['id']}"

        assert (await client.delete(path, headers=auth_headers(member))).status_code == 403
        assert (await client.delete(path, headers=auth_headers(admin))).status_code == 204
        assert (await client.get(path, headers=auth_headers(admin))).status_code == 404
