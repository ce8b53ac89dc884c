"""Tests for the topic routes."""

import uuid

from httpx import AsyncClient

from herald.models import User

TOPICS = "/api/v1/topics"


class TestTopicsRoute:
    async def test_requires_auth(self, client: AsyncClient) -> None:
        response = await client.get(TOPICS)
        assert response.status_code == 401

    async def test_create_list_get(self, client: AsyncClient, member: User, auth_headers) -> None:
        headers = auth_headers(member)

        created = await client.post(TOPICS, json={"name": "releases"}, headers=headers)
        assert created.status_code == 201
        topic = created.json()
        assert topic["name"] == "releases"

        listed = await client.get(TOPICS, headers=headers)
        assert [t["id"] for t in listed.json()] == [topic["id"]]

        fetched = await client.get(f"{TOPICS}/{topic['id']}", headers=headers)
        assert fetched.json() == topic

    async def test_duplicate_name(self, client: AsyncClient, member: User, auth_headers) -> None:
        headers = auth_headers(member)
        await client.post(TOPICS, json={"name": "releases"}, headers=headers)

        response = await client.post(TOPICS, json={"name": "releases"}, headers=headers)

        assert response.status_code == 403
        assert response.json() == {"error": "topic name is not unique"}

    async def test_unknown(self, client: AsyncClient, member: User, auth_headers) -> None:
        response = await client.get(f"{TOPICS}/{uuid.uuid4()}", headers=auth_headers(member))

        assert response.status_code == 404
        assert response.json() == {"error": "topic not found"}

    async def test_malformed_id(self, client: AsyncClient, member: User, auth_headers) -> None:
        response = await client.get(f"{TOPICS}/not-a-uuid", headers=auth_headers(member))
        assert response.status_code == 400
