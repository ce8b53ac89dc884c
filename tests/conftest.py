"""Pytest configuration and fixtures for the Herald test suite.

Provides:
- A fresh in-memory SQLite database per test, built from the declarative metadata
- Recording fakes for the task distributor and the mailer
- Mock Redis (fakeredis)
- Disabled rate limiting
- User factory and bearer-token helpers
"""

from collections.abc import AsyncGenerator, Callable, Sequence
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

import fakeredis.aioredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from herald.core.auth import get_token_maker
from herald.core.database import get_db
from herald.core.deps import get_redis, get_task_distributor
from herald.core.rate_limit import limiter
from herald.main import app
from herald.models import Base, Role, User
from herald.repositories.user import UserRepository
from herald.services.user_service import UserService
from herald.workers.celery_app import TASK_SEND_NOTIFICATION, TASK_SEND_VERIFY_EMAIL
from herald.workers.distributor import (
    EnqueueOptions,
    SendNotificationPayload,
    SendVerifyEmailPayload,
)

DEFAULT_PASSWORD = "secret1"

# ---------------------------------------------------------------------------
# Disable rate limiting globally for tests
# ---------------------------------------------------------------------------
limiter.enabled = False


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite shared by every connection of the test (StaticPool)."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(test_engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


@dataclass
class EnqueuedTask:
    name: str
    payload: dict[str, Any]
    options: EnqueueOptions


@dataclass
class FakeDistributor:
    """Records enqueued tasks instead of publishing them; can be told to fail."""

    tasks: list[EnqueuedTask] = field(default_factory=list)
    fail_with: Exception | None = None

    async def _record(self, name: str, payload: Any, options: EnqueueOptions | None) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        dumped = payload.model_dump(mode="json")
        self.tasks.append(EnqueuedTask(name, dumped, options or EnqueueOptions()))

    async def distribute_send_verify_email(
        self, payload: SendVerifyEmailPayload, options: EnqueueOptions | None = None
    ) -> None:
        await self._record(TASK_SEND_VERIFY_EMAIL, payload, options)

    async def distribute_send_notification(
        self, payload: SendNotificationPayload, options: EnqueueOptions | None = None
    ) -> None:
        await self._record(TASK_SEND_NOTIFICATION, payload, options)

    def in_queue(self, queue: str) -> list[EnqueuedTask]:
        return [task for task in self.tasks if task.options.queue == queue]


@dataclass
class SentEmail:
    subject: str
    content: str
    to: list[str]
    cc: list[str]
    bcc: list[str]


@dataclass
class FakeMailer:
    """Records outgoing mail."""

    sent: list[SentEmail] = field(default_factory=list)

    async def send_email(
        self,
        subject: str,
        content: str,
        to: Sequence[str],
        cc: Sequence[str] = (),
        bcc: Sequence[str] = (),
        attach_files: Sequence[str | Path] = (),  # noqa: ARG002
    ) -> None:
        self.sent.append(SentEmail(subject, content, list(to), list(cc), list(bcc)))


@pytest.fixture
def fake_distributor() -> FakeDistributor:
    return FakeDistributor()


@pytest.fixture
def fake_mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def fake_redis() -> fakeredis.aioredis.FakeRedis:
    """Provide a fresh fakeredis instance per test."""
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


# ---------------------------------------------------------------------------
# Client (overrides DB, Redis, task distributor)
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(
    engine: AsyncEngine,
    fake_redis: fakeredis.aioredis.FakeRedis,
    fake_distributor: FakeDistributor,
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client wired to the test database and the fakes."""

    async def _override_db() -> AsyncEngine:
        return engine

    async def _override_redis() -> AsyncGenerator[fakeredis.aioredis.FakeRedis, None]:
        yield fake_redis

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_redis] = _override_redis
    app.dependency_overrides[get_task_distributor] = lambda: fake_distributor

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def plain_client() -> AsyncGenerator[AsyncClient, None]:
    """Minimal async test client with NO dependency overrides."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ---------------------------------------------------------------------------
# Users and tokens
# ---------------------------------------------------------------------------


@pytest.fixture
def user_service(engine: AsyncEngine) -> UserService:
    return UserService(UserRepository(engine))


@pytest.fixture
def user_factory(user_service: UserService) -> Callable[..., Any]:
    """Factory that stores users directly through the service."""
    counter = 0

    async def _create(
        *,
        email: str | None = None,
        roles: Sequence[Role] = (Role.USER,),
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        nonlocal counter
        counter += 1
        return await user_service.create(email or f"user{counter}@example.com", roles, password)

    return _create


def _bearer(user: User) -> dict[str, str]:
    token, _ = get_token_maker().create_token(user.id, user.roles, timedelta(minutes=5))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Build a bearer header carrying a fresh access token for a user."""
    return _bearer


@pytest_asyncio.fixture
async def member(user_factory: Callable[..., Any]) -> User:
    """A regular user."""
    return await user_factory(email="member@example.com")


@pytest_asyncio.fixture
async def admin(user_factory: Callable[..., Any]) -> User:
    """A user holding both roles."""
    return await user_factory(email="admin@example.com", roles=(Role.ADMIN, Role.USER))
