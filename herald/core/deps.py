"""Dependency injection for FastAPI routes."""

from collections.abc import AsyncGenerator
from typing import Annotated

import redis.asyncio as aioredis
from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncEngine

# Re-export auth dependencies for convenience
from herald.core.auth import CurrentUser, get_token_maker  # noqa: F401
from herald.core.config import settings
from herald.core.database import get_db
from herald.repositories.notification import NotificationRepository
from herald.repositories.session import SessionRepository
from herald.repositories.subscription import SubscriptionRepository
from herald.repositories.topic import TopicRepository
from herald.repositories.user import UserRepository
from herald.repositories.verification import VerificationRepository
from herald.services.notification_service import NotificationService
from herald.services.session_service import SessionService
from herald.services.subscription_service import SubscriptionService
from herald.services.token_maker import TokenMaker
from herald.services.topic_service import TopicService
from herald.services.user_service import UserService
from herald.services.verification_service import VerificationService
from herald.workers.distributor import CeleryTaskDistributor, TaskDistributor

# Database engine dependency
DB = Annotated[AsyncEngine, Depends(get_db)]


# Shared Redis connection pool
_redis_pool: aioredis.ConnectionPool | None = None


def _get_redis_pool() -> aioredis.ConnectionPool:
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.ConnectionPool.from_url(settings.redis_url, decode_responses=True)
    return _redis_pool


async def get_redis() -> AsyncGenerator[aioredis.Redis, None]:
    """Yield a Redis client from the shared connection pool."""
    r = aioredis.Redis(connection_pool=_get_redis_pool())
    try:
        yield r
    finally:
        await r.aclose()


_distributor: CeleryTaskDistributor | None = None


def get_task_distributor() -> TaskDistributor:
    """Get the broker client used to enqueue tasks."""
    global _distributor  # noqa: PLW0603
    if _distributor is None:
        _distributor = CeleryTaskDistributor()
    return _distributor


# === Services ===


def get_user_service(db: DB) -> UserService:
    return UserService(UserRepository(db))


def get_topic_service(db: DB) -> TopicService:
    return TopicService(TopicRepository(db))


def get_subscription_service(db: DB) -> SubscriptionService:
    return SubscriptionService(SubscriptionRepository(db), TopicRepository(db))


def get_notification_service(db: DB) -> NotificationService:
    return NotificationService(NotificationRepository(db), TopicRepository(db))


def get_verification_service(db: DB) -> VerificationService:
    return VerificationService(VerificationRepository(db), UserService(UserRepository(db)))


def get_session_service(db: DB) -> SessionService:
    return SessionService(SessionRepository(db))


Users = Annotated[UserService, Depends(get_user_service)]
Topics = Annotated[TopicService, Depends(get_topic_service)]
Subscriptions = Annotated[SubscriptionService, Depends(get_subscription_service)]
Notifications = Annotated[NotificationService, Depends(get_notification_service)]
Verifications = Annotated[VerificationService, Depends(get_verification_service)]
Sessions = Annotated[SessionService, Depends(get_session_service)]
Distributor = Annotated[TaskDistributor, Depends(get_task_distributor)]
Maker = Annotated[TokenMaker, Depends(get_token_maker)]
Redis = Annotated[aioredis.Redis, Depends(get_redis)]


class Page:
    """Pagination query parameters: 1-based ``page`` and ``rows`` per page."""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number (1-based)"),
        rows: int = Query(10, ge=1, le=1000, description="Rows per page"),
    ) -> None:
        self.number = page
        self.rows = rows

    @property
    def offset(self) -> int:
        return (self.number - 1) * self.rows


Pagination = Annotated[Page, Depends()]
