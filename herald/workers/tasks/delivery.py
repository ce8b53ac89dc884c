"""Celery tasks delivering verification and notification emails."""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any
from urllib.parse import urlencode

from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncEngine

from herald.core.config import settings
from herald.core.database import engine
from herald.repositories.notification import NotificationRepository
from herald.repositories.topic import TopicRepository
from herald.repositories.user import UserRepository
from herald.repositories.verification import VerificationRepository
from herald.services.mailer import EmailSender, get_mailer
from herald.services.notification_service import NotificationService
from herald.services.topic_service import TopicService
from herald.services.user_service import UserService
from herald.services.verification_service import VerificationService
from herald.workers.celery_app import (
    TASK_SEND_NOTIFICATION,
    TASK_SEND_VERIFY_EMAIL,
    BaseTask,
    SkipRetryError,
    celery_app,
)
from herald.workers.distributor import SendNotificationPayload, SendVerifyEmailPayload

logger = logging.getLogger(__name__)


def _run_async[T](coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine in a fresh event loop, disposing DB connections after.

    Pooled asyncpg connections are bound to the loop that opened them, so the engine is
    emptied before the loop closes.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.run_until_complete(engine.dispose())
        loop.close()


def _parse_payload[P: BaseModel](model: type[P], kwargs: dict[str, Any]) -> P:
    try:
        return model.model_validate(kwargs)
    except ValidationError as err:
        raise SkipRetryError(f"failed to unmarshal payload: {err}") from err


def verify_url(verification_id: Any, code: str) -> str:
    query = urlencode({"id": str(verification_id), "code": code})
    return f"{settings.verification_base_url}{settings.api_v1_prefix}/verify?{query}"


# ---------------------------------------------------------------------------
# Verification email
# ---------------------------------------------------------------------------


@celery_app.task(  # type: ignore[untyped-decorator]
    name=TASK_SEND_VERIFY_EMAIL,
    base=BaseTask,
    bind=True,
)
def send_verify_email(self: BaseTask, **kwargs: Any) -> dict[str, Any]:  # noqa: ARG001
    """Issue a verification code and mail the link to the user."""
    payload = _parse_payload(SendVerifyEmailPayload, kwargs)
    return _run_async(process_send_verify_email(payload, db=engine, mailer=get_mailer()))


async def process_send_verify_email(
    payload: SendVerifyEmailPayload,
    *,
    db: AsyncEngine,
    mailer: EmailSender,
) -> dict[str, Any]:
    """Async implementation of the verification email task.

    A user that is not visible yet (the registering transaction may not have committed)
    raises UserNotFoundError, which the broker retries.
    """
    users = UserService(UserRepository(db))
    verifications = VerificationService(VerificationRepository(db), users)

    user = await users.query_by_email(payload.email)
    verification = await verifications.create(user.id, user.email, ttl=settings.verification_ttl)

    content = (
        f"Hello {user.email},<br/>\n"
        "Thank you for registering with us!<br/>\n"
        f'Please <a href="{verify_url(verification.id, verification.code)}">click here</a> '
        "to verify your email address.<br/>\n"
    )
    await mailer.send_email(subject="Welcome!", content=content, to=[user.email])

    logger.info(
        "processed task",
        extra={"type": TASK_SEND_VERIFY_EMAIL, "email": user.email},
    )
    return {"status": "sent", "verification_id": str(verification.id)}


# ---------------------------------------------------------------------------
# Notification fan-out
# ---------------------------------------------------------------------------


@celery_app.task(  # type: ignore[untyped-decorator]
    name=TASK_SEND_NOTIFICATION,
    base=BaseTask,
    bind=True,
)
def send_notification(self: BaseTask, **kwargs: Any) -> dict[str, Any]:  # noqa: ARG001
    """Mail a notification to every subscriber of its topic."""
    payload = _parse_payload(SendNotificationPayload, kwargs)
    return _run_async(process_send_notification(payload, db=engine, mailer=get_mailer()))


async def process_send_notification(
    payload: SendNotificationPayload,
    *,
    db: AsyncEngine,
    mailer: EmailSender,
) -> dict[str, Any]:
    """Async implementation of the notification fan-out task.

    One email goes out with every subscriber in ``to``; the subject is the topic name.
    """
    topics = TopicRepository(db)
    notifications = NotificationService(NotificationRepository(db), topics)
    users = UserService(UserRepository(db))

    notification = await notifications.query_by_id(payload.notification_id)
    topic = await TopicService(topics).query_by_id(notification.topic_id)
    subscribers = await users.query_by_topic_id(notification.topic_id)

    to = [user.email for user in subscribers]
    if not to:
        logger.info(
            "no subscribers, nothing to send",
            extra={"type": TASK_SEND_NOTIFICATION, "topic_id": str(topic.id)},
        )
        return {"status": "skipped", "recipients": 0}

    await mailer.send_email(subject=topic.name, content=notification.message, to=to)

    logger.info(
        "processed task",
        extra={"type": TASK_SEND_NOTIFICATION, "email": ",".join(to)},
    )
    return {"status": "sent", "recipients": len(to)}
