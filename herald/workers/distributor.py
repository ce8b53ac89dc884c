"""Task distributor: the enqueue side of the broker."""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Protocol

from celery import Celery
from pydantic import BaseModel

from herald.core.config import settings
from herald.workers.celery_app import (
    QUEUE_CRITICAL,
    TASK_SEND_NOTIFICATION,
    TASK_SEND_VERIFY_EMAIL,
    celery_app,
)

logger = logging.getLogger(__name__)


class SendVerifyEmailPayload(BaseModel):
    email: str


class SendNotificationPayload(BaseModel):
    notification_id: uuid.UUID


@dataclass(frozen=True)
class EnqueueOptions:
    """Delivery options attached to an enqueued task."""

    max_retry: int = field(default_factory=lambda: settings.task_max_retry)
    process_in: timedelta = field(default_factory=lambda: settings.task_process_in)
    queue: str = QUEUE_CRITICAL


class TaskDistributor(Protocol):
    async def distribute_send_verify_email(
        self, payload: SendVerifyEmailPayload, options: EnqueueOptions | None = None
    ) -> None: ...

    async def distribute_send_notification(
        self, payload: SendNotificationPayload, options: EnqueueOptions | None = None
    ) -> None: ...


class CeleryTaskDistributor:
    """Enqueues tasks on the Redis broker through Celery."""

    def __init__(self, app: Celery = celery_app) -> None:
        self.app = app

    async def _enqueue(
        self, task_name: str, payload: BaseModel, options: EnqueueOptions | None
    ) -> None:
        options = options or EnqueueOptions()
        kwargs: dict[str, Any] = payload.model_dump(mode="json")

        # Publishing blocks on a Redis round-trip
        await asyncio.to_thread(
            self.app.send_task,
            task_name,
            kwargs=kwargs,
            queue=options.queue,
            countdown=options.process_in.total_seconds(),
            headers={"max_retry": options.max_retry},
        )
        logger.info(
            "enqueued task",
            extra={
                "type": task_name,
                "payload": kwargs,
                "queue": options.queue,
                "max_retry": options.max_retry,
            },
        )

    async def distribute_send_verify_email(
        self, payload: SendVerifyEmailPayload, options: EnqueueOptions | None = None
    ) -> None:
        await self._enqueue(TASK_SEND_VERIFY_EMAIL, payload, options)

    async def distribute_send_notification(
        self, payload: SendNotificationPayload, options: EnqueueOptions | None = None
    ) -> None:
        await self._enqueue(TASK_SEND_NOTIFICATION, payload, options)
