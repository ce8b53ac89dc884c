"""Celery application configuration."""

import logging
from typing import Any

from celery import Celery
from celery.signals import setup_logging as celery_setup_logging
from celery.signals import task_failure
from kombu import Queue

from herald.core.config import settings
from herald.core.logging_config import setup_logging

logger = logging.getLogger(__name__)

QUEUE_CRITICAL = "critical"
QUEUE_DEFAULT = "default"

# Relative share of worker slots per queue when workers are started per queue
QUEUE_WEIGHTS = {QUEUE_CRITICAL: 10, QUEUE_DEFAULT: 5}

TASK_SEND_VERIFY_EMAIL = "task:send_verify_email"
TASK_SEND_NOTIFICATION = "task:send_notification"

# Create Celery app
celery_app = Celery(
    "herald",
    broker=settings.redis_url,
    include=["herald.workers.tasks.delivery"],
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    # Task safety limits
    task_time_limit=300,
    task_soft_time_limit=240,
    # At-least-once: ack after the handler returns, requeue if the worker dies
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_ignore_result=True,
    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=settings.worker_concurrency,
    # Queues
    task_queues=(Queue(QUEUE_CRITICAL), Queue(QUEUE_DEFAULT)),
    task_default_queue=QUEUE_DEFAULT,
)


class SkipRetryError(Exception):
    """Raised by a task when retrying can never succeed, e.g. a malformed payload."""


# Task base class with common error handling
class BaseTask(celery_app.Task):  # type: ignore[misc, name-defined]
    """Base task class with error handling.

    Every error except SkipRetryError is retried with exponential backoff. The retry
    budget comes from the ``max_retry`` message header set by the distributor, falling
    back to ``max_retries``.
    """

    abstract = True
    autoretry_for = (Exception,)
    dont_autoretry_for = (SkipRetryError,)
    retry_backoff = True
    retry_backoff_max = 600  # Max 10 minutes between retries
    retry_jitter = True
    max_retries = 10

    def message_max_retry(self) -> int:
        value = self.request.get("max_retry")
        if value is None:
            value = (self.request.get("headers") or {}).get("max_retry")
        return self.max_retries if value is None else int(value)

    def retry(self, *args: Any, max_retries: int | None = None, **kwargs: Any) -> Any:
        if max_retries is None:
            max_retries = self.message_max_retry()
        return super().retry(*args, max_retries=max_retries, **kwargs)


@celery_setup_logging.connect
def configure_worker_logging(**_: Any) -> None:
    """Use the JSON log format in workers instead of Celery's own."""
    setup_logging(debug=settings.debug, service="worker")


@task_failure.connect
def log_task_failure(
    sender: Any = None,
    task_id: str | None = None,
    exception: BaseException | None = None,
    kwargs: dict[str, Any] | None = None,
    **_: Any,
) -> None:
    """Log tasks that failed for good (retries exhausted or skipped)."""
    logger.error(
        "process task failed",
        extra={
            "type": getattr(sender, "name", None),
            "task_id": task_id,
            "payload": kwargs,
            "error": str(exception),
        },
    )
