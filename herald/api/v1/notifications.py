"""Notification endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, Response, status

from herald.core.auth import ensure_admin
from herald.core.deps import CurrentUser, Distributor, Notifications, Pagination
from herald.models.notification import Notification
from herald.schemas.notification import NotificationCreate, NotificationResponse
from herald.workers.distributor import EnqueueOptions, SendNotificationPayload

router = APIRouter()


@router.get("", response_model=list[NotificationResponse], summary="List notifications")
async def list_notifications(
    _user: CurrentUser,
    notifications: Notifications,
    page: Pagination,
    topic_id: UUID | None = Query(None, description="Only notifications of this topic"),
) -> list[NotificationResponse]:
    items = await notifications.query(page.number, page.rows, topic_id)
    return [NotificationResponse.model_validate(n) for n in items]


@router.post(
    "",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post a notification",
)
async def create_notification(
    data: NotificationCreate,
    _user: CurrentUser,
    notifications: Notifications,
    distributor: Distributor,
) -> NotificationResponse:
    """Store a notification and schedule its delivery to the topic's subscribers."""

    async def enqueue_send_notification(notification: Notification) -> None:
        await distributor.distribute_send_notification(
            SendNotificationPayload(notification_id=notification.id),
            EnqueueOptions(),
        )

    notification = await notifications.create_tx(
        data.topic_id, data.message, enqueue_send_notification
    )
    return NotificationResponse.model_validate(notification)


@router.get("/{notification_id}", response_model=NotificationResponse, summary="Get notification")
async def get_notification(
    notification_id: UUID,
    _user: CurrentUser,
    notifications: Notifications,
) -> NotificationResponse:
    return NotificationResponse.model_validate(await notifications.query_by_id(notification_id))


@router.delete(
    "/{notification_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete notification",
)
async def delete_notification(
    notification_id: UUID,
    user: CurrentUser,
    notifications: Notifications,
) -> Response:
    """Delete a notification (admin only)."""
    ensure_admin(user)
    await notifications.query_by_id(notification_id)
    await notifications.delete(notification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
