"""Subscription endpoints."""

from uuid import UUID

from fastapi import APIRouter, Response, status

from herald.core.auth import ensure_admin, ensure_admin_or_self
from herald.core.deps import CurrentUser, Pagination, Subscriptions
from herald.schemas.subscription import SubscriptionCreate, SubscriptionResponse

router = APIRouter()


@router.get("", response_model=list[SubscriptionResponse], summary="List subscriptions")
async def list_subscriptions(
    user: CurrentUser,
    subscriptions: Subscriptions,
    page: Pagination,
) -> list[SubscriptionResponse]:
    """List subscriptions (admin only)."""
    ensure_admin(user)
    items = await subscriptions.query(page.number, page.rows)
    return [SubscriptionResponse.model_validate(s) for s in items]


@router.post(
    "",
    response_model=SubscriptionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Subscribe to a topic",
)
async def create_subscription(
    data: SubscriptionCreate,
    user: CurrentUser,
    subscriptions: Subscriptions,
) -> SubscriptionResponse:
    """Subscribe a user to a topic. Non-admins may only subscribe themselves."""
    ensure_admin_or_self(user, data.user_id)
    subscription = await subscriptions.create(data.topic_id, data.user_id)
    return SubscriptionResponse.model_validate(subscription)


@router.get("/{subscription_id}", response_model=SubscriptionResponse, summary="Get subscription")
async def get_subscription(
    subscription_id: UUID,
    user: CurrentUser,
    subscriptions: Subscriptions,
) -> SubscriptionResponse:
    subscription = await subscriptions.query_by_id(subscription_id)
    ensure_admin_or_self(user, subscription.user_id)
    return SubscriptionResponse.model_validate(subscription)


@router.delete(
    "/{subscription_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Unsubscribe",
)
async def delete_subscription(
    subscription_id: UUID,
    user: CurrentUser,
    subscriptions: Subscriptions,
) -> Response:
    subscription = await subscriptions.query_by_id(subscription_id)
    ensure_admin_or_self(user, subscription.user_id)
    await subscriptions.delete(subscription_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
