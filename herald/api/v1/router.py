"""API v1 router combining all route modules."""

from fastapi import APIRouter

from herald.api.v1 import auth, health, notifications, subscriptions, topics, users, verifications

api_router = APIRouter()

# Include health check routes (no prefix)
api_router.include_router(health.router)

# Register, login and token exchange (no auth)
api_router.include_router(auth.router)

# Email verification link (no auth)
api_router.include_router(verifications.router)

# Users (admin, or self for single-user operations)
api_router.include_router(
    users.router,
    prefix="/users",
    tags=["users"],
)

# Topics
api_router.include_router(
    topics.router,
    prefix="/topics",
    tags=["topics"],
)

# Subscriptions
api_router.include_router(
    subscriptions.router,
    prefix="/subscriptions",
    tags=["subscriptions"],
)

# Notifications (creating one schedules delivery)
api_router.include_router(
    notifications.router,
    prefix="/notifications",
    tags=["notifications"],
)
