"""Pydantic schemas for API request/response validation."""

from herald.schemas.common import BaseSchema, ErrorResponse, HealthResponse, ProbeResponse
from herald.schemas.notification import NotificationCreate, NotificationResponse
from herald.schemas.subscription import SubscriptionCreate, SubscriptionResponse
from herald.schemas.topic import TopicCreate, TopicResponse
from herald.schemas.user import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    TokenRequest,
    TokenResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from herald.schemas.verification import VerifyResponse

__all__ = [
    # Common
    "BaseSchema",
    "ErrorResponse",
    "HealthResponse",
    "ProbeResponse",
    # Users
    "RegisterRequest",
    "LoginRequest",
    "LoginResponse",
    "TokenRequest",
    "TokenResponse",
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "VerifyResponse",
    # Topics
    "TopicCreate",
    "TopicResponse",
    "SubscriptionCreate",
    "SubscriptionResponse",
    "NotificationCreate",
    "NotificationResponse",
]
