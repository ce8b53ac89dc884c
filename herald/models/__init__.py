"""SQLAlchemy models."""

from herald.models.base import Base
from herald.models.notification import Notification
from herald.models.session import Session
from herald.models.subscription import Subscription
from herald.models.topic import Topic
from herald.models.user import Role, RoleList, User, parse_roles
from herald.models.verification import Verification

__all__ = [
    # Base
    "Base",
    # Users
    "User",
    "Role",
    "RoleList",
    "parse_roles",
    "Session",
    "Verification",
    # Topics
    "Topic",
    "Subscription",
    "Notification",
]
