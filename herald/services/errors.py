"""Domain errors shared by the services, the HTTP layer and the workers."""

from enum import StrEnum


class ErrorKind(StrEnum):
    """How an error is surfaced to callers."""

    NOT_FOUND = "not_found"
    UNIQUE_VIOLATION = "unique_violation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"


class HeraldError(Exception):
    """Base class for domain errors."""

    kind: ErrorKind = ErrorKind.VALIDATION
    message: str = "bad request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


# Users
class UserNotFoundError(HeraldError):
    kind = ErrorKind.NOT_FOUND
    message = "user not found"


class UniqueEmailError(HeraldError):
    kind = ErrorKind.UNIQUE_VIOLATION
    message = "email is not unique"


class AuthenticationFailureError(HeraldError):
    kind = ErrorKind.AUTHENTICATION
    message = "authentication failed"


class AuthorizationFailureError(HeraldError):
    kind = ErrorKind.AUTHORIZATION
    message = "attempted action is not allowed"


# Topics
class TopicNotFoundError(HeraldError):
    kind = ErrorKind.NOT_FOUND
    message = "topic not found"


class UniqueTopicNameError(HeraldError):
    kind = ErrorKind.UNIQUE_VIOLATION
    message = "topic name is not unique"


# Subscriptions
class SubscriptionNotFoundError(HeraldError):
    kind = ErrorKind.NOT_FOUND
    message = "subscription not found"


class UniqueSubscriptionError(HeraldError):
    kind = ErrorKind.UNIQUE_VIOLATION
    message = "user is already subscribed to this topic"


# Notifications
class NotificationNotFoundError(HeraldError):
    kind = ErrorKind.NOT_FOUND
    message = "notification not found"


# Verifications
class VerificationNotFoundError(HeraldError):
    kind = ErrorKind.NOT_FOUND
    message = "verification not found"


class VerificationCodeMismatchError(HeraldError):
    kind = ErrorKind.VALIDATION
    message = "verification code does not match"


# Sessions
class SessionNotFoundError(HeraldError):
    kind = ErrorKind.NOT_FOUND
    message = "session not found"
