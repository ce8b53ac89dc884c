"""Bearer token authentication for FastAPI."""

from collections.abc import Iterable
from functools import lru_cache
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncEngine

from herald.core.config import settings
from herald.core.database import get_db
from herald.models.user import Role, User
from herald.repositories.user import UserRepository
from herald.services.errors import AuthorizationFailureError
from herald.services.token_maker import ExpiredTokenError, InvalidTokenError, Payload, TokenMaker
from herald.services.user_service import UserService

AUTHORIZATION_HEADER = "Authorization"
AUTHORIZATION_TYPE_BEARER = "bearer"


@lru_cache
def get_token_maker() -> TokenMaker:
    """Get the token maker keyed with TOKEN_SYMMETRIC_KEY."""
    return TokenMaker(settings.token_symmetric_key)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def has_permission(user_roles: Iterable[str], accessible_roles: Iterable[str]) -> bool:
    """True iff every accessible role is held by the user."""
    held = set(user_roles)
    return all(role in held for role in accessible_roles)


async def get_token_payload(
    request: Request,
    maker: TokenMaker = Depends(get_token_maker),
) -> Payload:
    """Verify the bearer token of the request.

    Raises:
        HTTPException: 401 if the header is missing, malformed or the token is invalid
    """
    header = request.headers.get(AUTHORIZATION_HEADER, "")
    if not header:
        raise _unauthorized("authorization header is not provided")

    fields = header.split()
    if len(fields) < 2:
        raise _unauthorized("invalid authorization header format")

    auth_type = fields[0].lower()
    if auth_type != AUTHORIZATION_TYPE_BEARER:
        raise _unauthorized(f"unsupported authorization type {auth_type}")

    try:
        return maker.verify_token(fields[1])
    except (InvalidTokenError, ExpiredTokenError) as err:
        raise _unauthorized(str(err)) from err


async def get_current_user(
    payload: Payload = Depends(get_token_payload),
    db: AsyncEngine = Depends(get_db),
) -> User:
    """Load the authenticated user; every protected route requires the ``user`` role.

    The stored record, not the token, is the source of truth for later role checks.
    """
    if not has_permission(payload.roles, [Role.USER]):
        raise _unauthorized("unauthorized")
    return await UserService(UserRepository(db)).query_by_id(payload.user_id)


def is_admin(user: User) -> bool:
    return Role.ADMIN in user.roles


def ensure_admin(user: User) -> None:
    if not is_admin(user):
        raise AuthorizationFailureError()


def ensure_admin_or_self(user: User, owner_id: UUID) -> None:
    """Allow admins, or the user acting on something they own."""
    if not is_admin(user) and user.id != owner_id:
        raise AuthorizationFailureError()


# Type aliases for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
