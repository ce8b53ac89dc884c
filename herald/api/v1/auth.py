"""Registration, login and refresh-token exchange."""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException, Request, status

from herald.core.config import settings
from herald.core.deps import Distributor, Maker, Sessions, Users
from herald.core.rate_limit import AUTH_RATE_LIMIT, client_ip, limiter
from herald.models.user import Role, User
from herald.schemas.user import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    TokenRequest,
    TokenResponse,
    UserResponse,
)
from herald.services.errors import SessionNotFoundError
from herald.services.token_maker import ExpiredTokenError, InvalidTokenError
from herald.workers.distributor import EnqueueOptions, SendVerifyEmailPayload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
@limiter.limit(AUTH_RATE_LIMIT)
async def register(
    request: Request,  # noqa: ARG001
    data: RegisterRequest,
    users: Users,
    distributor: Distributor,
) -> UserResponse:
    """Create a user with the ``user`` role and schedule the verification email.

    The email task is enqueued inside the creating transaction: if enqueueing fails the
    user is not stored.
    """

    async def enqueue_verify_email(user: User) -> None:
        await distributor.distribute_send_verify_email(
            SendVerifyEmailPayload(email=user.email),
            EnqueueOptions(),
        )

    user = await users.create_tx(data.email, [Role.USER], data.password, enqueue_verify_email)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse, summary="Login user")
@limiter.limit(AUTH_RATE_LIMIT)
async def login(
    request: Request,
    data: LoginRequest,
    users: Users,
    sessions: Sessions,
    maker: Maker,
) -> LoginResponse:
    """Authenticate and mint an access token plus a session-backed refresh token."""
    user = await users.authenticate(data.email, data.password)

    access_token, access_payload = maker.create_token(
        user.id, user.roles, settings.access_token_duration
    )
    refresh_token, refresh_payload = maker.create_token(
        user.id, user.roles, settings.refresh_token_duration
    )

    session = await sessions.create(
        session_id=refresh_payload.id,
        user_id=user.id,
        refresh_token=refresh_token,
        user_agent=request.headers.get("User-Agent", ""),
        client_ip=client_ip(request),
        expires_at=refresh_payload.expires_at,
    )
    logger.info("user logged in", extra={"user_id": str(user.id), "session_id": str(session.id)})

    return LoginResponse(
        session_id=session.id,
        access_token=access_token,
        access_token_expires_at=access_payload.expires_at,
        refresh_token=refresh_token,
        refresh_token_expires_at=refresh_payload.expires_at,
        user=UserResponse.model_validate(user),
    )


@router.post("/token", response_model=TokenResponse, summary="Renew access token")
async def renew_access_token(
    data: TokenRequest,
    sessions: Sessions,
    maker: Maker,
) -> TokenResponse:
    """Exchange a refresh token for a new access token.

    The refresh token must verify, and its session must exist, belong to the same user,
    carry the same token, and be neither blocked nor expired.
    """
    try:
        payload = maker.verify_token(data.refresh_token)
    except (InvalidTokenError, ExpiredTokenError) as err:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(err)) from err

    try:
        session = await sessions.query_by_refresh_token(data.refresh_token)
    except SessionNotFoundError as err:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(err)) from err

    if session.is_blocked:
        detail = "blocked session"
    elif session.user_id != payload.user_id:
        detail = "incorrect session user"
    elif session.refresh_token != data.refresh_token:
        detail = "mismatched session token"
    elif datetime.now(UTC) > session.expires_at:
        detail = "expired session"
    else:
        detail = ""
    if detail:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)

    access_token, access_payload = maker.create_token(
        payload.user_id, payload.roles, settings.access_token_duration
    )
    return TokenResponse(
        access_token=access_token,
        access_token_expires_at=access_payload.expires_at,
    )
