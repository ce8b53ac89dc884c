"""User CRUD endpoints."""

from uuid import UUID

from fastapi import APIRouter, Response, status

from herald.core.auth import ensure_admin, ensure_admin_or_self, is_admin
from herald.core.deps import CurrentUser, Pagination, Users
from herald.schemas.user import UserCreate, UserResponse, UserUpdate
from herald.services.errors import AuthorizationFailureError

router = APIRouter()


@router.get("", response_model=list[UserResponse], summary="List users")
async def list_users(user: CurrentUser, users: Users, page: Pagination) -> list[UserResponse]:
    """List users (admin only)."""
    ensure_admin(user)
    return [UserResponse.model_validate(u) for u in await users.query(page.number, page.rows)]


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
async def create_user(data: UserCreate, user: CurrentUser, users: Users) -> UserResponse:
    """Create a user with explicit roles (admin only). No verification email is sent."""
    ensure_admin(user)
    created = await users.create(data.email, data.roles, data.password)
    return UserResponse.model_validate(created)


@router.get("/{user_id}", response_model=UserResponse, summary="Get user")
async def get_user(user_id: UUID, user: CurrentUser, users: Users) -> UserResponse:
    ensure_admin_or_self(user, user_id)
    return UserResponse.model_validate(await users.query_by_id(user_id))


@router.put("/{user_id}", response_model=UserResponse, summary="Update user")
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    user: CurrentUser,
    users: Users,
) -> UserResponse:
    """Partially update a user (admin or self). Only admins may change roles or verified."""
    ensure_admin_or_self(user, user_id)
    if not is_admin(user) and (data.roles is not None or data.verified is not None):
        raise AuthorizationFailureError()
    target = await users.query_by_id(user_id)
    updated = await users.update(
        target,
        email=data.email,
        roles=data.roles,
        password=data.password,
        verified=data.verified,
    )
    return UserResponse.model_validate(updated)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete user")
async def delete_user(user_id: UUID, user: CurrentUser, users: Users) -> Response:
    ensure_admin_or_self(user, user_id)
    await users.query_by_id(user_id)
    await users.delete(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
