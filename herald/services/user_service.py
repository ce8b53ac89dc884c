"""User business rules: password hashing, authentication and transactional creation."""

import logging
import uuid
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime
from typing import Self

from sqlalchemy.ext.asyncio import AsyncConnection

from herald.core.security import hash_password, verify_password
from herald.models.user import Role, User
from herald.repositories.user import UserRepository
from herald.services.errors import AuthenticationFailureError

logger = logging.getLogger(__name__)

AfterCreate = Callable[[User], Awaitable[None]]


class UserService:
    """Owns the rules for user records."""

    def __init__(self, repo: UserRepository) -> None:
        self.repo = repo

    def bind(self, conn: AsyncConnection) -> Self:
        """Return a service whose repository joins ``conn``'s transaction."""
        return type(self)(self.repo.bind(conn))

    @staticmethod
    def _new_user(email: str, roles: Sequence[Role], password: str) -> User:
        now = datetime.now(UTC)
        return User(
            id=uuid.uuid4(),
            email=email,
            roles=list(roles),
            verified=False,
            hashed_password=hash_password(password),
            created_at=now,
            updated_at=now,
        )

    async def create_tx(
        self,
        email: str,
        roles: Sequence[Role],
        password: str,
        after_create: AfterCreate,
    ) -> User:
        """Insert a user and run ``after_create`` in the same transaction.

        The row is committed only if ``after_create`` succeeds; if it raises, the insert
        is rolled back and the error propagates.
        """
        user = self._new_user(email, roles, password)

        async def tx(conn: AsyncConnection) -> User:
            await self.repo.bind(conn).create(user)
            await after_create(user)
            return user

        created = await self.repo.within_tran(tx)
        logger.info("user created", extra={"user_id": str(created.id)})
        return created

    async def create(self, email: str, roles: Sequence[Role], password: str) -> User:
        user = self._new_user(email, roles, password)
        await self.repo.create(user)
        return user

    async def update(
        self,
        user: User,
        *,
        email: str | None = None,
        roles: Sequence[Role] | None = None,
        password: str | None = None,
        verified: bool | None = None,
    ) -> User:
        """Apply a partial update; fields left as None keep their value."""
        if email is not None:
            user.email = email
        if roles is not None:
            user.roles = list(roles)
        if password is not None:
            user.hashed_password = hash_password(password)
        if verified is not None:
            user.verified = verified
        user.updated_at = datetime.now(UTC)

        await self.repo.update(user)
        return user

    async def delete(self, user_id: uuid.UUID) -> None:
        await self.repo.delete(user_id)

    async def query(self, page_number: int, rows_per_page: int) -> list[User]:
        return await self.repo.query(page_number, rows_per_page)

    async def query_by_id(self, user_id: uuid.UUID) -> User:
        return await self.repo.query_by_id(user_id)

    async def query_by_email(self, email: str) -> User:
        return await self.repo.query_by_email(email)

    async def query_by_topic_id(self, topic_id: uuid.UUID) -> Sequence[User]:
        return await self.repo.query_by_topic_id(topic_id)

    async def authenticate(self, email: str, password: str) -> User:
        """Return the user owning ``email`` if ``password`` matches.

        Raises UserNotFoundError for an unknown email and AuthenticationFailureError
        for a wrong password.
        """
        user = await self.repo.query_by_email(email)
        if not verify_password(password, user.hashed_password):
            raise AuthenticationFailureError()
        return user
