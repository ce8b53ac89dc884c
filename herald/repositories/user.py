"""User persistence."""

import uuid
from collections.abc import Sequence

from herald.core.database import (
    NotFoundError,
    UniqueViolationError,
    column_types,
    named_exec,
    named_query_many,
    named_query_one,
)
from herald.models.subscription import Subscription
from herald.models.user import User
from herald.repositories.base import Repository, page_params
from herald.services.errors import UniqueEmailError, UserNotFoundError

_COLUMNS = "id, email, roles, verified, hashed_password, created_at, updated_at"


class UserRepository(Repository):
    table = User.__table__

    async def create(self, user: User) -> None:
        q = f"""
        INSERT INTO users ({_COLUMNS})
        VALUES (:id, :email, :roles, :verified, :hashed_password, :created_at, :updated_at)
        """
        try:
            await named_exec(self.db, q, user.to_dict(), types=self.types)
        except UniqueViolationError as err:
            raise UniqueEmailError() from err

    async def update(self, user: User) -> None:
        q = """
        UPDATE users
        SET email = :email, roles = :roles, verified = :verified,
            hashed_password = :hashed_password, updated_at = :updated_at
        WHERE id = :id
        """
        params = user.to_dict()
        params.pop("created_at")
        try:
            await named_exec(self.db, q, params, types=self.types)
        except UniqueViolationError as err:
            raise UniqueEmailError() from err

    async def delete(self, user_id: uuid.UUID) -> None:
        q = "DELETE FROM users WHERE id = :id"
        await named_exec(self.db, q, {"id": user_id}, types=self.types)

    async def query(self, page_number: int, rows_per_page: int) -> list[User]:
        q = f"""
        SELECT {_COLUMNS} FROM users
        ORDER BY created_at, id
        LIMIT :rows_per_page OFFSET :offset
        """
        params = page_params(page_number, rows_per_page)
        rows = await named_query_many(self.db, q, params, self.table)
        return [User.from_row(row) for row in rows]

    async def query_by_id(self, user_id: uuid.UUID) -> User:
        q = f"SELECT {_COLUMNS} FROM users WHERE id = :id"
        try:
            row = await named_query_one(
                self.db, q, {"id": user_id}, self.table, types=self.types
            )
        except NotFoundError as err:
            raise UserNotFoundError() from err
        return User.from_row(row)

    async def query_by_email(self, email: str) -> User:
        q = f"SELECT {_COLUMNS} FROM users WHERE email = :email"
        try:
            row = await named_query_one(
                self.db, q, {"email": email}, self.table, types=self.types
            )
        except NotFoundError as err:
            raise UserNotFoundError() from err
        return User.from_row(row)

    async def query_by_topic_id(self, topic_id: uuid.UUID) -> Sequence[User]:
        """Users subscribed to a topic."""
        q = """
        SELECT u.id, u.email, u.roles, u.verified, u.hashed_password, u.created_at, u.updated_at
        FROM users AS u
        JOIN subscriptions AS s ON s.user_id = u.id
        WHERE s.topic_id = :topic_id
        ORDER BY u.created_at, u.id
        """
        rows = await named_query_many(
            self.db,
            q,
            {"topic_id": topic_id},
            self.table,
            types=column_types(Subscription.__table__),
        )
        return [User.from_row(row) for row in rows]
