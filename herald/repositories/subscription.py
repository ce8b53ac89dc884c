"""Subscription persistence."""

import uuid

from herald.core.database import (
    ForeignKeyViolationError,
    NotFoundError,
    UniqueViolationError,
    named_exec,
    named_query_many,
    named_query_one,
)
from herald.models.subscription import Subscription
from herald.repositories.base import Repository, page_params
from herald.services.errors import (
    SubscriptionNotFoundError,
    UniqueSubscriptionError,
    UserNotFoundError,
)

_COLUMNS = "id, topic_id, user_id, created_at"


class SubscriptionRepository(Repository):
    table = Subscription.__table__

    async def create(self, subscription: Subscription) -> None:
        q = f"INSERT INTO subscriptions ({_COLUMNS}) VALUES (:id, :topic_id, :user_id, :created_at)"
        try:
            await named_exec(self.db, q, subscription.to_dict(), types=self.types)
        except UniqueViolationError as err:
            raise UniqueSubscriptionError() from err
        except ForeignKeyViolationError as err:
            # The service checks the topic first, so the missing row is the user
            raise UserNotFoundError() from err

    async def delete(self, subscription_id: uuid.UUID) -> None:
        q = "DELETE FROM subscriptions WHERE id = :id"
        await named_exec(self.db, q, {"id": subscription_id}, types=self.types)

    async def query(self, page_number: int, rows_per_page: int) -> list[Subscription]:
        q = f"""
        SELECT {_COLUMNS} FROM subscriptions
        ORDER BY created_at, id
        LIMIT :rows_per_page OFFSET :offset
        """
        params = page_params(page_number, rows_per_page)
        rows = await named_query_many(self.db, q, params, self.table)
        return [Subscription.from_row(row) for row in rows]

    async def query_by_id(self, subscription_id: uuid.UUID) -> Subscription:
        q = f"SELECT {_COLUMNS} FROM subscriptions WHERE id = :id"
        try:
            row = await named_query_one(
                self.db, q, {"id": subscription_id}, self.table, types=self.types
            )
        except NotFoundError as err:
            raise SubscriptionNotFoundError() from err
        return Subscription.from_row(row)
