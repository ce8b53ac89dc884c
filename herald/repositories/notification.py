"""Notification persistence."""

import uuid
from typing import Any

from herald.core.database import NotFoundError, named_exec, named_query_many, named_query_one
from herald.models.notification import Notification
from herald.repositories.base import Repository, page_params
from herald.services.errors import NotificationNotFoundError

_COLUMNS = "id, topic_id, message, created_at"


class NotificationRepository(Repository):
    table = Notification.__table__

    async def create(self, notification: Notification) -> None:
        q = f"INSERT INTO notifications ({_COLUMNS}) VALUES (:id, :topic_id, :message, :created_at)"
        await named_exec(self.db, q, notification.to_dict(), types=self.types)

    async def delete(self, notification_id: uuid.UUID) -> None:
        q = "DELETE FROM notifications WHERE id = :id"
        await named_exec(self.db, q, {"id": notification_id}, types=self.types)

    async def query(
        self,
        page_number: int,
        rows_per_page: int,
        topic_id: uuid.UUID | None = None,
    ) -> list[Notification]:
        """Page through notifications, optionally restricted to one topic."""
        params: dict[str, Any] = page_params(page_number, rows_per_page)
        where = ""
        if topic_id is not None:
            where = "WHERE topic_id = :topic_id"
            params["topic_id"] = topic_id
        q = f"""
        SELECT {_COLUMNS} FROM notifications
        {where}
        ORDER BY created_at, id
        LIMIT :rows_per_page OFFSET :offset
        """
        rows = await named_query_many(self.db, q, params, self.table, types=self.types)
        return [Notification.from_row(row) for row in rows]

    async def query_by_id(self, notification_id: uuid.UUID) -> Notification:
        q = f"SELECT {_COLUMNS} FROM notifications WHERE id = :id"
        try:
            row = await named_query_one(
                self.db, q, {"id": notification_id}, self.table, types=self.types
            )
        except NotFoundError as err:
            raise NotificationNotFoundError() from err
        return Notification.from_row(row)
