"""Topic persistence."""

import uuid

from herald.core.database import (
    NotFoundError,
    UniqueViolationError,
    named_exec,
    named_query_many,
    named_query_one,
)
from herald.models.topic import Topic
from herald.repositories.base import Repository, page_params
from herald.services.errors import TopicNotFoundError, UniqueTopicNameError


class TopicRepository(Repository):
    table = Topic.__table__

    async def create(self, topic: Topic) -> None:
        q = "INSERT INTO topics (id, name, created_at) VALUES (:id, :name, :created_at)"
        try:
            await named_exec(self.db, q, topic.to_dict(), types=self.types)
        except UniqueViolationError as err:
            raise UniqueTopicNameError() from err

    async def query(self, page_number: int, rows_per_page: int) -> list[Topic]:
        q = """
        SELECT id, name, created_at FROM topics
        ORDER BY created_at, id
        LIMIT :rows_per_page OFFSET :offset
        """
        params = page_params(page_number, rows_per_page)
        rows = await named_query_many(self.db, q, params, self.table)
        return [Topic.from_row(row) for row in rows]

    async def query_by_id(self, topic_id: uuid.UUID) -> Topic:
        q = "SELECT id, name, created_at FROM topics WHERE id = :id"
        try:
            row = await named_query_one(
                self.db, q, {"id": topic_id}, self.table, types=self.types
            )
        except NotFoundError as err:
            raise TopicNotFoundError() from err
        return Topic.from_row(row)
