"""Session persistence."""

import uuid

from herald.core.database import NotFoundError, named_exec, named_query_one
from herald.models.session import Session
from herald.repositories.base import Repository
from herald.services.errors import SessionNotFoundError

_COLUMNS = "id, user_id, refresh_token, user_agent, client_ip, is_blocked, expires_at, created_at"


class SessionRepository(Repository):
    table = Session.__table__

    async def create(self, session: Session) -> None:
        q = f"""
        INSERT INTO sessions ({_COLUMNS})
        VALUES (:id, :user_id, :refresh_token, :user_agent, :client_ip, :is_blocked,
                :expires_at, :created_at)
        """
        await named_exec(self.db, q, session.to_dict(), types=self.types)

    async def query_by_id(self, session_id: uuid.UUID) -> Session:
        q = f"SELECT {_COLUMNS} FROM sessions WHERE id = :id"
        try:
            row = await named_query_one(
                self.db, q, {"id": session_id}, self.table, types=self.types
            )
        except NotFoundError as err:
            raise SessionNotFoundError() from err
        return Session.from_row(row)

    async def query_by_refresh_token(self, refresh_token: str) -> Session:
        q = f"SELECT {_COLUMNS} FROM sessions WHERE refresh_token = :refresh_token"
        try:
            row = await named_query_one(
                self.db, q, {"refresh_token": refresh_token}, self.table, types=self.types
            )
        except NotFoundError as err:
            raise SessionNotFoundError() from err
        return Session.from_row(row)
