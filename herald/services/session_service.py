"""Login sessions mirroring refresh tokens."""

import uuid
from datetime import UTC, datetime

from herald.models.session import Session
from herald.repositories.session import SessionRepository


class SessionService:
    def __init__(self, repo: SessionRepository) -> None:
        self.repo = repo

    async def create(
        self,
        session_id: uuid.UUID,
        user_id: uuid.UUID,
        refresh_token: str,
        user_agent: str,
        client_ip: str,
        expires_at: datetime,
    ) -> Session:
        """Record a refresh token; ``session_id`` is the token's own id."""
        session = Session(
            id=session_id,
            user_id=user_id,
            refresh_token=refresh_token,
            user_agent=user_agent,
            client_ip=client_ip,
            is_blocked=False,
            expires_at=expires_at,
            created_at=datetime.now(UTC),
        )
        await self.repo.create(session)
        return session

    async def query_by_id(self, session_id: uuid.UUID) -> Session:
        return await self.repo.query_by_id(session_id)

    async def query_by_refresh_token(self, refresh_token: str) -> Session:
        return await self.repo.query_by_refresh_token(refresh_token)
