"""Email verification: issuing and redeeming one-shot codes."""

import logging
import secrets
import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncConnection

from herald.core.security import random_string
from herald.models.user import User
from herald.models.verification import Verification
from herald.repositories.verification import VerificationRepository
from herald.services.errors import VerificationCodeMismatchError
from herald.services.user_service import UserService

logger = logging.getLogger(__name__)

CODE_LENGTH = 32


class VerificationService:
    def __init__(self, repo: VerificationRepository, users: UserService) -> None:
        self.repo = repo
        self.users = users

    async def create(
        self,
        user_id: uuid.UUID,
        email: str,
        ttl: timedelta = timedelta(minutes=15),
    ) -> Verification:
        """Issue a fresh unused code for ``email``, valid for ``ttl``."""
        now = datetime.now(UTC)
        verification = Verification(
            id=uuid.uuid4(),
            user_id=user_id,
            email=email,
            code=random_string(CODE_LENGTH),
            used=False,
            created_at=now,
            expired_at=now + ttl,
        )
        await self.repo.create(verification)
        return verification

    async def update(self, verification: Verification, *, used: bool) -> bool:
        """Set ``used`` if the verification is still redeemable; returns whether it was."""
        verification.used = used
        return await self.repo.update(verification, now=datetime.now(UTC))

    async def query_by_id(self, verification_id: uuid.UUID) -> Verification:
        return await self.repo.query_by_id(verification_id)

    async def verify(self, verification_id: uuid.UUID, code: str) -> User:
        """Redeem a code and mark its owner verified, all in one transaction.

        A verification that is already used or expired is left alone and the owner is
        returned unchanged. Raises VerificationNotFoundError for an unknown id and
        VerificationCodeMismatchError when ``code`` does not match.
        """

        async def tx(conn: AsyncConnection) -> User:
            verifications = self.repo.bind(conn)
            users = self.users.bind(conn)

            verification = await verifications.query_by_id(verification_id)
            if not secrets.compare_digest(verification.code.encode(), code.encode()):
                raise VerificationCodeMismatchError()

            verification.used = True
            redeemed = await verifications.update(verification, now=datetime.now(UTC))

            user = await users.query_by_email(verification.email)
            if not redeemed:
                logger.info(
                    "verification not redeemable",
                    extra={"verification_id": str(verification_id)},
                )
                return user
            return await users.update(user, verified=True)

        return await self.repo.within_tran(tx)
