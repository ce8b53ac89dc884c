"""Verification persistence."""

import uuid
from datetime import datetime

from herald.core.database import NotFoundError, named_exec, named_query_one
from herald.models.verification import Verification
from herald.repositories.base import Repository
from herald.services.errors import VerificationNotFoundError

_COLUMNS = "id, user_id, email, code, used, created_at, expired_at"


class VerificationRepository(Repository):
    table = Verification.__table__

    async def create(self, verification: Verification) -> None:
        q = f"""
        INSERT INTO verifications ({_COLUMNS})
        VALUES (:id, :user_id, :email, :code, :used, :created_at, :expired_at)
        """
        await named_exec(self.db, q, verification.to_dict(), types=self.types)

    async def update(self, verification: Verification, *, now: datetime) -> bool:
        """Persist ``used`` for a verification that is still redeemable.

        The WHERE clause only matches an unused, unexpired row carrying the same code,
        so at most one caller ever flips ``used``. Returns whether a row was updated.
        """
        q = """
        UPDATE verifications SET used = :used
        WHERE id = :id AND code = :code AND used = FALSE AND expired_at > :now
        """
        params = {
            "id": verification.id,
            "code": verification.code,
            "used": verification.used,
            "now": now,
        }
        types = self.types | {"now": self.table.c.expired_at.type}
        return await named_exec(self.db, q, params, types=types) == 1

    async def query_by_id(self, verification_id: uuid.UUID) -> Verification:
        q = f"SELECT {_COLUMNS} FROM verifications WHERE id = :id"
        try:
            row = await named_query_one(
                self.db, q, {"id": verification_id}, self.table, types=self.types
            )
        except NotFoundError as err:
            raise VerificationNotFoundError() from err
        return Verification.from_row(row)
