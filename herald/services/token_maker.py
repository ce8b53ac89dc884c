"""Symmetric bearer tokens.

Tokens are Fernet envelopes (AES-128-CBC + HMAC-SHA256) around a JSON payload. The
32-byte ``TOKEN_SYMMETRIC_KEY`` is used directly as the Fernet key material.
"""

import base64
import json
import uuid
from datetime import UTC, datetime, timedelta

from cryptography.fernet import Fernet, InvalidToken
from pydantic import BaseModel, ValidationError

from herald.models.user import Role


class InvalidTokenError(Exception):
    def __init__(self) -> None:
        super().__init__("token is invalid")


class ExpiredTokenError(Exception):
    def __init__(self) -> None:
        super().__init__("token has expired")


class Payload(BaseModel):
    """Claims carried by a token."""

    id: uuid.UUID
    user_id: uuid.UUID
    roles: list[Role]
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def new(cls, user_id: uuid.UUID, roles: list[Role], duration: timedelta) -> "Payload":
        now = datetime.now(UTC)
        return cls(
            id=uuid.uuid4(),
            user_id=user_id,
            roles=list(roles),
            issued_at=now,
            expires_at=now + duration,
        )

    def valid(self) -> None:
        if datetime.now(UTC) > self.expires_at:
            raise ExpiredTokenError()


class TokenMaker:
    """Issues and verifies tokens with a symmetric key."""

    def __init__(self, symmetric_key: str) -> None:
        key = symmetric_key.encode()
        if len(key) != 32:
            msg = f"invalid key size: must be exactly 32 characters, got {len(key)}"
            raise ValueError(msg)
        self._fernet = Fernet(base64.urlsafe_b64encode(key))

    def create_token(
        self,
        user_id: uuid.UUID,
        roles: list[Role],
        duration: timedelta,
    ) -> tuple[str, Payload]:
        """Create a token for ``user_id`` valid for ``duration``."""
        payload = Payload.new(user_id, roles, duration)
        token = self._fernet.encrypt(payload.model_dump_json().encode())
        return token.decode(), payload

    def verify_token(self, token: str) -> Payload:
        """Decrypt ``token`` and check that it has not expired.

        Raises InvalidTokenError when the token cannot be decrypted or parsed, and
        ExpiredTokenError when it is past ``expires_at``.
        """
        try:
            raw = self._fernet.decrypt(token.encode())
            payload = Payload.model_validate(json.loads(raw))
        except (InvalidToken, ValueError, ValidationError) as err:
            raise InvalidTokenError() from err
        payload.valid()
        return payload
