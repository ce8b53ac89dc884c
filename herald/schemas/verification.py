"""Verification schemas."""

from herald.schemas.common import BaseSchema


class VerifyResponse(BaseSchema):
    verified: bool
