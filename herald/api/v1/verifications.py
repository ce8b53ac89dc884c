"""Email verification endpoint (the link mailed by the verification task)."""

from uuid import UUID

from fastapi import APIRouter, Query

from herald.core.deps import Verifications
from herald.schemas.verification import VerifyResponse

router = APIRouter(tags=["verification"])


@router.get("/verify", response_model=VerifyResponse, summary="Verify email")
async def verify_email(
    verifications: Verifications,
    id: UUID = Query(..., description="Verification ID"),  # noqa: A002
    code: str = Query(..., min_length=1, description="Verification code"),
) -> VerifyResponse:
    """Redeem a verification code.

    Redeeming an already used or expired code changes nothing and reports the owner's
    current state.
    """
    user = await verifications.verify(id, code)
    return VerifyResponse(verified=user.verified)
