"""Liveness, readiness and dependency health."""

import logging

from fastapi import APIRouter
from sqlalchemy import text

from herald.core.config import settings
from herald.core.deps import DB, Redis
from herald.schemas.common import HealthResponse, ProbeResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(db: DB, redis: Redis) -> HealthResponse:
    """Report whether the database and the task broker answer.

    A failed check marks the service unhealthy but still returns 200 with the reason.
    """
    checks: dict[str, str] = {}

    try:
        async with db.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        logger.warning("database health check failed", extra={"error": str(e)})
        checks["database"] = f"unhealthy: {e}"

    try:
        await redis.ping()
        checks["redis"] = "healthy"
    except Exception as e:
        logger.warning("broker health check failed", extra={"error": str(e)})
        checks["redis"] = f"unhealthy: {e}"

    healthy = all(value == "healthy" for value in checks.values())
    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=settings.version,
        environment=settings.environment,
        checks=checks,
    )


@router.get("/health/live", response_model=ProbeResponse)
async def liveness_check() -> ProbeResponse:
    """Liveness probe: the process is serving requests."""
    return ProbeResponse(status="alive")


@router.get("/health/ready", response_model=ProbeResponse)
async def readiness_check(db: DB) -> ProbeResponse:
    """Readiness probe: the database must answer."""
    async with db.connect() as conn:
        await conn.execute(text("SELECT 1"))
    return ProbeResponse(status="ready")
