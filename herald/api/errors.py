"""Translate errors into ``{"error": "<message>"}`` responses."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from herald.schemas.common import ErrorResponse
from herald.services.errors import ErrorKind, HeraldError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNIQUE_VIOLATION: status.HTTP_403_FORBIDDEN,
    ErrorKind.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
}

# Documented on every API route
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    code: {"model": ErrorResponse}
    for code in (400, 401, 403, 404, 500)
}


def error_response(
    status_code: int, message: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def herald_error_handler(_request: Request, exc: HeraldError) -> JSONResponse:
    return error_response(STATUS_BY_KIND[exc.kind], exc.message)


async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body parse errors and field-rule violations are both 400."""
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return error_response(status.HTTP_400_BAD_REQUEST, "; ".join(messages) or "bad request")


async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def rate_limit_handler(_request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return error_response(status.HTTP_429_TOO_MANY_REQUESTS, f"rate limit exceeded: {exc.detail}")


async def unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions with a JSON 500."""
    logger.exception("Unhandled exception: %s", exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    # Handlers are typed on their concrete exception
    app.add_exception_handler(HeraldError, herald_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
