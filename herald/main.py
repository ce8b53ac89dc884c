"""Herald HTTP API: app factory and ASGI entry point (``herald.main:app``)."""

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from slowapi.middleware import SlowAPIMiddleware

from herald.api.errors import ERROR_RESPONSES, register_exception_handlers
from herald.api.v1.router import api_router
from herald.core.config import settings
from herald.core.database import engine
from herald.core.logging_config import generate_request_id, request_id_var, setup_logging
from herald.core.rate_limit import limiter

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging on startup; release pooled connections on shutdown."""
    setup_logging(debug=settings.debug)
    logger.info(
        "api starting",
        extra={"version": settings.version, "environment": settings.environment},
    )
    yield
    await engine.dispose()
    logger.info("api stopped")


def init_sentry() -> None:
    """Report unhandled errors to Sentry when SENTRY_DSN is set."""
    if not settings.sentry_dsn:
        return
    import sentry_sdk

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=f"herald@{settings.version}",
        traces_sample_rate=0.1,
    )


async def request_id_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Tag the request's log lines with an id, reusing the caller's X-Request-ID."""
    rid = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
    request_id_var.set(rid)
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = rid
    return response


def create_app() -> FastAPI:
    init_sentry()

    docs_url = f"{settings.api_v1_prefix}/docs"
    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        openapi_url=f"{settings.api_v1_prefix}/openapi.json",
        docs_url=docs_url,
        redoc_url=f"{settings.api_v1_prefix}/redoc",
        lifespan=lifespan,
    )

    # /register and /login are limited per client IP
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
    )
    app.middleware("http")(request_id_middleware)

    # Error bodies are always {"error": "<message>"}
    app.include_router(api_router, prefix=settings.api_v1_prefix, responses=ERROR_RESPONSES)
    register_exception_handlers(app)

    @app.get("/docs", include_in_schema=False)
    async def docs_redirect() -> RedirectResponse:
        return RedirectResponse(url=docs_url)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, Any]:
        return {
            "name": settings.project_name,
            "version": settings.version,
            "docs": docs_url,
            "health": f"{settings.api_v1_prefix}/health",
        }

    return app


app = create_app()
