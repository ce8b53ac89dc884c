"""Rate limiting configuration using slowapi."""

from slowapi import Limiter
from starlette.requests import Request


def client_ip(request: Request) -> str:
    """Extract the client IP, honouring the first X-Forwarded-For hop."""
    return (
        request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
        or (request.client.host if request.client else "127.0.0.1")
    )


limiter = Limiter(key_func=client_ip)

# Applied to the unauthenticated credential endpoints
AUTH_RATE_LIMIT = "10/minute"
