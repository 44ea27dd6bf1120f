"""Per-client request rate limiting.

Every route is held to RATE_LIMIT_DEFAULT through the SlowAPI middleware. The
authentication routes share one stricter RATE_LIMIT_AUTH budget instead.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from config import (
    RATE_LIMIT_AUTH,
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_ENABLED,
    RATE_LIMIT_STORAGE_URI,
)

logger = logging.getLogger(__name__)

GENERAL_RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."
AUTH_RATE_LIMIT_MESSAGE = "Too many authentication attempts, please try again later."

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[RATE_LIMIT_DEFAULT],
    storage_uri=RATE_LIMIT_STORAGE_URI,
    enabled=RATE_LIMIT_ENABLED,
)

# Shared by every /auth endpoint, so attempts across them add up
auth_rate_limit = limiter.shared_limit(
    RATE_LIMIT_AUTH,
    scope="auth",
    error_message=AUTH_RATE_LIMIT_MESSAGE,
)


def handle_rate_limit_exceeded(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render a 429 as {"detail": message}."""
    message = exc.detail if exc.limit.error_message else GENERAL_RATE_LIMIT_MESSAGE
    logger.warning(
        "Rate limit exceeded by %s on %s %s",
        get_remote_address(request),
        request.method,
        request.url.path,
    )
    return JSONResponse(status_code=429, content={"detail": message})
