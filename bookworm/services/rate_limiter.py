"""
Rate Limiting Service

Request rate limiting with slowapi.

Limits:
=======
- rate_limit_default: read endpoints
- rate_limit_write: endpoints that change data

Counters live in rate_limit_storage_uri. The default memory:// keeps them
per process, which matches the single-instance deployment this service is
built for. Tests disable limiting with RATE_LIMIT_ENABLED=false.
"""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from bookworm.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


def get_client_ip(request: Request) -> str:
    """
    Identify the client for rate limiting.

    Honors X-Forwarded-For (first hop) and X-Real-IP set by a reverse
    proxy, then falls back to the socket address.
    """
    # X-Forwarded-For can contain multiple IPs; first is the client
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    # Check X-Real-IP header (nginx)
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    # Fall back to direct connection IP
    return get_remote_address(request)


def create_limiter() -> Limiter:
    """Build the application-wide limiter from settings."""
    limiter = Limiter(
        key_func=get_client_ip,
        default_limits=[settings.rate_limit_default],
        storage_uri=settings.rate_limit_storage_uri,
        strategy="fixed-window",  # Simple and predictable
        enabled=settings.rate_limit_enabled,
    )

    logger.info(
        f"Rate limiter initialized - enabled: {settings.rate_limit_enabled}, "
        f"default: {settings.rate_limit_default}, write: {settings.rate_limit_write}"
    )
    return limiter


# Create the limiter instance
limiter = create_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a Retry-After header when a client exceeds its limit."""
    limit_detail = str(exc.detail)

    response = JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": "Too many requests. Please slow down.",
            "detail": limit_detail,
        },
    )
    # Clients back off for a full window
    response.headers["Retry-After"] = "60"
    response.headers["X-RateLimit-Limit"] = limit_detail

    logger.warning(f"Rate limit exceeded for {get_client_ip(request)}: {limit_detail}")
    return response
