"""
Request rate limiting (slowapi).

Every API route gets RATE_LIMIT_PER_MINUTE through the slowapi middleware
registered in main.py. Auth endpoints declare tighter limits with
`@limiter.limit(...)` instead: login 5/min, register 3/min.

The middleware runs before any route dependency, so the key is taken from
the bearer token itself: a valid access token counts against its user,
anything else against the client IP. Storage is RATE_LIMIT_STORAGE_URI
(in-process memory by default).
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.core.config import settings
from app.core.exceptions import InvalidTokenError
from app.core.logging_config import logger
from app.core.security import decode_token

RETRY_AFTER_SECONDS = 60


def _token_subject(request: Request):
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    try:
        return decode_token(token, expected_type="access").get("sub")
    except InvalidTokenError:
        # Rejected later by the auth dependency; limited per IP until then
        return None


def rate_limit_key(request: Request) -> str:
    user_id = getattr(request.state, "user_id", None) or _token_subject(request)
    return f"user:{user_id}" if user_id else f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=rate_limit_key,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 in the API's error envelope, with Retry-After"""
    logger.warning(f"[RateLimit] {rate_limit_key(request)} exceeded {exc.detail} on {request.url.path}")
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": {
                "code": "RATE_LIMIT_EXCEEDED",
                "message": "Too many requests. Please slow down.",
                "details": {"limit": str(exc.detail), "retry_after_seconds": RETRY_AFTER_SECONDS},
            },
        },
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )
