"""
StudioTrack - HTTP Middleware

RequestLoggingMiddleware: X-Request-ID / X-Response-Time headers, one log
line per request, logging context (request id, project id) for everything
logged while the request runs.

SecurityHeadersMiddleware: static hardening headers.
"""

import re
import time
from typing import Callable, FrozenSet

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.logging_config import (
    logger,
    set_request_id,
    set_user_id,
    set_project_id,
    generate_request_id,
)


# Probes and docs are hit constantly; don't log them
SKIP_LOGGING_PATHS: FrozenSet[str] = frozenset({
    "/health",
    "/",
    "/favicon.ico",
    "/docs",
    "/redoc",
    "/openapi.json",
})

SLOW_REQUEST_MS = 1000

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

_PROJECT_PATH = re.compile(r"/projects/([^/]+)")


def should_skip_logging(path: str) -> bool:
    return path in SKIP_LOGGING_PATHS


def extract_project_id(path: str) -> str:
    """Project id from /projects/<id>/... paths, '' otherwise"""
    match = _PROJECT_PATH.search(path)
    return match.group(1) if match else ""


def _status_level(status_code: int) -> str:
    if status_code >= 500:
        return "error"
    if status_code >= 400:
        return "warning"
    return "info"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Request id propagation, timing and access logging"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        path = request.url.path
        set_request_id(request_id)
        set_project_id(extract_project_id(path))

        quiet = should_skip_logging(path)
        started = time.perf_counter()

        def elapsed_ms() -> float:
            return (time.perf_counter() - started) * 1000

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"✗ {request.method} {path} - {type(exc).__name__} ({elapsed_ms():.2f}ms)",
                exc_info=True,
                extra={"event_type": "http_request_error", "http_method": request.method, "http_path": path},
            )
            raise
        else:
            duration_ms = elapsed_ms()
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

            if not quiet:
                getattr(logger, _status_level(response.status_code))(
                    f"{request.method} {path} - {response.status_code} ({duration_ms:.2f}ms)",
                    extra={
                        "event_type": "http_request",
                        "http_method": request.method,
                        "http_path": path,
                        "http_status": response.status_code,
                        "duration_ms": duration_ms,
                        "client_ip": request.client.host if request.client else "unknown",
                    }
                )
                if duration_ms > SLOW_REQUEST_MS:
                    logger.warning(f"Slow request: {request.method} {path} took {duration_ms:.2f}ms")

            return response
        finally:
            set_request_id("")
            set_user_id("")
            set_project_id("")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        return response


__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "should_skip_logging",
    "extract_project_id",
    "SKIP_LOGGING_PATHS",
]
