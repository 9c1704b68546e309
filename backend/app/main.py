from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIASGIMiddleware

from app.api.v1.router import api_router
from app.core.config import settings
from app.core.database import close_db, init_db
from app.core.exceptions import StudioTrackError, error_response
from app.core.logging_config import logger
from app.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from app.core.rate_limiter import limiter, rate_limit_exceeded_handler

APP_VERSION = "1.0.0"

PLACEHOLDER_SECRETS = {"", "CHANGE_ME"}


def config_problems() -> List[str]:
    """Settings the API cannot run without"""
    problems = []
    if not settings.DATABASE_URL:
        problems.append("DATABASE_URL is not set")
    for name in ("SECRET_KEY", "JWT_SECRET_KEY"):
        if getattr(settings, name) in PLACEHOLDER_SECRETS:
            problems.append(f"{name} is not set or using default value")
    return problems


async def validate_critical_config() -> bool:
    """Fail fast on missing secrets; warn about settings unfit for production"""
    problems = config_problems()
    if problems:
        for problem in problems:
            logger.critical(f"[Startup] CRITICAL: {problem}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(problems)}")

    if not settings.RATE_LIMIT_ENABLED:
        logger.warning("[Startup] RATE_LIMIT_ENABLED is false - login brute force protection is off")
    if settings.ENVIRONMENT == "production" and settings.DATABASE_URL.startswith("sqlite"):
        logger.warning("[Startup] SQLite database in production")

    logger.info("[Startup] Critical configuration validated")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} {APP_VERSION} ({settings.ENVIRONMENT}, API {settings.API_VERSION})")
    await validate_critical_config()
    await init_db()
    logger.info("[Startup] Database tables ready")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="Project tracking for interior design studios: phases, tasks, revisions and materials",
    version=APP_VERSION,
    lifespan=lifespan,
    redirect_slashes=False  # 307s on /projects/ break CORS preflights
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Last added runs first: CORS -> security headers -> request logging -> rate limits
app.add_middleware(SlowAPIASGIMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


@app.exception_handler(StudioTrackError)
async def studiotrack_exception_handler(request: Request, exc: StudioTrackError):
    route = f"{request.method} {request.url.path}"
    if exc.http_status >= 500:
        logger.log_error_with_context(exc, context=route)
    else:
        logger.info(f"[API] {route} -> {exc.http_status} {exc.code}")
    return JSONResponse(status_code=exc.http_status, content=error_response(exc))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {
                "code": "INTERNAL_ERROR",
                "message": str(exc) if settings.DEBUG else "An error occurred",
                "details": {},
            },
        },
    )


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": APP_VERSION,
        "docs": "/docs",
        "health": "/health",
    }


app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host=settings.SERVER_HOST, port=settings.SERVER_PORT, reload=settings.DEBUG)
