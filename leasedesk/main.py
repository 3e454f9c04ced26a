"""FastAPI application entry point for LeaseDesk."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from leasedesk import __version__
from leasedesk.config import settings
from leasedesk.database import close_db, init_db
from leasedesk.services.auth import delete_expired_sessions, ensure_bootstrap_admin
from leasedesk.services.media_preview import MediaPreviewService, TTLCache
from leasedesk.services.rate_limit import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

SESSION_CLEANUP_INTERVAL_SECONDS = 3600

# Background cleanup task handle
_cleanup_task: asyncio.Task | None = None

# Rate limiter configuration
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"],
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["X-Permitted-Cross-Domain-Policies"] = "none"
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "img-src 'self' data: blob: https:; "
            "frame-ancestors 'none'; "
            "object-src 'none';"
        )

        # HTTPS enforcement header (browsers will upgrade to HTTPS)
        if settings.enforce_https:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


def init_app_state(app: FastAPI, http_client: httpx.AsyncClient) -> None:
    """Attach the per-process services routers read from ``app.state``."""
    media = settings.config.media
    activity = settings.config.activity

    app.state.http_client = http_client
    app.state.media_preview = MediaPreviewService(
        http_client,
        TTLCache(media.preview_cache_ttl_seconds, max_entries=media.preview_cache_max_entries),
        api_url=media.yandex_api_url,
    )
    app.state.activity_rate_limiter = SlidingWindowRateLimiter(
        max_events=activity.rate_limit_max_events,
        window_seconds=activity.rate_limit_window_seconds,
    )


async def _run_session_cleanup() -> None:
    """Background task that removes expired login sessions every hour."""
    while True:
        try:
            await asyncio.sleep(SESSION_CLEANUP_INTERVAL_SECONDS)
            removed = await delete_expired_sessions()
            if removed > 0:
                logger.info("Session cleanup: removed %d expired sessions", removed)
        except asyncio.CancelledError:
            logger.debug("Session cleanup task cancelled")
            break
        except Exception as e:
            logger.error("Session cleanup task error: %s", str(e))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    global _cleanup_task

    # Startup
    await init_db()

    admin = await ensure_bootstrap_admin()
    if admin:
        logger.info("Created bootstrap admin account: %s", admin.login)

    http_client = httpx.AsyncClient(timeout=settings.config.media.request_timeout_seconds)
    init_app_state(app, http_client)

    _cleanup_task = asyncio.create_task(_run_session_cleanup())

    yield

    # Shutdown
    if _cleanup_task:
        _cleanup_task.cancel()
        try:
            await _cleanup_task
        except asyncio.CancelledError:
            pass

    await http_client.aclose()
    await close_db()


app = FastAPI(
    title=settings.app_name,
    description="Vehicle lease inventory: spreadsheet imports and stock catalog",
    version=__version__,
    lifespan=lifespan,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Only allow origins from the whitelist; empty list means same-origin only
if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type"],
        max_age=600,
    )

app.add_middleware(SecurityHeadersMiddleware)


@app.get("/health", tags=["Health"])
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(
        content={
            "status": "healthy",
            "version": __version__,
            "app_name": settings.app_name,
        }
    )


# Import and include routers
from leasedesk.routers import activity, auth, catalog, import_router, media  # noqa: E402

app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(import_router.router, prefix="/api/imports", tags=["Imports"])
app.include_router(catalog.router, prefix="/api/catalog", tags=["Catalog"])
app.include_router(media.router, prefix="/api/media", tags=["Media"])
app.include_router(activity.router, prefix="/api/activity", tags=["Activity"])
