"""Main FastAPI application entry point."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse

from api.dependencies.services import (
    get_avatar_storage,
    get_cleanup_queue,
    get_session_manager,
)
from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes import router as api_router
from api.routes.health import router as health_router
from core.config import settings
from core.logging import setup_logging
from infrastructure.database.session import create_tables, get_engine

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup/shutdown tasks."""
    get_avatar_storage().directory.mkdir(parents=True, exist_ok=True)
    if settings.store_backend == "sql":
        await create_tables(get_engine())

    async def session_sweep_loop() -> None:
        """Periodically drop expired sessions so the store does not grow forever."""
        while True:
            await asyncio.sleep(settings.session_sweep_interval_seconds)
            try:
                removed = await get_session_manager().purge_expired()
                if removed > 0:
                    logger.info("session_sweep_completed", removed_count=removed)
            except Exception:
                logger.exception("session_sweep_failed")

    cleanup_queue = get_cleanup_queue()
    sweep_task = asyncio.create_task(session_sweep_loop())
    cleanup_task = asyncio.create_task(cleanup_queue.run())
    yield
    sweep_task.cancel()
    cleanup_task.cancel()
    with suppress(asyncio.CancelledError):
        await sweep_task
    with suppress(asyncio.CancelledError):
        await cleanup_task
    # Whatever is still queued gets one last attempt before exit
    await cleanup_queue.drain()
    if cleanup_queue.orphans:
        logger.warning("avatar_orphans_at_shutdown", references=cleanup_queue.orphans)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Session-authenticated profile service\n\n"
            "Log in with a username and password, then view and edit your own "
            "profile, including uploading or removing an avatar image.\n\n"
            "### Authentication\n"
            "`POST /api/login` sets an http-only `sid` cookie holding an opaque "
            "session token. Every other `/api` endpoint reads that cookie.\n\n"
            "### Avatars\n"
            "JPEG, PNG or WebP, at most 2 MiB, sent as the `avatar` field of the "
            "multipart `POST /api/update-profile` form."
        ),
        version="1.0.0",
        debug=settings.debug,
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "auth",
                "description": "Login, logout and session identity",
            },
            {
                "name": "profile",
                "description": "Profile and avatar updates",
            },
        ],
    )

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS; credentials are needed for the session cookie
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(api_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
