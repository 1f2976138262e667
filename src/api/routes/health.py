"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Callable

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.dependencies.services import get_session_store, get_uow_factory
from core.config import settings
from core.exceptions import AppException
from domain.repositories.session_store import ISessionStore
from domain.repositories.unit_of_work import IUnitOfWork

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    environment: str
    store: str | None = None
    sessions: str | None = None


@router.get("/health", response_model=HealthResponse, summary="Basic health check")
async def health_check() -> HealthResponse:
    """
    Basic health check for load balancers.

    Returns service status without checking dependencies. Fast and lightweight.
    """
    return HealthResponse(
        status="healthy",
        version="1.0.0",
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=settings.app_env,
    )


@router.get(
    "/health/detailed",
    response_model=HealthResponse,
    summary="Detailed health check",
)
async def detailed_health_check(
    uow_factory: Callable[[], IUnitOfWork] = Depends(get_uow_factory),
    session_store: ISessionStore = Depends(get_session_store),
) -> HealthResponse:
    """
    Detailed health check including credential and session store access.

    Use for monitoring dashboards that need to verify all dependencies.
    """
    store_status = "unknown"
    try:
        async with uow_factory() as uow:
            await uow.users.list()
        store_status = "healthy"
    except AppException as e:
        store_status = f"unhealthy: {e.error_code.value}"

    sessions_status = "unknown"
    try:
        await session_store.get("health-probe-token-0000")
        sessions_status = "healthy"
    except AppException as e:
        sessions_status = f"unhealthy: {e.error_code.value}"

    healthy = store_status == "healthy" and sessions_status == "healthy"

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version="1.0.0",
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=settings.app_env,
        store=store_status,
        sessions=sessions_status,
    )
