"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from dramacast.api.deps import CatalogStoreDep, ReleaseSchedulerDep
from dramacast.config import settings

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    catalog_store: str
    scheduler_running: bool


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    catalog_store: bool
    scheduler: bool


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint that verifies the API is running.",
)
def health_check(scheduler: ReleaseSchedulerDep) -> HealthResponse:
    """Basic health check - is the API up?"""
    from dramacast import __version__

    return HealthResponse(
        status="healthy",
        version=__version__,
        catalog_store=settings.catalog_store,
        scheduler_running=scheduler.is_running,
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Verifies the catalog store and the release scheduler.",
)
def readiness_check(store: CatalogStoreDep, scheduler: ReleaseSchedulerDep) -> ReadinessResponse:
    """Readiness check including the catalog store."""
    store_ok = store.health_check()
    scheduler_ok = scheduler.is_running or not settings.release_scheduler_enabled
    return ReadinessResponse(
        ready=store_ok and scheduler_ok,
        catalog_store=store_ok,
        scheduler=scheduler_ok,
    )


@router.get(
    "/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    description="Simple liveness probe for Kubernetes.",
)
def liveness_check() -> dict[str, str]:
    """Kubernetes liveness probe - is the process alive?"""
    return {"status": "alive"}
