"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dramacast import __version__
from dramacast.adapters.catalog import get_catalog_store
from dramacast.api.routes import health, releases, transfer_logs
from dramacast.config import settings
from dramacast.logging import get_logger, setup_logging
from dramacast.services.alerting import AlertingService
from dramacast.services.scheduler import ReleaseScheduler

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the catalog store and the release scheduler; run the scheduler if enabled."""
    logger.info("application_starting", version=__version__)

    store = get_catalog_store()
    if not store.health_check():
        # Don't raise - let readiness checks report the issue
        logger.error("catalog_store_unavailable", backend=settings.catalog_store)

    scheduler = ReleaseScheduler(
        store=store,
        interval_seconds=settings.release_interval_seconds,
        alerting=AlertingService(),
    )
    app.state.catalog_store = store
    app.state.release_scheduler = scheduler

    if settings.release_scheduler_enabled:
        scheduler.start(run_immediately=settings.release_run_on_startup)

    yield

    logger.info("application_shutting_down")
    scheduler.stop(timeout=settings.release_interval_seconds)


# Create FastAPI app
app = FastAPI(
    title="dramacast",
    description="Scheduled release pipeline for the short-drama catalog",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health.router)
app.include_router(releases.router, prefix="/api/v1")
app.include_router(transfer_logs.router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Root endpoint redirect to docs."""
    return {
        "name": "dramacast",
        "version": __version__,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "dramacast.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
