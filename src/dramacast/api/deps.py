"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, Request

from dramacast.adapters.catalog.base import CatalogStore
from dramacast.services.scheduler import ReleaseScheduler


def get_catalog_store(request: Request) -> CatalogStore:
    """Get the catalog store built at application startup."""
    return request.app.state.catalog_store


def get_release_scheduler(request: Request) -> ReleaseScheduler:
    """Get the release scheduler built at application startup."""
    return request.app.state.release_scheduler


CatalogStoreDep = Annotated[CatalogStore, Depends(get_catalog_store)]
ReleaseSchedulerDep = Annotated[ReleaseScheduler, Depends(get_release_scheduler)]
