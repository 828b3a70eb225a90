"""Catalog store adapters."""

from dramacast.adapters.catalog.base import (
    ASCENDING,
    DESCENDING,
    CatalogStore,
    CatalogStoreError,
    DuplicateDocumentError,
    StorageExhaustedError,
)
from dramacast.adapters.catalog.memory import InMemoryCatalogStore
from dramacast.config import settings


def get_catalog_store() -> CatalogStore:
    """Get the catalog store configured by ``settings.catalog_store``."""
    if settings.catalog_store == "memory":
        return InMemoryCatalogStore()

    from dramacast.adapters.catalog.sql import SqlCatalogStore

    return SqlCatalogStore()


__all__ = [
    "ASCENDING",
    "DESCENDING",
    "CatalogStore",
    "CatalogStoreError",
    "DuplicateDocumentError",
    "InMemoryCatalogStore",
    "StorageExhaustedError",
    "get_catalog_store",
]
