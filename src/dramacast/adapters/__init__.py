"""Adapters for external services."""

from dramacast.adapters.catalog.base import CatalogStore

__all__ = ["CatalogStore"]
