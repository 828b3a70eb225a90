"""Pytest configuration and fixtures."""

import os
from collections.abc import Callable, Generator
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app modules
os.environ["CATALOG_STORE"] = "memory"
os.environ["RELEASE_SCHEDULER_ENABLED"] = "false"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["LOG_LEVEL"] = "WARNING"

from dramacast.adapters.catalog.memory import InMemoryCatalogStore  # noqa: E402
from dramacast.domain.enums import Collection  # noqa: E402
from dramacast.domain.models import PendingEpisode, PendingSeries  # noqa: E402

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    """Fixed tick time."""
    return NOW


@pytest.fixture
def store() -> InMemoryCatalogStore:
    """Empty in-memory catalog store."""
    return InMemoryCatalogStore()


def build_pending_series(release_at: datetime, **overrides: Any) -> PendingSeries:
    """Pending series with sensible defaults (no future-date check)."""
    fields: dict[str, Any] = {
        "id": uuid4(),
        "title": "Midnight Contract",
        "description": "A CEO and a stuntwoman sign a fake marriage deal.",
        "episode_count": 60,
        "free_episode_count": 5,
        "categories": ["Romance"],
        "tags": ["ceo", "contract-marriage"],
        "image_ref": "covers/midnight-contract.jpg",
        "banner_ref": "banners/midnight-contract.jpg",
        "rating": 8.5,
        "scheduled_release_at": release_at,
    }
    fields.update(overrides)
    return PendingSeries(**fields)


def build_pending_episode(release_at: datetime, **overrides: Any) -> PendingEpisode:
    """Pending episode with sensible defaults (no future-date check)."""
    fields: dict[str, Any] = {
        "id": uuid4(),
        "episode_number": 1,
        "video_ref": "videos/ep1.m3u8",
        "thumbnail_ref": "thumbs/ep1.jpg",
        "title": "The Deal",
        "coin_cost": 10,
        "scheduled_release_at": release_at,
    }
    fields.update(overrides)
    return PendingEpisode(**fields)


@pytest.fixture
def add_pending_series(
    store: InMemoryCatalogStore, now: datetime
) -> Callable[..., PendingSeries]:
    """Insert a pending series released ``offset`` from now (negative = due)."""

    def _add(offset: timedelta = timedelta(seconds=-1), **overrides: Any) -> PendingSeries:
        series = build_pending_series(now + offset, **overrides)
        store.insert(Collection.PENDING_SERIES, series.to_document())
        return series

    return _add


@pytest.fixture
def add_pending_episode(
    store: InMemoryCatalogStore, now: datetime
) -> Callable[..., PendingEpisode]:
    """Insert a pending episode released ``offset`` from now (negative = due)."""

    def _add(offset: timedelta = timedelta(seconds=-1), **overrides: Any) -> PendingEpisode:
        episode = build_pending_episode(now + offset, **overrides)
        store.insert(Collection.PENDING_EPISODES, episode.to_document())
        return episode

    return _add


@pytest.fixture
def add_live_series(store: InMemoryCatalogStore) -> Callable[..., UUID]:
    """Insert a live series directly (as the CRUD endpoints would)."""

    def _add(**overrides: Any) -> UUID:
        doc: dict[str, Any] = {
            "id": uuid4(),
            "title": "Already Live",
            "description": "",
            "episode_count": 10,
            "free_episode_count": 2,
            "categories": ["Drama"],
            "tags": [],
            "image_ref": "covers/live.jpg",
            "banner_ref": "banners/live.jpg",
            "rating": 0.0,
            "view_count": 0,
            "pending_series_id": None,
        }
        doc.update(overrides)
        return store.insert(Collection.LIVE_SERIES, doc)

    return _add


@pytest.fixture
def test_client() -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app (fresh in-memory store per test)."""
    from dramacast.main import app

    with TestClient(app) as client:
        yield client
