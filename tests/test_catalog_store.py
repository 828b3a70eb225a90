"""Tests for the catalog store implementations."""

from datetime import timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dramacast.adapters.catalog.base import (
    ASCENDING,
    DESCENDING,
    CatalogStoreError,
    DuplicateDocumentError,
    StorageExhaustedError,
    matches,
)
from dramacast.adapters.catalog.memory import InMemoryCatalogStore
from dramacast.adapters.catalog.sql import SqlCatalogStore
from dramacast.db.models import Base
from dramacast.domain.enums import Collection


def sqlite_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture(params=["memory", "sql"])
def any_store(request):
    """Each store implementation, empty."""
    if request.param == "memory":
        return InMemoryCatalogStore()
    return SqlCatalogStore(session_factory=sqlite_session_factory())


def live_episode(series_id, episode_number=1, **overrides):
    doc = {
        "id": uuid4(),
        "series_id": series_id,
        "episode_number": episode_number,
        "video_ref": f"videos/ep{episode_number}.m3u8",
        "title": f"Episode {episode_number}",
        "coin_cost": 0,
        "views": 0,
        "coins_earned": 0,
        "thumbnail_ref": None,
    }
    doc.update(overrides)
    return doc


def transfer_log(at, **overrides):
    doc = {
        "id": uuid4(),
        "pending_series_id": uuid4(),
        "series_id": uuid4(),
        "title": "Logged",
        "scheduled_release_at": at,
        "transferred_at": at,
    }
    doc.update(overrides)
    return doc


class TestFilterMatching:
    """Document filter semantics."""

    def test_equality_and_null(self) -> None:
        doc = {"a": 1, "b": None}
        assert matches(doc, {"a": 1})
        assert not matches(doc, {"a": 2})
        assert matches(doc, {"b": None})
        assert matches(doc, {"missing": None})
        assert not matches(doc, {"a": None})

    def test_ne_matches_missing_field(self) -> None:
        """A record without the field is "not equal" to any value."""
        assert matches({}, {"status": {"$ne": "released"}})
        assert matches({"status": "pending"}, {"status": {"$ne": "released"}})
        assert not matches({"status": "released"}, {"status": {"$ne": "released"}})

    def test_comparisons_skip_missing_fields(self) -> None:
        assert matches({"n": 5}, {"n": {"$gte": 5, "$lt": 6}})
        assert not matches({"n": 5}, {"n": {"$gt": 5}})
        assert not matches({}, {"n": {"$lte": 10}})

    def test_exists(self) -> None:
        assert matches({"x": 0}, {"x": {"$exists": True}})
        assert matches({"x": None}, {"x": {"$exists": False}})
        assert not matches({"x": 0}, {"x": {"$exists": False}})

    def test_plain_dict_value_is_equality(self) -> None:
        assert matches({"meta": {"k": 1}}, {"meta": {"k": 1}})


class TestCatalogStoreContract:
    """Behaviour shared by every store."""

    def test_insert_and_find_one(self, any_store) -> None:
        series_id = uuid4()
        inserted = any_store.insert(Collection.LIVE_EPISODES, live_episode(series_id))

        found = any_store.find_one(Collection.LIVE_EPISODES, {"id": inserted})

        assert found is not None
        assert found["series_id"] == series_id
        assert found["episode_number"] == 1

    def test_insert_assigns_id(self, any_store) -> None:
        doc = live_episode(uuid4())
        del doc["id"]

        inserted = any_store.insert(Collection.LIVE_EPISODES, doc)

        assert inserted is not None
        assert any_store.count(Collection.LIVE_EPISODES) == 1

    def test_unique_live_episode(self, any_store) -> None:
        """(series_id, episode_number) is unique in the live catalog."""
        series_id = uuid4()
        any_store.insert(Collection.LIVE_EPISODES, live_episode(series_id, 1))

        with pytest.raises(DuplicateDocumentError):
            any_store.insert(Collection.LIVE_EPISODES, live_episode(series_id, 1))

        any_store.insert(Collection.LIVE_EPISODES, live_episode(series_id, 2))
        any_store.insert(Collection.LIVE_EPISODES, live_episode(uuid4(), 1))
        assert any_store.count(Collection.LIVE_EPISODES) == 3

    def test_duplicate_error_is_store_error(self) -> None:
        assert issubclass(DuplicateDocumentError, CatalogStoreError)
        assert issubclass(StorageExhaustedError, CatalogStoreError)

    def test_update_and_delete(self, any_store) -> None:
        inserted = any_store.insert(Collection.LIVE_EPISODES, live_episode(uuid4()))

        assert any_store.update_by_id(Collection.LIVE_EPISODES, inserted, {"views": 42})
        assert any_store.find_one(Collection.LIVE_EPISODES, {"id": inserted})["views"] == 42

        assert any_store.delete_by_id(Collection.LIVE_EPISODES, inserted)
        assert not any_store.delete_by_id(Collection.LIVE_EPISODES, inserted)
        assert not any_store.update_by_id(Collection.LIVE_EPISODES, inserted, {"views": 1})
        assert any_store.find_one(Collection.LIVE_EPISODES, {"id": inserted}) is None

    def test_sort_skip_limit(self, any_store, now) -> None:
        for hours in (3, 1, 2):
            any_store.insert(
                Collection.TRANSFER_LOGS,
                transfer_log(now - timedelta(hours=hours), title=f"{hours}h"),
            )

        newest_first = any_store.find(
            Collection.TRANSFER_LOGS, sort=[("transferred_at", DESCENDING)]
        )
        oldest_first = any_store.find(
            Collection.TRANSFER_LOGS, sort=[("transferred_at", ASCENDING)], skip=1, limit=1
        )

        assert [doc["title"] for doc in newest_first] == ["1h", "2h", "3h"]
        assert [doc["title"] for doc in oldest_first] == ["2h"]

    def test_range_filter(self, any_store, now) -> None:
        for hours in (-2, -1, 1):
            any_store.insert(
                Collection.TRANSFER_LOGS,
                transfer_log(now + timedelta(hours=hours), title=f"{hours}"),
            )

        due = any_store.find(
            Collection.TRANSFER_LOGS,
            {"transferred_at": {"$lte": now}},
            sort=[("transferred_at", ASCENDING)],
        )

        assert [doc["title"] for doc in due] == ["-2", "-1"]
        assert any_store.count(Collection.TRANSFER_LOGS, {"transferred_at": {"$gt": now}}) == 1

    def test_ne_includes_null_status(self, any_store, now) -> None:
        """Records without a status are still found by ``$ne released``."""
        legacy_id, pending_id = uuid4(), uuid4()
        for doc_id, status in ((legacy_id, None), (pending_id, "pending"), (uuid4(), "released")):
            any_store.insert(
                Collection.PENDING_EPISODES,
                {
                    "id": doc_id,
                    "series_id": uuid4(),
                    "episode_number": 1,
                    "video_ref": "videos/legacy.m3u8",
                    "scheduled_release_at": now,
                    "status": status,
                },
            )

        found = any_store.find(Collection.PENDING_EPISODES, {"status": {"$ne": "released"}})

        assert {d["id"] for d in found} == {legacy_id, pending_id}

    def test_null_equality(self, any_store) -> None:
        any_store.insert(Collection.LIVE_EPISODES, live_episode(uuid4(), thumbnail_ref=None))
        any_store.insert(
            Collection.LIVE_EPISODES, live_episode(uuid4(), thumbnail_ref="thumbs/1.jpg")
        )

        assert any_store.count(Collection.LIVE_EPISODES, {"thumbnail_ref": None}) == 1
        assert (
            any_store.count(Collection.LIVE_EPISODES, {"thumbnail_ref": {"$exists": True}}) == 1
        )

    def test_health_check(self, any_store) -> None:
        assert any_store.health_check() is True


class TestInMemoryStore:
    """In-memory specifics."""

    def test_returns_copies(self) -> None:
        store = InMemoryCatalogStore()
        inserted = store.insert(Collection.LIVE_EPISODES, live_episode(uuid4()))

        found = store.find_one(Collection.LIVE_EPISODES, {"id": inserted})
        found["views"] = 999

        assert store.find_one(Collection.LIVE_EPISODES, {"id": inserted})["views"] == 0

    def test_unique_key_ignored_while_null(self) -> None:
        """Pending episodes attached to a live series may share episode numbers."""
        store = InMemoryCatalogStore()
        for _ in range(2):
            store.insert(
                Collection.PENDING_EPISODES,
                {"id": uuid4(), "pending_series_id": None, "episode_number": 1},
            )
        assert store.count(Collection.PENDING_EPISODES) == 2

    def test_update_cannot_break_unique_key(self) -> None:
        store = InMemoryCatalogStore()
        series_id = uuid4()
        store.insert(Collection.LIVE_EPISODES, live_episode(series_id, 1))
        second = store.insert(Collection.LIVE_EPISODES, live_episode(series_id, 2))

        with pytest.raises(DuplicateDocumentError):
            store.update_by_id(Collection.LIVE_EPISODES, second, {"episode_number": 1})


class TestSqlErrorMapping:
    """Driver errors surface as catalog store errors."""

    @staticmethod
    def failing_store(error):
        session = MagicMock()
        session.commit.side_effect = error
        return SqlCatalogStore(session_factory=lambda: session), session

    def test_disk_full_is_storage_exhausted(self) -> None:
        store, session = self.failing_store(
            OperationalError("INSERT", {}, Exception("database or disk is full"))
        )

        with pytest.raises(StorageExhaustedError):
            store.insert(Collection.LIVE_EPISODES, live_episode(uuid4()))
        session.rollback.assert_called_once()
        session.close.assert_called_once()

    def test_enospc_is_storage_exhausted(self) -> None:
        store, _ = self.failing_store(OSError(28, "No space left on device"))

        with pytest.raises(StorageExhaustedError):
            store.insert(Collection.LIVE_EPISODES, live_episode(uuid4()))

    def test_other_operational_error(self) -> None:
        store, _ = self.failing_store(
            OperationalError("INSERT", {}, Exception("connection refused"))
        )

        with pytest.raises(CatalogStoreError) as exc_info:
            store.insert(Collection.LIVE_EPISODES, live_episode(uuid4()))
        assert not isinstance(exc_info.value, StorageExhaustedError)

    def test_non_unique_integrity_error(self) -> None:
        store, _ = self.failing_store(
            IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: x"))
        )

        with pytest.raises(CatalogStoreError) as exc_info:
            store.insert(Collection.LIVE_EPISODES, live_episode(uuid4()))
        assert not isinstance(exc_info.value, DuplicateDocumentError)
