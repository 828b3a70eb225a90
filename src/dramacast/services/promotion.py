"""Shared data-access and idempotency helpers for the release pipeline.

Every mutation here touches a single document. There are no multi-document
transactions, so each helper is written to be safe to repeat after a crash
between any two of its steps.
"""

import errno
from datetime import datetime
from typing import Any
from uuid import UUID

from dramacast.adapters.catalog.base import (
    ASCENDING,
    CatalogStore,
    DuplicateDocumentError,
    StorageExhaustedError,
)
from dramacast.domain.enums import Collection, ReleaseStatus
from dramacast.domain.models import (
    LiveEpisode,
    PendingEpisode,
    PendingSeries,
    TransferLogEntry,
)
from dramacast.logging import get_logger

logger = get_logger(__name__)


def is_storage_exhausted(exc: BaseException) -> bool:
    """True for out-of-space errors, which abort the whole batch."""
    if isinstance(exc, StorageExhaustedError):
        return True
    return isinstance(exc, OSError) and exc.errno == errno.ENOSPC


def due_filter(now: datetime) -> dict[str, Any]:
    """Records still awaiting release whose scheduled time has passed.

    ``$ne`` rather than equality so that legacy records without a status are
    picked up as well.
    """
    return {
        "status": {"$ne": ReleaseStatus.RELEASED.value},
        "scheduled_release_at": {"$lte": now},
    }


def not_released_filter(**equals: Any) -> dict[str, Any]:
    return {**equals, "status": {"$ne": ReleaseStatus.RELEASED.value}}


def mark_released_and_delete(store: CatalogStore, collection: Collection, id: UUID) -> None:
    """Move a pending record through ``released`` and remove it.

    A crash between the two writes leaves a ``released`` record behind, which
    the due queries exclude.
    """
    store.update_by_id(collection, id, {"status": ReleaseStatus.RELEASED.value})
    store.delete_by_id(collection, id)


def find_transfer_log(store: CatalogStore, pending_series_id: UUID) -> TransferLogEntry | None:
    doc = store.find_one(Collection.TRANSFER_LOGS, {"pending_series_id": pending_series_id})
    return TransferLogEntry.from_document(doc) if doc else None


def live_series_exists(store: CatalogStore, series_id: UUID) -> bool:
    return store.find_one(Collection.LIVE_SERIES, {"id": series_id}) is not None


def release_episode(store: CatalogStore, pending: PendingEpisode, series_id: UUID) -> UUID | None:
    """Materialize one pending episode under ``series_id``.

    If the live catalog already holds this (series, episode number) the pending
    record is just cleaned up; that happens when another path got there first.

    Returns:
        The new LiveEpisode id, or None if it already existed.
    """
    existing = store.find_one(
        Collection.LIVE_EPISODES,
        {"series_id": series_id, "episode_number": pending.episode_number},
    )

    created: UUID | None = None
    if existing is None:
        live = LiveEpisode.from_pending(pending, series_id)
        try:
            created = store.insert(Collection.LIVE_EPISODES, live.to_document())
        except DuplicateDocumentError:
            logger.info(
                "live_episode_insert_raced",
                pending_episode_id=str(pending.id),
                series_id=str(series_id),
                episode=pending.episode_number,
            )
    else:
        logger.info(
            "live_episode_already_exists",
            pending_episode_id=str(pending.id),
            live_episode_id=str(existing["id"]),
            series_id=str(series_id),
            episode=pending.episode_number,
        )

    mark_released_and_delete(store, Collection.PENDING_EPISODES, pending.id)
    return created


def find_upcoming_series(
    store: CatalogStore, now: datetime, limit: int = 10
) -> list[PendingSeries]:
    """Pending series scheduled after ``now``, soonest first."""
    docs = store.find(
        Collection.PENDING_SERIES,
        not_released_filter(scheduled_release_at={"$gt": now}),
        sort=[("scheduled_release_at", ASCENDING)],
        limit=limit,
    )
    return [PendingSeries.from_document(doc) for doc in docs]
