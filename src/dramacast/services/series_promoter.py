"""Series Promoter: moves due coming soon series into the live catalog."""

from datetime import datetime
from uuid import UUID

from dramacast.adapters.catalog.base import ASCENDING, CatalogStore, DuplicateDocumentError
from dramacast.domain.enums import Collection
from dramacast.domain.models import (
    LiveSeries,
    PendingEpisode,
    PendingSeries,
    PromotionFailure,
    SeriesPromotionResult,
    TransferLogEntry,
    utc_now,
)
from dramacast.logging import get_logger
from dramacast.services.promotion import (
    due_filter,
    find_transfer_log,
    find_upcoming_series,
    is_storage_exhausted,
    mark_released_and_delete,
    not_released_filter,
    release_episode,
)

logger = get_logger(__name__)


class SeriesPromoter:
    """Promotes due PendingSeries records to LiveSeries.

    For each due series, in order:

    1. Create the LiveSeries, or reuse the one a crashed earlier run created.
    2. Point every pending episode of the series at the new live id.
    3. Append a TransferLog entry (once).
    4. Release all of the series' pending episodes, whatever their own
       schedule says; an episode ships when its series does.
    5. Mark the pending series released and delete it, once every one of its
       episodes has shipped. Otherwise it stays pending and the next tick
       resumes it.

    Steps are ordered so that re-running after a crash at any point finishes the
    job without duplicating anything.
    """

    def __init__(self, store: CatalogStore) -> None:
        self.store = store

    def promote_due_series(self, now: datetime) -> SeriesPromotionResult:
        """Promote every pending series whose release time is at or before ``now``.

        Args:
            now: The tick time.

        Returns:
            Promoted live series ids, per-series failures, the episodes released
            alongside their series and those that failed, and whether the batch
            was aborted because storage ran out. A series with a failed episode
            is reported as failed and stays pending.
        """
        result = SeriesPromotionResult()

        due = self.store.find(
            Collection.PENDING_SERIES,
            due_filter(now),
            sort=[("scheduled_release_at", ASCENDING)],
        )
        if not due:
            self._log_next_release(now)
            return result

        logger.info("series_release_batch_found", count=len(due))

        for doc in due:
            pending = PendingSeries.from_document(doc)
            if not pending.status.is_promotable:
                # Crash window between mark and delete; already processed
                logger.info("series_already_released", pending_series_id=str(pending.id))
                continue

            try:
                live_id, episode_ids, episode_failures = self._promote(pending)
            except Exception as e:
                result.failed.append(PromotionFailure(id=pending.id, error=str(e)))
                if is_storage_exhausted(e):
                    logger.critical(
                        "series_release_storage_exhausted",
                        pending_series_id=str(pending.id),
                        title=pending.title,
                        error=str(e),
                        remaining=len(due) - len(result.promoted) - len(result.failed),
                    )
                    result.aborted = True
                    break
                logger.error(
                    "series_release_failed",
                    pending_series_id=str(pending.id),
                    title=pending.title,
                    error=str(e),
                )
                continue

            result.episodes_promoted.extend(episode_ids)
            result.episodes_failed.extend(episode_failures)
            if episode_failures:
                result.failed.append(
                    PromotionFailure(
                        id=pending.id,
                        error=f"{len(episode_failures)} episode(s) failed to release",
                    )
                )
                continue
            result.promoted.append(live_id)

        logger.info(
            "series_release_batch_completed",
            promoted=len(result.promoted),
            failed=len(result.failed),
            episodes_promoted=len(result.episodes_promoted),
            episodes_failed=len(result.episodes_failed),
            aborted=result.aborted,
        )
        return result

    def _promote(
        self, pending: PendingSeries
    ) -> tuple[UUID, list[UUID], list[PromotionFailure]]:
        live_id = self._materialize(pending)
        relinked = self._relink_episodes(pending.id, live_id)
        self._append_transfer_log(pending, live_id)

        episode_ids, episode_failures = self._release_series_episodes(pending, live_id)
        if episode_failures:
            logger.warning(
                "series_release_incomplete",
                pending_series_id=str(pending.id),
                series_id=str(live_id),
                title=pending.title,
                episodes_released=len(episode_ids),
                episodes_failed=len(episode_failures),
            )
            return live_id, episode_ids, episode_failures

        mark_released_and_delete(self.store, Collection.PENDING_SERIES, pending.id)
        logger.info(
            "series_released",
            pending_series_id=str(pending.id),
            series_id=str(live_id),
            title=pending.title,
            relinked_episodes=relinked,
            episodes_released=len(episode_ids),
        )
        return live_id, episode_ids, []

    def _materialize(self, pending: PendingSeries) -> UUID:
        """Create the LiveSeries for ``pending`` unless it already exists."""
        origin = {"pending_series_id": pending.id}
        existing = self.store.find_one(Collection.LIVE_SERIES, origin)
        if existing is not None:
            logger.info(
                "live_series_resumed",
                pending_series_id=str(pending.id),
                series_id=str(existing["id"]),
            )
            return existing["id"]

        live = LiveSeries.from_pending(pending)
        try:
            return self.store.insert(Collection.LIVE_SERIES, live.to_document())
        except DuplicateDocumentError:
            existing = self.store.find_one(Collection.LIVE_SERIES, origin)
            if existing is None:
                raise
            return existing["id"]

    def _relink_episodes(self, pending_series_id: UUID, live_id: UUID) -> int:
        """Resolve the dangling parent reference of episodes waiting on this series."""
        waiting = self.store.find(
            Collection.PENDING_EPISODES, {"pending_series_id": pending_series_id}
        )
        relinked = 0
        for doc in waiting:
            if doc.get("series_id") == live_id:
                continue
            self.store.update_by_id(Collection.PENDING_EPISODES, doc["id"], {"series_id": live_id})
            relinked += 1
        return relinked

    def _append_transfer_log(self, pending: PendingSeries, live_id: UUID) -> None:
        if find_transfer_log(self.store, pending.id) is not None:
            return
        entry = TransferLogEntry.record(pending, live_id, transferred_at=utc_now())
        self.store.insert(Collection.TRANSFER_LOGS, entry.to_document())

    def _release_series_episodes(
        self, pending: PendingSeries, live_id: UUID
    ) -> tuple[list[UUID], list[PromotionFailure]]:
        """Release every pending episode of the series, due or not.

        Storage exhaustion propagates so the whole batch stops. Any other error
        is returned as a failure and the episode stays pending.
        """
        docs = self.store.find(
            Collection.PENDING_EPISODES, not_released_filter(series_id=live_id)
        ) + self.store.find(
            Collection.PENDING_EPISODES, not_released_filter(pending_series_id=pending.id)
        )
        episodes = {doc["id"]: PendingEpisode.from_document(doc) for doc in docs}
        if not episodes:
            return [], []

        logger.info(
            "series_episodes_release_started",
            series_id=str(live_id),
            title=pending.title,
            count=len(episodes),
        )

        released: list[UUID] = []
        failures: list[PromotionFailure] = []
        for episode in sorted(episodes.values(), key=lambda e: e.episode_number):
            try:
                created = release_episode(self.store, episode, live_id)
            except Exception as e:
                if is_storage_exhausted(e):
                    raise
                logger.error(
                    "series_episode_release_failed",
                    pending_episode_id=str(episode.id),
                    series_id=str(live_id),
                    episode=episode.episode_number,
                    error=str(e),
                )
                failures.append(PromotionFailure(id=episode.id, error=str(e)))
                continue
            if created is not None:
                released.append(created)
        return released, failures

    def _log_next_release(self, now: datetime) -> None:
        upcoming = find_upcoming_series(self.store, now, limit=1)
        if not upcoming:
            return
        next_series = upcoming[0]
        release_at = next_series.scheduled_release_at
        if release_at.tzinfo is None:
            release_at = release_at.replace(tzinfo=now.tzinfo)
        remaining = release_at - now
        partial_day = 1 if remaining.seconds or remaining.microseconds else 0
        logger.info(
            "series_release_none_due",
            next_title=next_series.title,
            next_release_at=release_at.isoformat(),
            days_remaining=remaining.days + partial_day,
        )
