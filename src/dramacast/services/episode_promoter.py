"""Episode Promoter: moves due coming soon episodes into the live catalog."""

from datetime import datetime
from uuid import UUID

from dramacast.adapters.catalog.base import ASCENDING, CatalogStore
from dramacast.domain.enums import Collection
from dramacast.domain.models import EpisodePromotionResult, PendingEpisode, PromotionFailure
from dramacast.logging import get_logger
from dramacast.services.promotion import (
    due_filter,
    find_transfer_log,
    is_storage_exhausted,
    live_series_exists,
    release_episode,
)

logger = get_logger(__name__)


class EpisodePromoter:
    """Promotes due PendingEpisode records to LiveEpisode.

    An episode is only promoted once its parent series is live. Episodes still
    waiting on a coming soon series are skipped and retried on a later tick.
    """

    def __init__(self, store: CatalogStore) -> None:
        self.store = store

    def promote_due_episodes(self, now: datetime) -> EpisodePromotionResult:
        """Promote every linked pending episode whose release time is at or before ``now``.

        Args:
            now: The tick time.

        Returns:
            Promoted live episode ids, per-episode failures, the pending ids
            skipped because their series is not live, and whether the batch
            was aborted because storage ran out.
        """
        result = EpisodePromotionResult()

        due = self.store.find(
            Collection.PENDING_EPISODES,
            due_filter(now),
            sort=[("scheduled_release_at", ASCENDING)],
        )
        if not due:
            return result

        logger.info("episode_release_batch_found", count=len(due))

        for doc in due:
            episode = PendingEpisode.from_document(doc)
            if not episode.status.is_promotable:
                continue

            try:
                series_id = self._resolve_series(episode)
                if series_id is None:
                    result.skipped.append(episode.id)
                    continue

                created = release_episode(self.store, episode, series_id)
            except Exception as e:
                result.failed.append(PromotionFailure(id=episode.id, error=str(e)))
                if is_storage_exhausted(e):
                    logger.critical(
                        "episode_release_storage_exhausted",
                        pending_episode_id=str(episode.id),
                        error=str(e),
                    )
                    result.aborted = True
                    break
                logger.error(
                    "episode_release_failed",
                    pending_episode_id=str(episode.id),
                    episode=episode.episode_number,
                    error=str(e),
                )
                continue

            if created is not None:
                result.promoted.append(created)
                logger.info(
                    "episode_released",
                    pending_episode_id=str(episode.id),
                    live_episode_id=str(created),
                    series_id=str(series_id),
                    episode=episode.episode_number,
                )

        logger.info(
            "episode_release_batch_completed",
            promoted=len(result.promoted),
            failed=len(result.failed),
            skipped=len(result.skipped),
            aborted=result.aborted,
        )
        return result

    def _resolve_series(self, episode: PendingEpisode) -> UUID | None:
        """Find the live parent of ``episode``, or None if it cannot ship yet."""
        series_id = episode.series_id

        if series_id is None and episode.pending_series_id is not None:
            transfer = find_transfer_log(self.store, episode.pending_series_id)
            if transfer is None:
                # Parent series not released yet; expected, retried next tick
                logger.debug(
                    "episode_waiting_for_series",
                    pending_episode_id=str(episode.id),
                    pending_series_id=str(episode.pending_series_id),
                )
                return None
            series_id = transfer.series_id
            self.store.update_by_id(
                Collection.PENDING_EPISODES, episode.id, {"series_id": series_id}
            )
            logger.info(
                "episode_series_resolved",
                pending_episode_id=str(episode.id),
                pending_series_id=str(episode.pending_series_id),
                series_id=str(series_id),
            )

        if series_id is None:
            logger.warning("episode_missing_series", pending_episode_id=str(episode.id))
            return None

        if not live_series_exists(self.store, series_id):
            logger.warning(
                "episode_series_not_live",
                pending_episode_id=str(episode.id),
                series_id=str(series_id),
            )
            return None

        return series_id
