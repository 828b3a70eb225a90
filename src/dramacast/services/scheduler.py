"""Scheduler Loop: drives the promoters on a fixed cadence."""

import threading
import time
from collections.abc import Callable
from datetime import datetime

from dramacast.adapters.catalog.base import CatalogStore
from dramacast.domain.models import TickReport, utc_now
from dramacast.logging import get_logger
from dramacast.services.alerting import AlertingService, alert_storage_exhausted
from dramacast.services.episode_promoter import EpisodePromoter
from dramacast.services.series_promoter import SeriesPromoter

logger = get_logger(__name__)

DEFAULT_INTERVAL_SECONDS = 60.0


class ReleaseScheduler:
    """Owns the release loop: one tick per interval, one tick at a time.

    A tick runs the Series Promoter and then the Episode Promoter with the same
    ``now``. Ticks never overlap: ``run_tick`` returns None without doing
    anything while another tick is in flight, and a loop iteration that overruns
    its interval drops the missed slots instead of queueing them.

    Only one scheduler may drive a given catalog store. Running several
    replicas needs external serialization.
    """

    def __init__(
        self,
        store: CatalogStore,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
        alerting: AlertingService | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.store = store
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.alerting = alerting
        self.series_promoter = SeriesPromoter(store)
        self.episode_promoter = EpisodePromoter(store)
        self.last_report: TickReport | None = None

        self._tick_lock = threading.Lock()
        # Replaced on every start(); each loop run only watches its own event
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def tick_in_progress(self) -> bool:
        return self._tick_lock.locked()

    def start(self, run_immediately: bool = True) -> None:
        """Start the background loop.

        Args:
            run_immediately: Run a tick right away to catch up on releases that
                fell due while the process was down.
        """
        if self.is_running:
            logger.warning("release_scheduler_already_running")
            return

        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(self._stop_event, run_immediately),
            name="release-scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            "release_scheduler_started",
            interval_seconds=self.interval_seconds,
            run_immediately=run_immediately,
        )

    def stop(self, timeout: float | None = None) -> None:
        """Stop the loop and wait for an in-flight tick to finish."""
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None:
            thread.join(timeout)
            logger.info("release_scheduler_stopped", clean=not thread.is_alive())

    def _run(self, stop_event: threading.Event, run_immediately: bool) -> None:
        if run_immediately:
            self.run_tick()

        next_run = time.monotonic() + self.interval_seconds
        while not stop_event.wait(max(0.0, next_run - time.monotonic())):
            self.run_tick()

            next_run += self.interval_seconds
            now = time.monotonic()
            if next_run <= now:
                missed = int((now - next_run) // self.interval_seconds) + 1
                logger.warning("release_tick_overran", missed_ticks=missed)
                next_run += missed * self.interval_seconds

    def run_tick(self) -> TickReport | None:
        """Run one tick now.

        Returns:
            The tick report, or None if another tick was already running.
        """
        if not self._tick_lock.acquire(blocking=False):
            logger.warning("release_tick_skipped", reason="tick_in_progress")
            return None
        try:
            return self._tick()
        finally:
            self._tick_lock.release()

    def _tick(self) -> TickReport:
        now = self.clock()
        report = TickReport(started_at=now)
        errors = []

        # Series first: their re-linking must land before episodes are scanned
        try:
            report.series = self.series_promoter.promote_due_series(now)
        except Exception as e:
            logger.exception("release_tick_series_failed", error=str(e))
            errors.append(f"series: {e}")

        try:
            report.episodes = self.episode_promoter.promote_due_episodes(now)
        except Exception as e:
            logger.exception("release_tick_episodes_failed", error=str(e))
            errors.append(f"episodes: {e}")

        report.error = "; ".join(errors) or None
        report.finished_at = self.clock()
        self.last_report = report

        if report.storage_exhausted:
            self._alert_storage_exhausted(report)

        summary = report.summary()
        if any(summary[key] for key in summary if key not in ("started_at", "finished_at")):
            logger.info("release_tick_completed", **summary)
        else:
            logger.debug("release_tick_idle", started_at=summary["started_at"])
        return report

    def _alert_storage_exhausted(self, report: TickReport) -> None:
        if self.alerting is None:
            return
        for stage, result in (("series", report.series), ("episodes", report.episodes)):
            if not result.aborted:
                continue
            last_error = result.failed[-1].error if result.failed else "storage exhausted"
            try:
                alert_storage_exhausted(
                    self.alerting,
                    stage=stage,
                    failed_ids=[str(failure.id) for failure in result.failed],
                    error=last_error,
                )
            except Exception as e:
                logger.error("storage_alert_failed", stage=stage, error=str(e))
