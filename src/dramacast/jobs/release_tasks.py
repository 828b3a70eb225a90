"""Celery tasks for the scheduled release pipeline."""

from typing import Any

from celery import Task

from dramacast.adapters.catalog import get_catalog_store
from dramacast.config import settings
from dramacast.logging import get_logger
from dramacast.services.alerting import AlertingService
from dramacast.services.scheduler import ReleaseScheduler
from dramacast.worker import celery_app

logger = get_logger(__name__)


def build_release_scheduler() -> ReleaseScheduler:
    """Build a release scheduler over the configured catalog store."""
    return ReleaseScheduler(
        store=get_catalog_store(),
        interval_seconds=settings.release_interval_seconds,
        alerting=AlertingService(),
    )


class ReleaseTask(Task):
    """Task base owning the worker process' release scheduler.

    Celery instantiates a task once per process, so every tick in a worker
    goes through the same scheduler and its tick lock. Assign ``scheduler`` to
    inject a different one.
    """

    _scheduler: ReleaseScheduler | None = None

    @property
    def scheduler(self) -> ReleaseScheduler:
        if self._scheduler is None:
            self._scheduler = build_release_scheduler()
        return self._scheduler

    @scheduler.setter
    def scheduler(self, scheduler: ReleaseScheduler | None) -> None:
        self._scheduler = scheduler


@celery_app.task(bind=True, base=ReleaseTask, name="release.run_tick")
def run_release_tick_task(self: ReleaseTask) -> dict[str, Any]:
    """Run one release tick (series first, then episodes).

    Returns:
        Result dict with the tick summary, or ``skipped`` when a tick was
        already in flight.
    """
    task_id = self.request.id
    logger.info("release_tick_task_started", task_id=task_id)

    report = self.scheduler.run_tick()
    if report is None:
        return {"success": False, "task_id": task_id, "skipped": True}

    result = {"success": report.error is None, "task_id": task_id, **report.summary()}
    logger.info("release_tick_task_completed", **result)
    return result
