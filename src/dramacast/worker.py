"""Celery worker configuration.

Alternative to the in-process scheduler: celery beat enqueues one release
tick per interval onto the ``release`` queue. Serve that queue with exactly one
single-process worker and disable ``RELEASE_SCHEDULER_ENABLED`` on the API::

    celery -A dramacast.worker worker -B -Q release -c 1
"""

from celery import Celery
from celery.signals import worker_ready

from dramacast.config import settings
from dramacast.logging import setup_logging

# Setup logging before anything else
setup_logging()

# Create Celery app
celery_app = Celery(
    "dramacast",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # A lost tick is simply picked up by the next one
    task_acks_late=False,
    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=1,
    # Result backend
    result_expires=3600,
    # Task routing
    task_routes={
        "release.run_tick": {"queue": "release"},
    },
    # Beat scheduler (for periodic tasks)
    beat_schedule={
        "release-tick": {
            "task": "release.run_tick",
            "schedule": settings.release_interval_seconds,
            # Drop ticks that queued up behind a slow one instead of replaying them
            "options": {"queue": "release", "expires": settings.release_interval_seconds},
        },
    },
)

# Auto-discover tasks
celery_app.autodiscover_tasks(["dramacast.jobs"], related_name="release_tasks")


@worker_ready.connect
def run_startup_tick(**kwargs: object) -> None:
    """Catch up on releases that fell due while no worker was running.

    Beat only fires its first interval entry one interval after start.
    """
    if settings.release_run_on_startup:
        celery_app.send_task("release.run_tick", queue="release")
