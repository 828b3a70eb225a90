"""Celery job definitions."""

from dramacast.jobs.release_tasks import run_release_tick_task

__all__ = ["run_release_tick_task"]
