"""Release scheduler endpoints (admin)."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from dramacast.api.deps import CatalogStoreDep, ReleaseSchedulerDep
from dramacast.domain.enums import Collection
from dramacast.domain.models import TickReport, utc_now
from dramacast.logging import get_logger
from dramacast.services.promotion import find_upcoming_series, not_released_filter

router = APIRouter(prefix="/releases", tags=["Releases"])
logger = get_logger(__name__)


# =============================================================================
# Response Models
# =============================================================================


class FailureResponse(BaseModel):
    """A record that failed to promote."""

    id: UUID
    error: str


class TickResponse(BaseModel):
    """Outcome of one release tick."""

    started_at: datetime
    finished_at: datetime | None
    series_promoted: list[UUID]
    series_failed: list[FailureResponse]
    series_episodes_promoted: list[UUID]
    series_episodes_failed: list[FailureResponse]
    episodes_promoted: list[UUID]
    episodes_failed: list[FailureResponse]
    episodes_skipped: list[UUID]
    storage_exhausted: bool
    error: str | None

    @classmethod
    def from_report(cls, report: TickReport) -> "TickResponse":
        return cls(
            started_at=report.started_at,
            finished_at=report.finished_at,
            series_promoted=report.series.promoted,
            series_failed=[FailureResponse(id=f.id, error=f.error) for f in report.series.failed],
            series_episodes_promoted=report.series.episodes_promoted,
            series_episodes_failed=[
                FailureResponse(id=f.id, error=f.error) for f in report.series.episodes_failed
            ],
            episodes_promoted=report.episodes.promoted,
            episodes_failed=[
                FailureResponse(id=f.id, error=f.error) for f in report.episodes.failed
            ],
            episodes_skipped=report.episodes.skipped,
            storage_exhausted=report.storage_exhausted,
            error=report.error,
        )


class SchedulerStatusResponse(BaseModel):
    """Release scheduler state."""

    running: bool
    tick_in_progress: bool
    interval_seconds: float
    last_tick: TickResponse | None


class UpcomingSeriesResponse(BaseModel):
    """A coming soon series and how many episodes wait on it."""

    id: UUID
    title: str
    scheduled_release_at: datetime
    pending_episodes: int


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/status", response_model=SchedulerStatusResponse)
def get_scheduler_status(scheduler: ReleaseSchedulerDep) -> SchedulerStatusResponse:
    """Get the release scheduler state and the last tick's outcome."""
    last = scheduler.last_report
    return SchedulerStatusResponse(
        running=scheduler.is_running,
        tick_in_progress=scheduler.tick_in_progress,
        interval_seconds=scheduler.interval_seconds,
        last_tick=TickResponse.from_report(last) if last else None,
    )


@router.post("/run", response_model=TickResponse)
def run_release_tick(scheduler: ReleaseSchedulerDep) -> TickResponse:
    """Run one release tick now instead of waiting for the next interval."""
    report = scheduler.run_tick()
    if report is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A release tick is already in progress",
        )
    logger.info("release_tick_triggered_manually", **report.summary())
    return TickResponse.from_report(report)


@router.get("/upcoming", response_model=list[UpcomingSeriesResponse])
def list_upcoming_series(
    store: CatalogStoreDep,
    limit: int = Query(10, ge=1, le=100),
) -> list[UpcomingSeriesResponse]:
    """List coming soon series that are not due yet, soonest first."""
    upcoming = find_upcoming_series(store, utc_now(), limit=limit)
    return [
        UpcomingSeriesResponse(
            id=series.id,
            title=series.title,
            scheduled_release_at=series.scheduled_release_at,
            pending_episodes=store.count(
                Collection.PENDING_EPISODES,
                not_released_filter(pending_series_id=series.id),
            ),
        )
        for series in upcoming
    ]
