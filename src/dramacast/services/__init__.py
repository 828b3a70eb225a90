"""Application services."""

from dramacast.services.alerting import Alert, AlertingService, AlertSeverity
from dramacast.services.episode_promoter import EpisodePromoter
from dramacast.services.scheduler import ReleaseScheduler
from dramacast.services.series_promoter import SeriesPromoter

__all__ = [
    "Alert",
    "AlertingService",
    "AlertSeverity",
    "EpisodePromoter",
    "ReleaseScheduler",
    "SeriesPromoter",
]
