"""Domain models and business logic."""

from dramacast.domain.enums import Collection, ReleaseStatus, SeriesType
from dramacast.domain.models import (
    EpisodePromotionResult,
    LiveEpisode,
    LiveSeries,
    PendingEpisode,
    PendingSeries,
    PromotionFailure,
    SeriesPromotionResult,
    TickReport,
    TransferLogEntry,
    utc_now,
)

__all__ = [
    "Collection",
    "EpisodePromotionResult",
    "LiveEpisode",
    "LiveSeries",
    "PendingEpisode",
    "PendingSeries",
    "PromotionFailure",
    "ReleaseStatus",
    "SeriesPromotionResult",
    "SeriesType",
    "TickReport",
    "TransferLogEntry",
    "utc_now",
]
