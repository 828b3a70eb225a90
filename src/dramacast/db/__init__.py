"""Database layer."""

from dramacast.db.models import (
    Base,
    LiveEpisodeModel,
    LiveSeriesModel,
    PendingEpisodeModel,
    PendingSeriesModel,
    SeriesTransferLogModel,
)

__all__ = [
    "Base",
    # Models
    "LiveEpisodeModel",
    "LiveSeriesModel",
    "PendingEpisodeModel",
    "PendingSeriesModel",
    "SeriesTransferLogModel",
]
