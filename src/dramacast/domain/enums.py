"""Domain enumerations."""

from enum import StrEnum


class ReleaseStatus(StrEnum):
    """Lifecycle of a scheduled (coming soon) record.

    ``pending -> released -> (deleted)``. ``released`` is only observable in the
    window between marking a record and deleting it. ``legacy`` is what a record
    written before the status field existed reads as; it is promoted like
    ``pending``.
    """

    PENDING = "pending"
    RELEASED = "released"
    LEGACY = "legacy"

    @classmethod
    def from_raw(cls, value: str | None) -> "ReleaseStatus":
        """Parse a stored status, mapping missing or unknown values to LEGACY."""
        if value is None:
            return cls.LEGACY
        try:
            return cls(value)
        except ValueError:
            return cls.LEGACY

    @property
    def is_promotable(self) -> bool:
        return self is not ReleaseStatus.RELEASED


class SeriesType(StrEnum):
    """Monetization tier of a series."""

    EXCLUSIVE = "Exclusive"
    PREMIUM = "Premium"
    FREE = "Free"


class Collection(StrEnum):
    """Catalog store collections touched by the release pipeline."""

    PENDING_SERIES = "pending_series"
    PENDING_EPISODES = "pending_episodes"
    LIVE_SERIES = "live_series"
    LIVE_EPISODES = "live_episodes"
    TRANSFER_LOGS = "series_transfer_logs"
