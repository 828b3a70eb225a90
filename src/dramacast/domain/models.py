"""Domain models - pure Python classes independent of the catalog store."""

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from dramacast.domain.enums import ReleaseStatus, SeriesType

MIN_EPISODE_NUMBER = 1
MAX_EPISODE_NUMBER = 100
MAX_RATING = 10.0


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def _as_uuid(value: Any) -> UUID | None:
    if value is None or isinstance(value, UUID):
        return value
    return UUID(str(value))


@dataclass
class PendingSeries:
    """A series uploaded as "coming soon", waiting for its release time."""

    id: UUID
    title: str
    description: str
    episode_count: int
    free_episode_count: int
    categories: list[str]
    image_ref: str
    banner_ref: str
    scheduled_release_at: datetime
    is_free: bool = False
    members_only: bool = False
    series_type: SeriesType = SeriesType.EXCLUSIVE
    active: bool = True
    tags: list[str] = field(default_factory=list)
    rating: float = 0.0
    status: ReleaseStatus = ReleaseStatus.PENDING

    @classmethod
    def create(
        cls,
        *,
        title: str,
        description: str,
        episode_count: int,
        free_episode_count: int,
        categories: list[str],
        image_ref: str,
        banner_ref: str,
        scheduled_release_at: datetime,
        now: datetime | None = None,
        **extra: Any,
    ) -> "PendingSeries":
        """Create a new pending series, enforcing the upload-time rules.

        Raises:
            ValueError: If categories are empty, the rating is out of range,
                counts are negative or the release time is not in the future.
        """
        now = now or utc_now()
        if not categories:
            raise ValueError("At least one category is required")
        if episode_count < 0 or free_episode_count < 0:
            raise ValueError("Episode counts must not be negative")
        rating = extra.get("rating", 0.0) or 0.0
        if not 0 <= rating <= MAX_RATING:
            raise ValueError(f"Rating must be between 0 and {MAX_RATING:g}")
        if scheduled_release_at <= now:
            raise ValueError("Scheduled release date must be in the future")

        return cls(
            id=uuid4(),
            title=title.strip(),
            description=description,
            episode_count=episode_count,
            free_episode_count=free_episode_count,
            categories=list(categories),
            image_ref=image_ref.strip(),
            banner_ref=banner_ref.strip(),
            scheduled_release_at=scheduled_release_at,
            status=ReleaseStatus.PENDING,
            **extra,
        )

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "PendingSeries":
        return cls(
            id=_as_uuid(doc["id"]),
            title=doc["title"],
            description=doc.get("description") or "",
            episode_count=doc.get("episode_count") or 0,
            free_episode_count=doc.get("free_episode_count") or 0,
            categories=list(doc.get("categories") or []),
            image_ref=doc.get("image_ref") or "",
            banner_ref=doc.get("banner_ref") or "",
            scheduled_release_at=doc["scheduled_release_at"],
            is_free=bool(doc.get("is_free", False)),
            members_only=bool(doc.get("members_only", False)),
            series_type=SeriesType(doc.get("series_type") or SeriesType.EXCLUSIVE),
            active=bool(doc.get("active", True)),
            tags=list(doc.get("tags") or []),
            rating=doc.get("rating") or 0.0,
            status=ReleaseStatus.from_raw(doc.get("status")),
        )

    def to_document(self) -> dict[str, Any]:
        doc = asdict(self)
        doc["series_type"] = str(self.series_type)
        doc["status"] = str(self.status)
        return doc


@dataclass
class PendingEpisode:
    """An episode uploaded as "coming soon".

    ``series_id`` points at a live series, ``pending_series_id`` at a series
    that is itself still coming soon. Exactly one is set at creation; the
    release pipeline later fills in ``series_id`` once the parent goes live.
    """

    id: UUID
    episode_number: int
    video_ref: str
    scheduled_release_at: datetime
    series_id: UUID | None = None
    pending_series_id: UUID | None = None
    title: str = ""
    coin_cost: int = 0
    views: int = 0
    coins_earned: int = 0
    thumbnail_ref: str | None = None
    status: ReleaseStatus = ReleaseStatus.PENDING

    @classmethod
    def create(
        cls,
        *,
        episode_number: int,
        video_ref: str,
        scheduled_release_at: datetime,
        series_id: UUID | None = None,
        pending_series_id: UUID | None = None,
        now: datetime | None = None,
        **extra: Any,
    ) -> "PendingEpisode":
        """Create a new pending episode, enforcing the upload-time rules.

        Raises:
            ValueError: On a bad episode number, missing or double parent
                reference, or a release time that is not in the future.
        """
        now = now or utc_now()
        if not MIN_EPISODE_NUMBER <= episode_number <= MAX_EPISODE_NUMBER:
            raise ValueError(
                f"Episode number must be between {MIN_EPISODE_NUMBER} and {MAX_EPISODE_NUMBER}"
            )
        if (series_id is None) == (pending_series_id is None):
            raise ValueError("Exactly one of series_id or pending_series_id is required")
        if scheduled_release_at <= now:
            raise ValueError("Scheduled release date must be in the future")

        return cls(
            id=uuid4(),
            episode_number=episode_number,
            video_ref=video_ref.strip(),
            scheduled_release_at=scheduled_release_at,
            series_id=series_id,
            pending_series_id=pending_series_id,
            status=ReleaseStatus.PENDING,
            **extra,
        )

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "PendingEpisode":
        return cls(
            id=_as_uuid(doc["id"]),
            episode_number=doc["episode_number"],
            video_ref=doc.get("video_ref") or "",
            scheduled_release_at=doc["scheduled_release_at"],
            series_id=_as_uuid(doc.get("series_id")),
            pending_series_id=_as_uuid(doc.get("pending_series_id")),
            title=doc.get("title") or "",
            coin_cost=doc.get("coin_cost") or 0,
            views=doc.get("views") or 0,
            coins_earned=doc.get("coins_earned") or 0,
            thumbnail_ref=doc.get("thumbnail_ref"),
            status=ReleaseStatus.from_raw(doc.get("status")),
        )

    def to_document(self) -> dict[str, Any]:
        doc = asdict(self)
        doc["status"] = str(self.status)
        return doc


@dataclass
class LiveSeries:
    """A series in the public catalog."""

    id: UUID
    title: str
    description: str
    episode_count: int
    free_episode_count: int
    categories: list[str]
    image_ref: str
    banner_ref: str
    is_free: bool = False
    members_only: bool = False
    series_type: SeriesType = SeriesType.EXCLUSIVE
    active: bool = True
    tags: list[str] = field(default_factory=list)
    rating: float = 0.0
    view_count: int = 0
    pending_series_id: UUID | None = None

    @classmethod
    def from_pending(cls, pending: PendingSeries) -> "LiveSeries":
        """Materialize a pending series; everything but its schedule is copied."""
        return cls(
            id=uuid4(),
            title=pending.title,
            description=pending.description,
            episode_count=pending.episode_count,
            free_episode_count=pending.free_episode_count,
            categories=list(pending.categories),
            image_ref=pending.image_ref,
            banner_ref=pending.banner_ref,
            is_free=pending.is_free,
            members_only=pending.members_only,
            series_type=pending.series_type,
            active=pending.active,
            tags=list(pending.tags),
            rating=pending.rating or 0.0,
            view_count=0,
            pending_series_id=pending.id,
        )

    def to_document(self) -> dict[str, Any]:
        doc = asdict(self)
        doc["series_type"] = str(self.series_type)
        return doc


@dataclass
class LiveEpisode:
    """An episode in the public catalog."""

    id: UUID
    series_id: UUID
    episode_number: int
    video_ref: str
    title: str = ""
    coin_cost: int = 0
    views: int = 0
    coins_earned: int = 0
    thumbnail_ref: str | None = None

    @classmethod
    def from_pending(cls, pending: PendingEpisode, series_id: UUID) -> "LiveEpisode":
        return cls(
            id=uuid4(),
            series_id=series_id,
            episode_number=pending.episode_number,
            video_ref=pending.video_ref,
            title=pending.title or "",
            coin_cost=pending.coin_cost or 0,
            views=pending.views or 0,
            coins_earned=pending.coins_earned or 0,
            thumbnail_ref=pending.thumbnail_ref,
        )

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TransferLogEntry:
    """Audit record mapping a promoted series' pending and live identities."""

    id: UUID
    pending_series_id: UUID
    series_id: UUID
    title: str
    scheduled_release_at: datetime
    transferred_at: datetime

    @classmethod
    def record(
        cls, pending: PendingSeries, series_id: UUID, transferred_at: datetime
    ) -> "TransferLogEntry":
        return cls(
            id=uuid4(),
            pending_series_id=pending.id,
            series_id=series_id,
            title=pending.title,
            scheduled_release_at=pending.scheduled_release_at,
            transferred_at=transferred_at,
        )

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "TransferLogEntry":
        return cls(
            id=_as_uuid(doc["id"]),
            pending_series_id=_as_uuid(doc["pending_series_id"]),
            series_id=_as_uuid(doc["series_id"]),
            title=doc["title"],
            scheduled_release_at=doc["scheduled_release_at"],
            transferred_at=doc["transferred_at"],
        )

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# Promotion results
# =============================================================================


@dataclass
class PromotionFailure:
    """A record that could not be promoted in this tick."""

    id: UUID
    error: str


@dataclass
class SeriesPromotionResult:
    """Outcome of one Series Promoter run."""

    promoted: list[UUID] = field(default_factory=list)
    failed: list[PromotionFailure] = field(default_factory=list)
    episodes_promoted: list[UUID] = field(default_factory=list)
    episodes_failed: list[PromotionFailure] = field(default_factory=list)
    aborted: bool = False


@dataclass
class EpisodePromotionResult:
    """Outcome of one Episode Promoter run."""

    promoted: list[UUID] = field(default_factory=list)
    failed: list[PromotionFailure] = field(default_factory=list)
    skipped: list[UUID] = field(default_factory=list)
    aborted: bool = False


@dataclass
class TickReport:
    """Everything one scheduler tick did."""

    started_at: datetime
    finished_at: datetime | None = None
    series: SeriesPromotionResult = field(default_factory=SeriesPromotionResult)
    episodes: EpisodePromotionResult = field(default_factory=EpisodePromotionResult)
    error: str | None = None

    @property
    def storage_exhausted(self) -> bool:
        return self.series.aborted or self.episodes.aborted

    def summary(self) -> dict[str, Any]:
        """Flat counts, suitable for logging and API responses."""
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "series_promoted": len(self.series.promoted),
            "series_failed": len(self.series.failed),
            "series_episodes_promoted": len(self.series.episodes_promoted),
            "series_episodes_failed": len(self.series.episodes_failed),
            "episodes_promoted": len(self.episodes.promoted),
            "episodes_failed": len(self.episodes.failed),
            "episodes_skipped": len(self.episodes.skipped),
            "storage_exhausted": self.storage_exhausted,
            "error": self.error,
        }
