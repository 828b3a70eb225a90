"""SQLAlchemy ORM models for the catalog collections."""

from datetime import datetime
from uuid import UUID as PyUUID
from uuid import uuid4

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# =============================================================================
# Coming soon (pending) records
# =============================================================================


class PendingSeriesModel(Base):
    """Series waiting for its scheduled release."""

    __tablename__ = "pending_series"
    __table_args__ = (Index("ix_pending_series_release_status", "scheduled_release_at", "status"),)

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    episode_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    free_episode_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_free: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    members_only: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    series_type: Mapped[str] = mapped_column(String(50), nullable=False, default="Exclusive")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    categories: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    image_ref: Mapped[str] = mapped_column(String(1024), nullable=False)
    banner_ref: Mapped[str] = mapped_column(String(1024), nullable=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    scheduled_release_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    status: Mapped[str | None] = mapped_column(
        String(50), server_default="pending", default="pending", index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )


class PendingEpisodeModel(Base):
    """Episode waiting for its scheduled release (or its parent series')."""

    __tablename__ = "pending_episodes"
    __table_args__ = (
        # NULL pending_series_id values never collide, so this only binds
        # episodes attached to a coming soon series.
        UniqueConstraint(
            "pending_series_id", "episode_number", name="uq_pending_episodes_series_episode"
        ),
        Index("ix_pending_episodes_release_status", "scheduled_release_at", "status"),
    )

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    series_id: Mapped[PyUUID | None] = mapped_column(Uuid, nullable=True, index=True)
    pending_series_id: Mapped[PyUUID | None] = mapped_column(Uuid, nullable=True, index=True)
    episode_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    coin_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    views: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    coins_earned: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    video_ref: Mapped[str] = mapped_column(String(1024), nullable=False)
    thumbnail_ref: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    scheduled_release_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    status: Mapped[str | None] = mapped_column(
        String(50), server_default="pending", default="pending", index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )


# =============================================================================
# Live catalog
# =============================================================================


class LiveSeriesModel(Base):
    """Series served by the public catalog."""

    __tablename__ = "live_series"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    pending_series_id: Mapped[PyUUID | None] = mapped_column(Uuid, nullable=True, unique=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    episode_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    free_episode_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_free: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    members_only: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    series_type: Mapped[str] = mapped_column(String(50), nullable=False, default="Exclusive")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    categories: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    image_ref: Mapped[str] = mapped_column(String(1024), nullable=False)
    banner_ref: Mapped[str] = mapped_column(String(1024), nullable=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    view_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )


class LiveEpisodeModel(Base):
    """Episode served by the public catalog."""

    __tablename__ = "live_episodes"
    __table_args__ = (
        UniqueConstraint("series_id", "episode_number", name="uq_live_episodes_series_episode"),
    )

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    series_id: Mapped[PyUUID] = mapped_column(Uuid, nullable=False, index=True)
    episode_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    coin_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    views: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    coins_earned: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    video_ref: Mapped[str] = mapped_column(String(1024), nullable=False)
    thumbnail_ref: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )


class SeriesTransferLogModel(Base):
    """Append-only record of each pending -> live series promotion."""

    __tablename__ = "series_transfer_logs"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    pending_series_id: Mapped[PyUUID] = mapped_column(Uuid, nullable=False, index=True)
    series_id: Mapped[PyUUID] = mapped_column(Uuid, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    scheduled_release_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    transferred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
