"""Release pipeline schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _series_columns() -> list[sa.Column]:
    return [
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("episode_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("free_episode_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_free", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("members_only", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("series_type", sa.String(50), nullable=False, server_default="Exclusive"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("categories", sa.JSON(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("image_ref", sa.String(1024), nullable=False),
        sa.Column("banner_ref", sa.String(1024), nullable=False),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
    ]


def _episode_columns() -> list[sa.Column]:
    return [
        sa.Column("episode_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False, server_default=""),
        sa.Column("coin_cost", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("views", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("coins_earned", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("video_ref", sa.String(1024), nullable=False),
        sa.Column("thumbnail_ref", sa.String(1024), nullable=True),
    ]


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    # Coming soon series
    op.create_table(
        "pending_series",
        sa.Column("id", sa.Uuid(), nullable=False),
        *_series_columns(),
        sa.Column("scheduled_release_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(50), nullable=True, server_default="pending"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_pending_series_scheduled_release_at", "pending_series", ["scheduled_release_at"]
    )
    op.create_index("ix_pending_series_status", "pending_series", ["status"])
    op.create_index(
        "ix_pending_series_release_status", "pending_series", ["scheduled_release_at", "status"]
    )

    # Coming soon episodes
    op.create_table(
        "pending_episodes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("series_id", sa.Uuid(), nullable=True),
        sa.Column("pending_series_id", sa.Uuid(), nullable=True),
        *_episode_columns(),
        sa.Column("scheduled_release_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(50), nullable=True, server_default="pending"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "pending_series_id", "episode_number", name="uq_pending_episodes_series_episode"
        ),
    )
    op.create_index("ix_pending_episodes_series_id", "pending_episodes", ["series_id"])
    op.create_index(
        "ix_pending_episodes_pending_series_id", "pending_episodes", ["pending_series_id"]
    )
    op.create_index(
        "ix_pending_episodes_scheduled_release_at", "pending_episodes", ["scheduled_release_at"]
    )
    op.create_index("ix_pending_episodes_status", "pending_episodes", ["status"])
    op.create_index(
        "ix_pending_episodes_release_status",
        "pending_episodes",
        ["scheduled_release_at", "status"],
    )

    # Live catalog
    op.create_table(
        "live_series",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("pending_series_id", sa.Uuid(), nullable=True),
        *_series_columns(),
        sa.Column("view_count", sa.BigInteger(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("pending_series_id"),
    )
    op.create_index("ix_live_series_title", "live_series", ["title"])

    op.create_table(
        "live_episodes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("series_id", sa.Uuid(), nullable=False),
        *_episode_columns(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("series_id", "episode_number", name="uq_live_episodes_series_episode"),
    )
    op.create_index("ix_live_episodes_series_id", "live_episodes", ["series_id"])

    # Transfer audit trail
    op.create_table(
        "series_transfer_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("pending_series_id", sa.Uuid(), nullable=False),
        sa.Column("series_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("scheduled_release_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("transferred_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_series_transfer_logs_pending_series_id", "series_transfer_logs", ["pending_series_id"]
    )
    op.create_index("ix_series_transfer_logs_series_id", "series_transfer_logs", ["series_id"])
    op.create_index(
        "ix_series_transfer_logs_transferred_at", "series_transfer_logs", ["transferred_at"]
    )


def downgrade() -> None:
    op.drop_table("series_transfer_logs")
    op.drop_table("live_episodes")
    op.drop_table("live_series")
    op.drop_table("pending_episodes")
    op.drop_table("pending_series")
