"""Initial schema: stability and pool tables.

Revision ID: 001
Revises: None
Create Date: 2026-10-18

Creates: users, incidents, usage_snapshots, verification_scores,
         guardrail_settings, pools, pledges
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    """Create all tables."""

    # -- users --
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("email", sa.String(320), nullable=False, server_default=""),
        sa.Column(
            "workspace_id", sa.String(100), nullable=False, server_default="ws_demo"
        ),
        *_timestamps(),
    )

    # -- incidents --
    op.create_table(
        "incidents",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("incident_type", sa.String(50), nullable=False),
        sa.Column("provider", sa.String(100), nullable=False),
        sa.Column("seats_band", sa.String(20), nullable=True),
        sa.Column("agents_band", sa.String(20), nullable=True),
        sa.Column("urgency", sa.String(20), nullable=True),
        sa.Column(
            "consent_telemetry", sa.Boolean, nullable=False, server_default="0"
        ),
        *_timestamps(),
    )
    op.create_index("ix_incidents_user_id", "incidents", ["user_id"])
    op.create_index(
        "ix_incidents_user_created", "incidents", ["user_id", "created_at"]
    )

    # -- usage_snapshots --
    op.create_table(
        "usage_snapshots",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("window_days", sa.Integer, nullable=False, server_default="30"),
        sa.Column("run_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("peak_concurrency", sa.Integer, nullable=False, server_default="0"),
        sa.Column("provider_usage", sa.JSON, nullable=False),
        sa.Column("token_proxy", sa.Integer, nullable=False, server_default="0"),
        sa.Column("retry_rate", sa.Float, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_usage_snapshots_user_id", "usage_snapshots", ["user_id"])
    op.create_index(
        "ix_usage_snapshots_user_created",
        "usage_snapshots",
        ["user_id", "created_at"],
    )

    # -- verification_scores --
    op.create_table(
        "verification_scores",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("score", sa.Integer, nullable=False),
        sa.Column("tier", sa.String(20), nullable=False),
        sa.Column("reasons", sa.JSON, nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_verification_scores_user_id", "verification_scores", ["user_id"]
    )
    op.create_index(
        "ix_verification_scores_user_created",
        "verification_scores",
        ["user_id", "created_at"],
    )

    # -- guardrail_settings --
    op.create_table(
        "guardrail_settings",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer,
            sa.ForeignKey("users.id"),
            nullable=False,
            unique=True,
        ),
        sa.Column("cap_concurrency", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("jitter_backoff", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("loop_limiter", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("cache_dedupe", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("applied", sa.Boolean, nullable=False, server_default="0"),
        *_timestamps(),
    )

    # -- pools --
    op.create_table(
        "pools",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("pool_type", sa.String(50), nullable=False),
        sa.Column("provider", sa.String(100), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False, unique=True),
        sa.Column("threshold_seats", sa.Integer, nullable=False),
        sa.Column("next_threshold_seats", sa.Integer, nullable=False),
        sa.Column("target_terms", sa.JSON, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="forming"),
        *_timestamps(),
        sa.UniqueConstraint("provider", "pool_type", name="uq_pools_provider_type"),
    )

    # -- pledges --
    op.create_table(
        "pledges",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("pool_id", sa.Integer, sa.ForeignKey("pools.id"), nullable=False),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("seats_intended", sa.Integer, nullable=False),
        sa.Column("wtp_band", sa.String(20), nullable=False),
        sa.Column("contact", sa.String(320), nullable=False, server_default=""),
        sa.Column("referral_code_used", sa.String(50), nullable=True),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("pool_id", "user_id", name="uq_pledges_pool_user"),
    )
    op.create_index("ix_pledges_pool_id", "pledges", ["pool_id"])
    op.create_index("ix_pledges_user_id", "pledges", ["user_id"])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table("pledges")
    op.drop_table("pools")
    op.drop_table("guardrail_settings")
    op.drop_table("verification_scores")
    op.drop_table("usage_snapshots")
    op.drop_table("incidents")
    op.drop_table("users")
