"""Stability ORM models: User, Incident, UsageSnapshot, VerificationScore,
GuardrailSetting.

Incidents, usage snapshots and verification scores are append-only; the
"current" record for a user is always the most recent one by created_at,
with the primary key as tie-breaker. GuardrailSetting is unique per user
and overwritten on reapplication.
"""

from typing import Optional

from sqlalchemy import (
    Boolean,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from swimmeret.db.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    """A builder reporting stability incidents.

    Created on the first incident report. email doubles as the contact
    address and is overwritten when a pledge supplies a new contact.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(320), default="", nullable=False)
    workspace_id: Mapped[str] = mapped_column(
        String(100), default="ws_demo", nullable=False
    )


class Incident(TimestampMixin, Base):
    """One self-reported stability problem."""

    __tablename__ = "incidents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    incident_type: Mapped[str] = mapped_column(
        String(50), nullable=False
    )  # "throttled", "warned", "canceled", ...
    provider: Mapped[str] = mapped_column(String(100), nullable=False)
    seats_band: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    agents_band: Mapped[Optional[str]] = mapped_column(
        String(20), nullable=True
    )  # "1-10", "10-50", "50-200", "200+"
    urgency: Mapped[Optional[str]] = mapped_column(
        String(20), nullable=True
    )  # "today", "this week", "this month"
    consent_telemetry: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    __table_args__ = (
        Index("ix_incidents_user_created", "user_id", "created_at"),
    )


class UsageSnapshot(TimestampMixin, Base):
    """Derived usage telemetry for a user over a time window.

    provider_usage maps provider name to a usage fraction; fractions need
    not sum to 1. retry_rate is null when no telemetry was collected.
    """

    __tablename__ = "usage_snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    window_days: Mapped[int] = mapped_column(Integer, default=30, nullable=False)
    run_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    peak_concurrency: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    provider_usage: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    token_proxy: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    retry_rate: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    __table_args__ = (
        Index("ix_usage_snapshots_user_created", "user_id", "created_at"),
    )


class VerificationScore(TimestampMixin, Base):
    """A scored verification outcome for a user at a point in time."""

    __tablename__ = "verification_scores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    tier: Mapped[str] = mapped_column(
        String(20), nullable=False
    )  # "unverified", "verified", "power"
    reasons: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    __table_args__ = (
        Index("ix_verification_scores_user_created", "user_id", "created_at"),
    )


class GuardrailSetting(TimestampMixin, Base):
    """Opt-in safety settings applied to a user's automation."""

    __tablename__ = "guardrail_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), unique=True, nullable=False
    )
    cap_concurrency: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    jitter_backoff: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    loop_limiter: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    cache_dedupe: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    applied: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
