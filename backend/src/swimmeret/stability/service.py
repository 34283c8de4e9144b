"""Stability service: incident intake, usage snapshots, verification, guardrails.

All functions take db: Session as first arg and flush rather than commit;
the router owns the transaction boundary. Lookups of the "current" record
for a user order by created_at then id, both descending.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from sqlalchemy.orm import Session

from swimmeret.config import get_settings
from swimmeret.db.base import utcnow
from swimmeret.exceptions import UserNotFoundError
from swimmeret.stability.models import (
    GuardrailSetting,
    Incident,
    UsageSnapshot,
    User,
    VerificationScore,
)
from swimmeret.stability.schemas import GuardrailFlags, IncidentCreate
from swimmeret.stability.telemetry import build_telemetry_reading, map_agents_band
from swimmeret.stability.verification import score_verification

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def get_user(db: Session, user_id: Optional[int]) -> User:
    """Get a user by ID. Raises UserNotFoundError if not found."""
    user = db.get(User, user_id) if user_id is not None else None
    if user is None:
        raise UserNotFoundError(detail=f"User ID {user_id} not found")
    return user


def get_latest_incident(db: Session, user_id: int) -> Optional[Incident]:
    return (
        db.query(Incident)
        .filter(Incident.user_id == user_id)
        .order_by(Incident.created_at.desc(), Incident.id.desc())
        .first()
    )


def get_latest_snapshot(db: Session, user_id: int) -> Optional[UsageSnapshot]:
    return (
        db.query(UsageSnapshot)
        .filter(UsageSnapshot.user_id == user_id)
        .order_by(UsageSnapshot.created_at.desc(), UsageSnapshot.id.desc())
        .first()
    )


def get_latest_verification(
    db: Session, user_id: int
) -> Optional[VerificationScore]:
    return (
        db.query(VerificationScore)
        .filter(VerificationScore.user_id == user_id)
        .order_by(VerificationScore.created_at.desc(), VerificationScore.id.desc())
        .first()
    )


# ---------------------------------------------------------------------------
# Incident intake
# ---------------------------------------------------------------------------


def report_incident(db: Session, data: IncidentCreate) -> tuple[User, Incident]:
    """Record an incident, registering the reporting user on first contact.

    An unknown or missing userId creates a new user. A different non-empty
    email replaces the stored one.
    """
    user = db.get(User, data.user_id) if data.user_id is not None else None
    if user is None:
        user = User(
            email=data.email or "",
            workspace_id=data.workspace_id or "ws_demo",
        )
        db.add(user)
        db.flush()
        logger.info("Registered user %d from incident report", user.id)

    if data.email and data.email != user.email:
        user.email = data.email

    incident = Incident(
        user_id=user.id,
        incident_type=data.incident_type,
        provider=data.provider or get_settings().default_provider,
        seats_band=data.seats_band,
        agents_band=data.agents_band,
        urgency=data.urgency,
        consent_telemetry=data.consent_telemetry,
    )
    db.add(incident)
    db.flush()
    return user, incident


# ---------------------------------------------------------------------------
# Telemetry and verification
# ---------------------------------------------------------------------------


def record_usage_snapshot(
    db: Session,
    user_id: int,
    window_days: int = 30,
    provider: Optional[str] = None,
    consent: bool = True,
    rng: Optional[random.Random] = None,
) -> UsageSnapshot:
    """Generate and persist a usage snapshot for a user.

    The baseline comes from the agents band of the user's most recent
    incident ("1-10" when the user has reported none).
    """
    get_user(db, user_id)
    incident = get_latest_incident(db, user_id)
    baseline = map_agents_band(incident.agents_band if incident else None)

    reading = build_telemetry_reading(
        baseline,
        consent=consent,
        provider=provider or get_settings().default_provider,
        window_days=window_days,
        rng=rng,
    )
    snapshot = UsageSnapshot(
        user_id=user_id,
        window_days=reading.window_days,
        run_count=reading.run_count,
        peak_concurrency=reading.peak_concurrency,
        provider_usage=reading.provider_usage,
        token_proxy=reading.token_proxy,
        retry_rate=reading.retry_rate,
    )
    db.add(snapshot)
    db.flush()
    return snapshot


def verify_user(db: Session, user_id: int) -> VerificationScore:
    """Score the user's most recent snapshot and append the result."""
    get_user(db, user_id)
    result = score_verification(get_latest_snapshot(db, user_id))

    record = VerificationScore(
        user_id=user_id,
        score=result.score,
        tier=result.tier.value,
        reasons=result.reasons,
    )
    db.add(record)
    db.flush()
    logger.info(
        "Verified user %d: tier=%s score=%d", user_id, record.tier, record.score
    )
    return record


# ---------------------------------------------------------------------------
# Guardrails
# ---------------------------------------------------------------------------


def apply_guardrails(
    db: Session, user_id: int, flags: GuardrailFlags
) -> GuardrailSetting:
    """Create or overwrite the user's guardrail settings and mark them applied."""
    get_user(db, user_id)
    entry = (
        db.query(GuardrailSetting)
        .filter(GuardrailSetting.user_id == user_id)
        .first()
    )
    if entry is None:
        entry = GuardrailSetting(user_id=user_id)
        db.add(entry)

    entry.cap_concurrency = flags.cap_concurrency
    entry.jitter_backoff = flags.jitter_backoff
    entry.loop_limiter = flags.loop_limiter
    entry.cache_dedupe = flags.cache_dedupe
    entry.applied = True
    entry.updated_at = utcnow()
    db.flush()
    return entry
