"""Stability REST API router.

Provides incident intake, usage snapshot generation and verification under
/api/stability, plus guardrail application under /api/guardrails.

Endpoints call sync service functions and commit on success.
Error handling: UserNotFoundError -> 404, other SwimmeretError -> 400.
"""

from __future__ import annotations

import random

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from swimmeret.exceptions import SwimmeretError, UserNotFoundError
from swimmeret.stability.schemas import (
    GuardrailApplyRequest,
    GuardrailResponse,
    IncidentCreate,
    IncidentReportResponse,
    UsageSnapshotRequest,
    UsageSnapshotResponse,
    VerificationScoreResponse,
    VerifyRequest,
)
from swimmeret.stability.service import (
    apply_guardrails,
    record_usage_snapshot,
    report_incident,
    verify_user,
)

stability_router = APIRouter(prefix="/api/stability", tags=["stability"])
guardrails_router = APIRouter(prefix="/api/guardrails", tags=["guardrails"])


# -- Dependencies -------------------------------------------------------------


def _get_db():
    """Yield a SQLAlchemy session. Lazy-imports engine so routers import without a database."""
    from swimmeret.db.engine import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_telemetry_rng() -> random.Random:
    """Random source for telemetry jitter. Override in tests for fixed output."""
    return random.Random()


# -- Stability Endpoints ------------------------------------------------------


@stability_router.post("/incidents", response_model=IncidentReportResponse)
def report_incident_endpoint(
    request: IncidentCreate,
    db: Session = Depends(_get_db),
):
    """Record a stability incident, registering the user on first report."""
    user, incident = report_incident(db, request)
    db.commit()
    return IncidentReportResponse(user_id=user.id, incident_id=incident.id)


@stability_router.post("/usage-snapshot", response_model=UsageSnapshotResponse)
def usage_snapshot_endpoint(
    request: UsageSnapshotRequest,
    db: Session = Depends(_get_db),
    rng: random.Random = Depends(get_telemetry_rng),
):
    """Generate a usage snapshot from the user's latest incident."""
    try:
        snapshot = record_usage_snapshot(
            db,
            request.user_id,
            window_days=request.window_days,
            provider=request.provider,
            consent=request.consent_telemetry,
            rng=rng,
        )
        db.commit()
        return snapshot
    except UserNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except SwimmeretError as e:
        raise HTTPException(status_code=400, detail=e.message)


@stability_router.post("/verify", response_model=VerificationScoreResponse)
def verify_endpoint(
    request: VerifyRequest,
    db: Session = Depends(_get_db),
):
    """Score the user's latest usage snapshot."""
    try:
        score = verify_user(db, request.user_id)
        db.commit()
        return score
    except UserNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except SwimmeretError as e:
        raise HTTPException(status_code=400, detail=e.message)


# -- Guardrail Endpoints ------------------------------------------------------


@guardrails_router.post("/apply", response_model=GuardrailResponse)
def apply_guardrails_endpoint(
    request: GuardrailApplyRequest,
    db: Session = Depends(_get_db),
):
    """Apply guardrail settings to a user's automation."""
    try:
        entry = apply_guardrails(db, request.user_id, request.guardrails)
        db.commit()
        return entry
    except UserNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except SwimmeretError as e:
        raise HTTPException(status_code=400, detail=e.message)
