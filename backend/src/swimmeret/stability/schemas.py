"""Pydantic schemas for stability intake, telemetry, verification and guardrails.

Request bodies use the camelCase userId key the intake form sends; every
other field is snake_case. Validation here runs before any state mutation.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

AgentsBand = Literal["1-10", "10-50", "50-200", "200+"]
Urgency = Literal["today", "this week", "this month"]


class IncidentCreate(BaseModel):
    """Request body for reporting a stability incident."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[int] = Field(default=None, alias="userId")
    email: Optional[str] = None
    workspace_id: Optional[str] = None
    incident_type: str = Field(..., min_length=1, max_length=50)
    provider: Optional[str] = Field(default=None, max_length=100)
    seats_band: Optional[str] = Field(default=None, max_length=20)
    agents_band: AgentsBand = "1-10"
    urgency: Optional[Urgency] = None
    consent_telemetry: bool = False


class IncidentReportResponse(BaseModel):
    """Identifiers returned after an incident report."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., serialization_alias="userId")
    incident_id: int = Field(..., serialization_alias="incidentId")


class UsageSnapshotRequest(BaseModel):
    """Request body for generating a usage snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="userId")
    window_days: int = Field(default=30, ge=1, le=365)
    provider: Optional[str] = Field(default=None, max_length=100)
    consent_telemetry: bool = True


class UsageSnapshotResponse(BaseModel):
    """A persisted usage snapshot."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    window_days: int
    run_count: int
    peak_concurrency: int
    provider_usage: dict[str, float]
    token_proxy: int
    retry_rate: Optional[float] = None
    created_at: datetime


class VerifyRequest(BaseModel):
    """Request body for scoring a user's latest telemetry."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="userId")


class VerificationScoreResponse(BaseModel):
    """A persisted verification score."""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    score: int
    tier: str
    reasons: list[str]
    created_at: datetime


class GuardrailFlags(BaseModel):
    """The four opt-in guardrail switches."""

    cap_concurrency: bool = False
    jitter_backoff: bool = False
    loop_limiter: bool = False
    cache_dedupe: bool = False


class GuardrailApplyRequest(BaseModel):
    """Request body for applying guardrails to a user's automation."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="userId")
    guardrails: GuardrailFlags = GuardrailFlags()


class GuardrailResponse(BaseModel):
    """A user's current guardrail settings."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    applied: bool
    cap_concurrency: bool
    jitter_backoff: bool
    loop_limiter: bool
    cache_dedupe: bool
    updated_at: datetime
