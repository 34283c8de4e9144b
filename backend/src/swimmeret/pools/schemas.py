"""Pydantic schemas for pool join, pledging and the pool aggregate.

The aggregate's histogram and distribution maps are keyed by band labels
("1-3", "this week", ...) and are therefore plain dicts.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

WtpBand = Literal["low", "mid", "high"]


class PoolResponse(BaseModel):
    """A pool record."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    pool_type: str
    provider: str
    name: str
    slug: str
    threshold_seats: int
    next_threshold_seats: int
    target_terms: list[str]
    status: str
    created_at: datetime


class PledgeResponse(BaseModel):
    """A pledge record."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    pool_id: int
    user_id: int
    seats_intended: int
    wtp_band: str
    contact: str
    referral_code_used: Optional[str] = None
    is_verified: bool
    created_at: datetime
    updated_at: datetime


class JoinPoolRequest(BaseModel):
    """Request body for finding (or forming) the pool for a provider."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[int] = Field(default=None, alias="userId")
    provider: Optional[str] = Field(default=None, max_length=100)
    pool_type: Optional[str] = Field(default=None, max_length=50)


class JoinPoolResponse(BaseModel):
    """The pool, the caller's existing pledge (if any) and a share link."""

    model_config = ConfigDict(populate_by_name=True)

    pool: PoolResponse
    pledge: Optional[PledgeResponse] = None
    share_link: str = Field(..., serialization_alias="shareLink")


class PledgeRequest(BaseModel):
    """Request body for pledging seats to a pool."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="userId")
    seats_intended: int = Field(..., ge=1, le=100_000)
    wtp_band: WtpBand
    contact: Optional[str] = Field(default=None, max_length=320)
    referral_code_used: Optional[str] = Field(default=None, max_length=50)


class PoolTotals(BaseModel):
    pledged_seats: int = 0
    verified_seats: int = 0
    pledge_count: int = 0


class WorkloadProfile(BaseModel):
    avg_run_count: int = 0
    avg_peak_concurrency: int = 0
    provider_usage_percent: int = 0


class PoolAggregate(BaseModel):
    """Pool-wide demand statistics, recomputed from current records."""

    pool: PoolResponse
    totals: PoolTotals
    histogram: dict[str, int]
    wtp_distribution: dict[str, int]
    urgency_distribution: dict[str, int]
    implied_monthly: int
    workload_profile: WorkloadProfile
    guardrail_adoption: int
    target_terms: list[str]
    counterparty: str


class PledgeResult(BaseModel):
    """The written pledge and the pool aggregate after the write."""

    pledge: PledgeResponse
    aggregate: PoolAggregate
