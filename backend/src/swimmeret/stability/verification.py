"""Verification scoring: usage snapshot -> score, tier, reasons.

score_verification is a pure function. It accepts anything shaped like a
usage snapshot (the UsageSnapshot ORM row or a TelemetryReading) and never
touches the database. Negative run counts or peaks are outside its domain.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Tier(str, Enum):
    UNVERIFIED = "unverified"
    VERIFIED = "verified"
    POWER = "power"


VERIFIED_TIERS = {Tier.VERIFIED.value, Tier.POWER.value}

NO_TELEMETRY_SCORE = 18
NO_TELEMETRY_REASON = "Telemetry consent missing or too little usage data"
BELOW_THRESHOLD_REASON = "Usage profile below verification thresholds"

RUNS_PER_POINT = 120
PROVIDER_BONUS = 8
RETRY_PENALTY = 8
RETRY_RATE_LIMIT = 0.12

VERIFIED_RUNS = 1000
POWER_RUNS = 5000
VERIFIED_PEAK = 20
POWER_PEAK = 60


@dataclass
class VerificationResult:
    score: int
    tier: Tier
    reasons: list[str] = field(default_factory=list)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return math.floor(value + 0.5)


def score_verification(snapshot: Optional[Any]) -> VerificationResult:
    """Score a usage snapshot.

    Missing telemetry (no snapshot, or zero runs) yields a fixed sentinel
    result rather than a formula score.
    """
    if snapshot is None or not snapshot.run_count:
        return VerificationResult(
            score=NO_TELEMETRY_SCORE,
            tier=Tier.UNVERIFIED,
            reasons=[NO_TELEMETRY_REASON],
        )

    run_count = snapshot.run_count
    peak = snapshot.peak_concurrency or 0
    provider_usage = snapshot.provider_usage or {}
    retry_rate = snapshot.retry_rate

    provider_bonus = (
        PROVIDER_BONUS if any(v for v in provider_usage.values()) else 0
    )
    retry_penalty = (
        RETRY_PENALTY
        if retry_rate is not None and retry_rate > RETRY_RATE_LIMIT
        else 0
    )
    raw = run_count / RUNS_PER_POINT + peak + provider_bonus - retry_penalty
    score = max(0, min(100, round_half_up(raw)))

    if run_count >= POWER_RUNS and peak >= POWER_PEAK:
        tier = Tier.POWER
    elif run_count >= VERIFIED_RUNS or peak >= VERIFIED_PEAK:
        tier = Tier.VERIFIED
    else:
        tier = Tier.UNVERIFIED

    reasons = []
    if run_count >= VERIFIED_RUNS:
        reasons.append("Run volume over 1,000 in 30 days")
    if run_count >= POWER_RUNS:
        reasons.append("Run volume over 5,000 in 30 days")
    if peak >= VERIFIED_PEAK:
        reasons.append("Peak concurrency over 20")
    if peak >= POWER_PEAK:
        reasons.append("Peak concurrency over 60")
    if provider_bonus:
        reasons.append("Consistent provider usage in telemetry")
    if retry_penalty:
        reasons.append("High retry rate detected")

    return VerificationResult(
        score=score,
        tier=tier,
        reasons=reasons or [BELOW_THRESHOLD_REASON],
    )
