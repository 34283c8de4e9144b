"""Band mapping and usage snapshot generation.

Telemetry is synthesized from the builder's self-reported agents band plus
bounded jitter. The random source is injected so callers (and tests) can
pin the jitter; production passes a fresh random.Random.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional

AGENTS_BANDS = ("1-10", "10-50", "50-200", "200+")
DEFAULT_AGENTS_BAND = "1-10"

# Baseline (run_count, peak_concurrency) per agents band
BAND_BASELINES: dict[str, tuple[int, int]] = {
    "1-10": (300, 6),
    "10-50": (1200, 20),
    "50-200": (6000, 80),
    "200+": (14000, 220),
}

RUN_JITTER_MAX = 299
PEAK_JITTER_MAX = 5
RETRY_RATE_RANGE = (0.04, 0.12)
PRIMARY_PROVIDER_SHARE = 0.72
TOKENS_PER_RUN = 250


@dataclass(frozen=True)
class TelemetryBaseline:
    """Baseline usage implied by an agents band, before jitter."""

    run_count: int
    peak_concurrency: int


@dataclass
class TelemetryReading:
    """Telemetry values ready to be persisted as a UsageSnapshot."""

    window_days: int
    run_count: int = 0
    peak_concurrency: int = 0
    provider_usage: dict[str, float] = field(default_factory=dict)
    token_proxy: int = 0
    retry_rate: Optional[float] = None


def map_agents_band(agents_band: Optional[str]) -> TelemetryBaseline:
    """Return the baseline telemetry for an agents band.

    Unknown or missing bands fall back to the smallest band ("1-10").
    """
    run_count, peak = BAND_BASELINES.get(
        agents_band or DEFAULT_AGENTS_BAND, BAND_BASELINES[DEFAULT_AGENTS_BAND]
    )
    return TelemetryBaseline(run_count=run_count, peak_concurrency=peak)


def build_telemetry_reading(
    baseline: TelemetryBaseline,
    consent: bool,
    provider: str,
    window_days: int = 30,
    rng: Optional[random.Random] = None,
) -> TelemetryReading:
    """Apply consent policy and jitter to a baseline.

    Without consent the reading is all zeros with an empty provider mapping
    and no retry rate: "no usable telemetry", not an error.
    """
    if not consent:
        return TelemetryReading(window_days=window_days)

    rng = rng or random.Random()
    run_count = baseline.run_count + rng.randint(0, RUN_JITTER_MAX)
    peak = baseline.peak_concurrency + rng.randint(0, PEAK_JITTER_MAX)
    retry_rate = round(rng.uniform(*RETRY_RATE_RANGE), 2)

    return TelemetryReading(
        window_days=window_days,
        run_count=run_count,
        peak_concurrency=peak,
        provider_usage={
            provider: PRIMARY_PROVIDER_SHARE,
            "Other": round(1 - PRIMARY_PROVIDER_SHARE, 2),
        },
        token_proxy=run_count * TOKENS_PER_RUN,
        retry_rate=retry_rate,
    )
