"""Demo data for an empty database.

Seeds one forming pool with three verified builders, their incidents,
usage snapshots, verification scores, pledges and guardrail settings.
Does nothing when any pool already exists.
"""

import structlog
from sqlalchemy.orm import Session

from swimmeret.config import get_settings
from swimmeret.pools.ledger import (
    DEFAULT_NEXT_THRESHOLD_SEATS,
    DEFAULT_POOL_NAME,
    DEFAULT_TARGET_TERMS,
    DEFAULT_THRESHOLD_SEATS,
    slugify,
)
from swimmeret.pools.models import Pledge, Pool
from swimmeret.stability.models import (
    GuardrailSetting,
    Incident,
    UsageSnapshot,
    User,
    VerificationScore,
)

logger = structlog.get_logger(__name__)

# (email, incident_type, seats_band, agents_band, urgency)
SEED_BUILDERS = [
    ("seed-one@example.com", "throttled", "4-12", "50-200", "today"),
    ("seed-two@example.com", "warned", "2-3", "10-50", "this week"),
    ("seed-three@example.com", "canceled", "13+", "200+", "this month"),
]

# (run_count, peak_concurrency, provider_share, token_proxy, retry_rate)
SEED_TELEMETRY = [
    (7200, 90, 0.78, 1_800_000, 0.06),
    (2100, 28, 0.64, 540_000, 0.04),
    (14200, 210, 0.82, 3_400_000, 0.08),
]

# (score, tier, reasons)
SEED_SCORES = [
    (92, "power", ["Run volume over 5,000 in 30 days", "Peak concurrency over 60", "High provider usage"]),
    (74, "verified", ["Run volume over 1,000 in 30 days", "Peak concurrency over 20"]),
    (98, "power", ["Run volume over 10,000 in 30 days", "Peak concurrency over 200"]),
]

# (seats_intended, wtp_band)
SEED_PLEDGES = [(12, "mid"), (8, "low"), (7, "high")]

# (cap_concurrency, jitter_backoff, loop_limiter, cache_dedupe); third builder has none
SEED_GUARDRAILS = [
    (True, True, True, False),
    (True, False, True, True),
]


def seed_demo_data(db: Session) -> bool:
    """Populate an empty database with the demo pool.

    Returns True when data was inserted, False when the database already
    holds a pool.
    """
    if db.query(Pool.id).first() is not None:
        logger.info("seed_skipped", reason="pools_present")
        return False

    provider = get_settings().default_provider
    pool = Pool(
        pool_type="code_agents",
        provider=provider,
        name=DEFAULT_POOL_NAME,
        slug=slugify(DEFAULT_POOL_NAME),
        threshold_seats=DEFAULT_THRESHOLD_SEATS,
        next_threshold_seats=DEFAULT_NEXT_THRESHOLD_SEATS,
        target_terms=list(DEFAULT_TARGET_TERMS),
        status="forming",
    )
    db.add(pool)
    db.flush()

    for index, (email, incident_type, seats_band, agents_band, urgency) in enumerate(
        SEED_BUILDERS
    ):
        user = User(email=email, workspace_id="ws_seed")
        db.add(user)
        db.flush()

        db.add(
            Incident(
                user_id=user.id,
                incident_type=incident_type,
                provider=provider,
                seats_band=seats_band,
                agents_band=agents_band,
                urgency=urgency,
                consent_telemetry=True,
            )
        )

        run_count, peak, share, token_proxy, retry_rate = SEED_TELEMETRY[index]
        db.add(
            UsageSnapshot(
                user_id=user.id,
                window_days=30,
                run_count=run_count,
                peak_concurrency=peak,
                provider_usage={provider: share, "Other": round(1 - share, 2)},
                token_proxy=token_proxy,
                retry_rate=retry_rate,
            )
        )

        score, tier, reasons = SEED_SCORES[index]
        db.add(
            VerificationScore(user_id=user.id, score=score, tier=tier, reasons=reasons)
        )

        seats, wtp_band = SEED_PLEDGES[index]
        db.add(
            Pledge(
                pool_id=pool.id,
                user_id=user.id,
                seats_intended=seats,
                wtp_band=wtp_band,
                contact=email,
                is_verified=True,
            )
        )

        if index < len(SEED_GUARDRAILS):
            cap, jitter, loop, dedupe = SEED_GUARDRAILS[index]
            db.add(
                GuardrailSetting(
                    user_id=user.id,
                    cap_concurrency=cap,
                    jitter_backoff=jitter,
                    loop_limiter=loop,
                    cache_dedupe=dedupe,
                    applied=True,
                )
            )

    db.flush()
    logger.info(
        "demo_data_seeded",
        pool_id=pool.id,
        slug=pool.slug,
        builders=len(SEED_BUILDERS),
    )
    return True
