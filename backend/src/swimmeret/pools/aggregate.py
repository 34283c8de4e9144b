"""Pool demand aggregation.

build_pool_aggregate recomputes every statistic from the pool's current
pledges and the pledging users' incidents, usage snapshots and guardrail
settings. It only reads, holds no state and caches nothing, so two calls
with no write in between return identical results.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Optional, TypeVar

from sqlalchemy.orm import Session

from swimmeret.config import get_settings
from swimmeret.pools.ledger import get_pool
from swimmeret.pools.models import Pledge, Pool
from swimmeret.pools.schemas import (
    PoolAggregate,
    PoolResponse,
    PoolTotals,
    WorkloadProfile,
)
from swimmeret.stability.models import GuardrailSetting, Incident, UsageSnapshot
from swimmeret.stability.verification import round_half_up

SEAT_BUCKETS = ("1-3", "4-12", "13+")
WTP_BANDS = ("low", "mid", "high")
URGENCY_BUCKETS = ("today", "this week", "this month")
UNKNOWN_URGENCY = "unknown"

# Monthly price per seat by willingness-to-pay band
WTP_PRICES = {"low": 300, "mid": 600, "high": 1000}
FALLBACK_WTP_PRICE = 400

Record = TypeVar("Record", Incident, UsageSnapshot)


def bucket_seat_count(seats: int) -> str:
    if seats <= 3:
        return "1-3"
    if seats <= 12:
        return "4-12"
    return "13+"


def wtp_band_price(band: Optional[str]) -> int:
    return WTP_PRICES.get(band, FALLBACK_WTP_PRICE)


def _latest_by_user(db: Session, model: type[Record], user_ids: list[int]) -> dict[int, Record]:
    """Map each user to their most recent row of model (created_at, then id)."""
    if not user_ids:
        return {}
    rows = (
        db.query(model)
        .filter(model.user_id.in_(user_ids))
        .order_by(model.created_at.desc(), model.id.desc())
        .all()
    )
    latest: dict[int, Record] = {}
    for row in rows:
        latest.setdefault(row.user_id, row)
    return latest


def _mean(values: Iterable[float]) -> float:
    values = list(values)
    return sum(values) / len(values) if values else 0.0


def _workload_profile(
    snapshots: list[UsageSnapshot], provider: str
) -> WorkloadProfile:
    if not snapshots:
        return WorkloadProfile()
    return WorkloadProfile(
        avg_run_count=round_half_up(_mean(s.run_count or 0 for s in snapshots)),
        avg_peak_concurrency=round_half_up(
            _mean(s.peak_concurrency or 0 for s in snapshots)
        ),
        provider_usage_percent=round_half_up(
            _mean((s.provider_usage or {}).get(provider, 0) for s in snapshots)
            * 100
        ),
    )


def aggregate_pool(db: Session, pool: Pool) -> PoolAggregate:
    """Compute the aggregate for an already-loaded pool."""
    pledges = (
        db.query(Pledge)
        .filter(Pledge.pool_id == pool.id)
        .order_by(Pledge.id)
        .all()
    )
    user_ids = list(dict.fromkeys(p.user_id for p in pledges))

    totals = PoolTotals(
        pledged_seats=sum(p.seats_intended for p in pledges),
        verified_seats=sum(p.seats_intended for p in pledges if p.is_verified),
        pledge_count=len(pledges),
    )

    histogram = dict.fromkeys(SEAT_BUCKETS, 0)
    wtp_distribution = dict.fromkeys(WTP_BANDS, 0)
    implied_monthly = 0
    for pledge in pledges:
        histogram[bucket_seat_count(pledge.seats_intended)] += 1
        # Stored bands outside low/mid/high still get their own key
        wtp_distribution[pledge.wtp_band] = (
            wtp_distribution.get(pledge.wtp_band, 0) + 1
        )
        implied_monthly += pledge.seats_intended * wtp_band_price(pledge.wtp_band)

    incidents = _latest_by_user(db, Incident, user_ids)
    urgency_counts = Counter(
        incidents[uid].urgency
        if uid in incidents and incidents[uid].urgency in URGENCY_BUCKETS
        else UNKNOWN_URGENCY
        for uid in user_ids
    )
    urgency_distribution = {
        bucket: urgency_counts.get(bucket, 0)
        for bucket in (*URGENCY_BUCKETS, UNKNOWN_URGENCY)
    }

    snapshots = _latest_by_user(db, UsageSnapshot, user_ids)
    workload = _workload_profile(
        [snapshots[uid] for uid in user_ids if uid in snapshots], pool.provider
    )

    applied_users = set()
    if user_ids:
        applied_users = {
            uid
            for (uid,) in db.query(GuardrailSetting.user_id).filter(
                GuardrailSetting.user_id.in_(user_ids),
                GuardrailSetting.applied.is_(True),
            )
        }
    guardrail_adoption = (
        round_half_up(len(applied_users) / len(user_ids) * 100) if user_ids else 0
    )

    return PoolAggregate(
        pool=PoolResponse.model_validate(pool),
        totals=totals,
        histogram=histogram,
        wtp_distribution=wtp_distribution,
        urgency_distribution=urgency_distribution,
        implied_monthly=implied_monthly,
        workload_profile=workload,
        guardrail_adoption=guardrail_adoption,
        target_terms=list(pool.target_terms or []),
        counterparty=get_settings().counterparty_label,
    )


def build_pool_aggregate(db: Session, pool_id: int | str) -> PoolAggregate:
    """Recompute the aggregate for a pool.

    Raises:
        PoolNotFoundError: if pool_id does not exist
    """
    return aggregate_pool(db, get_pool(db, pool_id))
