"""Pool directory and pledge ledger.

join_pool finds or forms the pool for a (provider, pool_type) key.
upsert_pledge writes a user's pledge, stamping it with the verification
tier current at write time. Both flush; the router commits.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from sqlalchemy.orm import Session

from swimmeret.config import get_settings
from swimmeret.db.base import utcnow
from swimmeret.exceptions import PoolNotFoundError
from swimmeret.pools.models import Pledge, Pool
from swimmeret.stability.service import get_latest_verification, get_user
from swimmeret.stability.verification import VERIFIED_TIERS

logger = logging.getLogger(__name__)

DEFAULT_POOL_NAME = "Heavy Agent Builders - Stable Lane"
DEFAULT_THRESHOLD_SEATS = 50
DEFAULT_NEXT_THRESHOLD_SEATS = 100
DEFAULT_TARGET_TERMS = [
    "Throughput floor with priority lane during peak",
    "Policy notice window before enforcement changes",
    "Clear acceptable-use envelope for automation",
    "Dedicated escalation path for verified builders",
]


def slugify(text: str) -> str:
    """Lowercase, collapse non-alphanumerics to '-', strip edge dashes."""
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


# ---------------------------------------------------------------------------
# Pool lookups
# ---------------------------------------------------------------------------


def get_pool(db: Session, pool_id: int | str) -> Pool:
    """Get a pool by ID. Raises PoolNotFoundError if not found.

    Accepts the raw path segment; an id that is not an integer cannot match
    any pool.
    """
    try:
        key = int(pool_id)
    except (TypeError, ValueError):
        key = None
    # SQLite INTEGER is 64-bit signed
    pool = db.get(Pool, key) if key is not None and -(2**63) <= key < 2**63 else None
    if pool is None:
        raise PoolNotFoundError(detail=f"Pool ID {pool_id} not found")
    return pool


def get_pool_by_slug(db: Session, slug: str) -> Pool:
    """Get a pool by its share-link slug. Raises PoolNotFoundError if not found."""
    pool = db.query(Pool).filter(Pool.slug == slug).first()
    if pool is None:
        raise PoolNotFoundError(detail=f"Pool slug '{slug}' not found")
    return pool


def get_pledge(db: Session, pool_id: int, user_id: int) -> Optional[Pledge]:
    return (
        db.query(Pledge)
        .filter(Pledge.pool_id == pool_id, Pledge.user_id == user_id)
        .first()
    )


# ---------------------------------------------------------------------------
# Pool directory
# ---------------------------------------------------------------------------


def join_pool(
    db: Session,
    user_id: Optional[int] = None,
    provider: Optional[str] = None,
    pool_type: Optional[str] = None,
) -> tuple[Pool, Optional[Pledge]]:
    """Find or form the pool for (provider, pool_type).

    Returns the pool and the caller's existing pledge to it (None when the
    caller has not pledged yet or no user_id is given).
    """
    settings = get_settings()
    provider = provider or settings.default_provider
    pool_type = pool_type or settings.default_pool_type

    pool = (
        db.query(Pool)
        .filter(Pool.provider == provider, Pool.pool_type == pool_type)
        .first()
    )
    if pool is None:
        slug = slugify(DEFAULT_POOL_NAME)
        if db.query(Pool.id).filter(Pool.slug == slug).first() is not None:
            slug = slugify(f"{DEFAULT_POOL_NAME} {provider} {pool_type}")
        pool = Pool(
            pool_type=pool_type,
            provider=provider,
            name=DEFAULT_POOL_NAME,
            slug=slug,
            threshold_seats=DEFAULT_THRESHOLD_SEATS,
            next_threshold_seats=DEFAULT_NEXT_THRESHOLD_SEATS,
            target_terms=list(DEFAULT_TARGET_TERMS),
            status="forming",
        )
        db.add(pool)
        db.flush()
        logger.info("Formed pool %d for %s/%s", pool.id, provider, pool_type)

    pledge = get_pledge(db, pool.id, user_id) if user_id is not None else None
    return pool, pledge


# ---------------------------------------------------------------------------
# Pledge ledger
# ---------------------------------------------------------------------------


def upsert_pledge(
    db: Session,
    pool_id: int | str,
    user_id: int,
    seats_intended: int,
    wtp_band: str,
    contact: Optional[str] = None,
    referral_code_used: Optional[str] = None,
) -> Pledge:
    """Create or overwrite the user's pledge to a pool.

    is_verified is taken from the user's most recent verification score
    (no score counts as unverified) and stays as written. A non-empty
    contact also becomes the user's email.

    Raises:
        PoolNotFoundError: if pool_id does not exist
        UserNotFoundError: if user_id does not exist
    """
    pool_id = get_pool(db, pool_id).id
    user = get_user(db, user_id)

    verification = get_latest_verification(db, user_id)
    is_verified = verification is not None and verification.tier in VERIFIED_TIERS

    pledge = get_pledge(db, pool_id, user_id)
    if pledge is None:
        pledge = Pledge(
            pool_id=pool_id,
            user_id=user_id,
            seats_intended=seats_intended,
            wtp_band=wtp_band,
            contact=contact or "",
            referral_code_used=referral_code_used or None,
            is_verified=is_verified,
        )
        db.add(pledge)
    else:
        pledge.seats_intended = seats_intended
        pledge.wtp_band = wtp_band
        pledge.contact = contact or pledge.contact
        pledge.referral_code_used = referral_code_used or pledge.referral_code_used
        pledge.is_verified = is_verified
        pledge.updated_at = utcnow()

    if contact:
        user.email = contact

    db.flush()
    logger.info(
        "Pledge %d: pool=%d user=%d seats=%d verified=%s",
        pledge.id,
        pool_id,
        user_id,
        seats_intended,
        is_verified,
    )
    return pledge
