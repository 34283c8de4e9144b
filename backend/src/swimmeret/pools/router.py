"""Pools REST API router.

Provides pool join, pledging and the pool aggregate (by id or share slug)
under /api/pools, and the analytics view of the same aggregate under
/api/lab/pools.

Error handling: PoolNotFoundError / UserNotFoundError -> 404,
other SwimmeretError -> 400.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from swimmeret.exceptions import PoolNotFoundError, SwimmeretError, UserNotFoundError
from swimmeret.pools.aggregate import aggregate_pool, build_pool_aggregate
from swimmeret.pools.ledger import get_pool_by_slug, join_pool, upsert_pledge
from swimmeret.pools.schemas import (
    JoinPoolRequest,
    JoinPoolResponse,
    PledgeRequest,
    PledgeResponse,
    PledgeResult,
    PoolAggregate,
    PoolResponse,
)

pools_router = APIRouter(prefix="/api/pools", tags=["pools"])
lab_router = APIRouter(prefix="/api/lab/pools", tags=["lab"])


# -- DB dependency ------------------------------------------------------------


def _get_db():
    """Yield a SQLAlchemy session. Lazy-imports engine so routers import without a database."""
    from swimmeret.db.engine import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# -- Pool Endpoints -----------------------------------------------------------
# Static routes must be defined before parameterized {pool_id} routes.
# pool_id stays a string so a non-numeric id is an unknown pool (404).


@pools_router.post("/join", response_model=JoinPoolResponse)
def join_pool_endpoint(
    request: JoinPoolRequest,
    db: Session = Depends(_get_db),
):
    """Find or form the pool for a provider and return the caller's pledge."""
    pool, pledge = join_pool(
        db,
        user_id=request.user_id,
        provider=request.provider,
        pool_type=request.pool_type,
    )
    db.commit()
    return JoinPoolResponse(
        pool=PoolResponse.model_validate(pool),
        pledge=PledgeResponse.model_validate(pledge) if pledge else None,
        share_link=f"/p/{pool.slug}",
    )


@pools_router.get("/slug/{slug}", response_model=PoolAggregate)
def pool_by_slug_endpoint(
    slug: str,
    db: Session = Depends(_get_db),
):
    """Get the pool aggregate for a share-link slug."""
    try:
        return aggregate_pool(db, get_pool_by_slug(db, slug))
    except PoolNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@pools_router.post("/{pool_id}/pledge", response_model=PledgeResult)
def pledge_endpoint(
    pool_id: str,
    request: PledgeRequest,
    db: Session = Depends(_get_db),
):
    """Create or update the caller's pledge, then return the fresh aggregate."""
    try:
        pledge = upsert_pledge(
            db,
            pool_id,
            request.user_id,
            seats_intended=request.seats_intended,
            wtp_band=request.wtp_band,
            contact=request.contact,
            referral_code_used=request.referral_code_used,
        )
        db.commit()
        return PledgeResult(
            pledge=PledgeResponse.model_validate(pledge),
            aggregate=build_pool_aggregate(db, pledge.pool_id),
        )
    except (PoolNotFoundError, UserNotFoundError) as e:
        raise HTTPException(status_code=404, detail=e.message)
    except SwimmeretError as e:
        raise HTTPException(status_code=400, detail=e.message)


@pools_router.get("/{pool_id}", response_model=PoolAggregate)
def pool_endpoint(
    pool_id: str,
    db: Session = Depends(_get_db),
):
    """Get the pool aggregate."""
    try:
        return build_pool_aggregate(db, pool_id)
    except PoolNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


# -- Lab (analytics view) -----------------------------------------------------


@lab_router.get("/{pool_id}", response_model=PoolAggregate)
def lab_pool_endpoint(
    pool_id: str,
    db: Session = Depends(_get_db),
):
    """Analytics view of the pool aggregate."""
    try:
        return build_pool_aggregate(db, pool_id)
    except PoolNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
