"""Pool ORM models: Pool and Pledge.

One pool exists per (provider, pool_type). A pledge is unique per
(pool_id, user_id); pledging again overwrites the row and no history is
kept. Pledge.is_verified records the tier at write time and is never
recomputed from later scores.
"""

from typing import Optional

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Integer,
    JSON,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from swimmeret.db.base import Base, TimestampMixin


class Pool(TimestampMixin, Base):
    """A demand pool negotiating bulk terms with one provider."""

    __tablename__ = "pools"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    pool_type: Mapped[str] = mapped_column(String(50), nullable=False)
    provider: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    threshold_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    next_threshold_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    target_terms: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default="forming", nullable=False
    )  # "forming", "negotiating", "active"

    __table_args__ = (
        UniqueConstraint("provider", "pool_type", name="uq_pools_provider_type"),
    )


class Pledge(TimestampMixin, Base):
    """A builder's seat commitment and price willingness toward a pool."""

    __tablename__ = "pledges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    pool_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pools.id"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    seats_intended: Mapped[int] = mapped_column(Integer, nullable=False)
    wtp_band: Mapped[str] = mapped_column(
        String(20), nullable=False
    )  # "low", "mid", "high"
    contact: Mapped[str] = mapped_column(String(320), default="", nullable=False)
    referral_code_used: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True
    )
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        UniqueConstraint("pool_id", "user_id", name="uq_pledges_pool_user"),
    )
