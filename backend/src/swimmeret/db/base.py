"""DeclarativeBase and TimestampMixin for all ORM models."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Timezone-aware current time used for row timestamps."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """SQLAlchemy 2.0 declarative base for all Swimmeret models."""

    pass


class TimestampMixin:
    """Mixin providing created_at and updated_at timestamps.

    Python-side defaults keep microsecond resolution so "most recent" ordering
    is stable between rows written in the same second. server_default covers
    rows inserted outside the ORM (migrations, manual SQL).
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )
