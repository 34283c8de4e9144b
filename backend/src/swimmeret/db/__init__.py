"""Database layer: SQLite engine, base models, session management, demo seeding."""

from swimmeret.db.base import Base, TimestampMixin
from swimmeret.db.engine import SessionLocal, create_db_engine, get_db

__all__ = [
    "Base",
    "TimestampMixin",
    "create_db_engine",
    "SessionLocal",
    "get_db",
]
