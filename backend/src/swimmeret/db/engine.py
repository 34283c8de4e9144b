"""SQLite engine factory with per-connection PRAGMAs.

Every connection gets WAL journaling, foreign key enforcement and a busy
timeout so concurrent writers wait instead of failing immediately.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from swimmeret.config import get_settings


def set_sqlite_pragmas(dbapi_connection, connection_record):
    """Set SQLite PRAGMAs on every new connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def create_db_engine(db_path: str | None = None) -> Engine:
    """Create a SQLAlchemy engine for the Swimmeret SQLite database.

    - Falls back to settings.db_path when no path is given
    - Event listener sets WAL mode, foreign keys, and busy timeout on each connection
    - Creates parent directory of db_path if it doesn't exist
    """
    settings = get_settings()
    db_path = db_path or settings.db_path

    # Ensure the parent directory exists
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        f"sqlite:///{db_path}",
        pool_pre_ping=True,
        echo=settings.debug,
    )
    event.listen(engine, "connect", set_sqlite_pragmas)
    return engine


# Module-level singleton engine
engine = create_db_engine()

# Session factory bound to the engine
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def get_db() -> Generator[Session, None, None]:
    """Context manager yielding a database session.

    Usage:
        with get_db() as db:
            pools = db.query(Pool).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
