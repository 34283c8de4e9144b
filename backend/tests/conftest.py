"""Test fixtures for Swimmeret integration tests.

Uses a temp-file SQLite database with the production PRAGMAs. Each test
runs inside a connection-level transaction that is rolled back afterwards.
"""

import os
import tempfile

# Keep the module-level application engine away from the working directory
os.environ.setdefault(
    "SWIMMERET_DB_PATH", os.path.join(tempfile.gettempdir(), "swimmeret_app_test.db")
)

import pytest  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from swimmeret.db.base import Base  # noqa: E402
from swimmeret.db.engine import set_sqlite_pragmas  # noqa: E402
from swimmeret.pools.ledger import join_pool  # noqa: E402
from swimmeret.pools.models import Pledge, Pool  # noqa: E402, F401 -- ensure models registered
from swimmeret.stability.models import (  # noqa: E402, F401 -- ensure models registered
    GuardrailSetting,
    Incident,
    UsageSnapshot,
    User,
    VerificationScore,
)


@pytest.fixture(scope="session")
def test_engine():
    """Create a temp-file SQLite test database engine.

    Creates all tables via Base.metadata.create_all.
    """
    tmpfile = tempfile.NamedTemporaryFile(
        suffix=".db", delete=False, prefix="swimmeret_test_"
    )
    db_path = tmpfile.name
    tmpfile.close()

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    event.listen(engine, "connect", set_sqlite_pragmas)

    # Create all tables
    Base.metadata.create_all(engine)

    yield engine

    # Teardown: drop tables, remove temp file
    Base.metadata.drop_all(engine)
    engine.dispose()
    try:
        os.unlink(db_path)
        for ext in ("-wal", "-shm"):
            wal_path = db_path + ext
            if os.path.exists(wal_path):
                os.unlink(wal_path)
    except OSError:
        pass


@pytest.fixture
def db_session(test_engine):
    """Create a database session for each test.

    Rolls back all changes after each test to maintain isolation.
    """
    connection = test_engine.connect()
    transaction = connection.begin()
    session = Session(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def sample_user(db_session):
    """A registered builder with no telemetry yet."""
    user = User(email="builder@example.com", workspace_id="ws_test")
    db_session.add(user)
    db_session.flush()
    return user


@pytest.fixture
def sample_user_2(db_session):
    """A second registered builder."""
    user = User(email="second@example.com", workspace_id="ws_test")
    db_session.add(user)
    db_session.flush()
    return user


@pytest.fixture
def sample_pool(db_session):
    """The default Claude code_agents pool."""
    pool, _ = join_pool(db_session, provider="Claude", pool_type="code_agents")
    return pool
