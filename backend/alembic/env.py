"""Alembic migration runner using the application's SQLite engine.

Uses the pre-configured engine from swimmeret.db.engine, which already
applies the WAL / foreign key PRAGMAs on connect.
"""

from logging.config import fileConfig

from alembic import context

# Import all model modules to register them with Base.metadata
import swimmeret.pools.models  # noqa: F401
import swimmeret.stability.models  # noqa: F401
from swimmeret.db.base import Base
from swimmeret.db.engine import engine

# Alembic Config object
config = context.config

# Set up Python logging from the ini file
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Target metadata for autogenerate support
target_metadata = Base.metadata


def run_migrations_online() -> None:
    """Run migrations using the application's SQLite engine."""
    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=True,
        )
        with context.begin_transaction():
            context.run_migrations()


run_migrations_online()
