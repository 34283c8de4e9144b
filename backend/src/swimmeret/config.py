"""Application configuration.

Loads settings from .env file with SWIMMERET_ prefix.
The engine runs SQLite in WAL mode, so the database path must not sit on a
WSL2 /mnt/ (NTFS/drvfs) mount where WAL shared-memory locking is unreliable.
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Swimmeret application settings.

    All settings are loaded from environment variables with SWIMMERET_ prefix,
    or from a .env file in the working directory.
    """

    db_path: str = "data/swimmeret.db"
    debug: bool = False
    default_provider: str = "Claude"
    default_pool_type: str = "code_agents"
    counterparty_label: str = "Buyer-of-record: TBD (Swimmeret / partner / SPV)"
    seed_demo: bool = True
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = {
        "env_file": ".env",
        "env_prefix": "SWIMMERET_",
    }

    @model_validator(mode="after")
    def validate_db_path_not_ntfs(self) -> "Settings":
        """Reject database paths on NTFS mounts to prevent WAL corruption."""
        if self.db_path.startswith("/mnt/"):
            raise ValueError(
                "Database path must be on ext4 filesystem, not NTFS (/mnt/). "
                "Use a path under /home/ or a relative data/ directory."
            )
        return self


def get_settings() -> Settings:
    """Create and return a Settings instance.

    Raises a clear error message if the environment holds invalid values.
    """
    try:
        return Settings()
    except Exception as e:
        raise RuntimeError(
            f"Failed to load Swimmeret settings: {e}\n"
            "Check the SWIMMERET_* environment variables and the .env file."
        ) from e
