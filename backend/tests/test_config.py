"""Tests for settings loading."""

import pytest

from swimmeret.config import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SWIMMERET_DEFAULT_PROVIDER", raising=False)
        settings = Settings(db_path="data/test.db")
        assert settings.default_provider == "Claude"
        assert settings.default_pool_type == "code_agents"
        assert settings.seed_demo is True

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("SWIMMERET_DEFAULT_PROVIDER", "Gemini")
        assert get_settings().default_provider == "Gemini"

    def test_rejects_windows_mount_path(self, monkeypatch):
        # WAL needs shared-memory locking that /mnt/ drvfs mounts lack
        monkeypatch.setenv("SWIMMERET_DB_PATH", "/mnt/c/swimmeret.db")
        with pytest.raises(RuntimeError, match="ext4"):
            get_settings()
