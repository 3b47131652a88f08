"""Tests for environment-based settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from trippal.config import ENV_VAR_KEYS, Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VAR_KEYS.values():
        monkeypatch.delenv(var, raising=False)


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self):
        """Test values used when nothing is configured."""
        settings = Settings.from_env(load_env_file=False)
        assert settings.api_url == "http://localhost:3001"
        assert settings.db_path == Path("db.json")
        assert settings.history_limit == 20

    def test_environment_overrides(self, monkeypatch):
        """Test reading values from the environment."""
        monkeypatch.setenv("TRIPPAL_API_URL", "http://trips.example:8080")
        monkeypatch.setenv("TRIPPAL_HTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("TRIPPAL_HISTORY_LIMIT", "5")
        settings = Settings.from_env(load_env_file=False)
        assert settings.api_url == "http://trips.example:8080"
        assert settings.http_timeout == 2.5
        assert settings.history_limit == 5

    def test_empty_values_keep_defaults(self, monkeypatch):
        """Test that empty variables are ignored."""
        monkeypatch.setenv("TRIPPAL_DB_PATH", "")
        assert Settings.from_env(load_env_file=False).db_path == Path("db.json")

    def test_invalid_values(self, monkeypatch):
        """Test that bad numbers are rejected."""
        monkeypatch.setenv("TRIPPAL_HTTP_TIMEOUT", "-1")
        with pytest.raises(ValidationError):
            Settings.from_env(load_env_file=False)
