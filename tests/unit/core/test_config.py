"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from curator.core.config import Config


class TestConfig:
    """Tests for Config validation and derived properties."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch):
        """Test default values without environment overrides."""
        monkeypatch.delenv("DATABASE_URL", raising=False)
        config = Config(_env_file=None)

        assert config.app_name == "Curator"
        assert config.is_development is True
        assert config.pipeline_score_threshold == 50
        assert config.database_url.startswith("postgresql+asyncpg://")

    def test_rejects_sync_database_url(self):
        """Test that a sync driver URL is rejected."""
        with pytest.raises(ValidationError, match="async driver"):
            Config(_env_file=None, database_url="postgresql://localhost/curator")

    def test_accepts_sqlite(self):
        """Test that aiosqlite URLs are accepted."""
        config = Config(_env_file=None, database_url="sqlite+aiosqlite:///:memory:")
        assert config.is_sqlite is True

    def test_ai_enabled_requires_a_key(self):
        """Test that AI is enabled only with a provider key."""
        assert Config(_env_file=None, openai_api_key="", anthropic_api_key="").ai_enabled is False
        assert Config(_env_file=None, anthropic_api_key="sk-test").ai_enabled is True

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch):
        """Test that environment variables override defaults."""
        monkeypatch.setenv("PIPELINE_BATCH_SIZE", "25")
        monkeypatch.setenv("APP_ENV", "production")

        config = Config(_env_file=None)

        assert config.pipeline_batch_size == 25
        assert config.is_production is True
