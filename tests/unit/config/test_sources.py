"""Unit tests for source configuration models."""

import pytest
from pydantic import ValidationError

from curator.config.sources import (
    DevToConfig,
    EcosystemProgramsConfig,
    GitHubConfig,
    HackerNewsConfig,
    RSSConfig,
    SourceDefinition,
)


class TestHackerNewsConfig:
    """Tests for Hacker News configuration."""

    def test_default_values(self):
        """Test default configuration values."""
        config = HackerNewsConfig()
        assert config.tags == "show_hn"
        assert config.limit == 50
        assert config.min_points == 10
        assert config.request_timeout == 10.0

    def test_limit_validation(self):
        """Test limit must be between 1 and 100."""
        with pytest.raises(ValidationError):
            HackerNewsConfig(limit=0)
        with pytest.raises(ValidationError):
            HackerNewsConfig(limit=101)

    def test_min_points_validation(self):
        """Test min_points must be non-negative."""
        assert HackerNewsConfig(min_points=0).min_points == 0
        with pytest.raises(ValidationError):
            HackerNewsConfig(min_points=-1)


class TestGitHubConfig:
    """Tests for GitHub configuration."""

    def test_sort_validation(self):
        """Test sort accepts only GitHub's sort fields."""
        assert GitHubConfig(sort="stars").sort == "stars"
        with pytest.raises(ValidationError):
            GitHubConfig(sort="popularity")

    def test_token_optional(self):
        """Test the token defaults to None."""
        assert GitHubConfig().token is None


class TestDevToConfig:
    """Tests for dev.to configuration."""

    def test_default_tags(self):
        """Test default tag list."""
        assert DevToConfig().tags == ["startup", "web3"]

    def test_top_days_range(self):
        """Test top_days bounds."""
        with pytest.raises(ValidationError):
            DevToConfig(top_days=0)


class TestRSSConfig:
    """Tests for RSS configuration."""

    def test_default_values(self):
        """Test defaults."""
        config = RSSConfig()
        assert config.feed_url is None
        assert config.limit == 20
        assert config.content_type == "resource"

    def test_content_type_validation(self):
        """Test content_type must name a known type."""
        assert RSSConfig(content_type="funding").content_type == "funding"
        with pytest.raises(ValidationError):
            RSSConfig(content_type="video")


class TestEcosystemProgramsConfig:
    """Tests for the program catalog configuration."""

    def test_inline_programs(self):
        """Test inline programs are validated."""
        config = EcosystemProgramsConfig.model_validate(
            {"programs": [{"name": "Grants", "url": "https://example.com/grants"}]}
        )
        assert config.programs[0].description == ""
        assert config.catalog_url is None

    def test_program_requires_url(self):
        """Test that a program without a URL is rejected."""
        with pytest.raises(ValidationError):
            EcosystemProgramsConfig.model_validate({"programs": [{"name": "Grants"}]})


class TestSourceDefinition:
    """Tests for catalog entries."""

    def test_defaults(self):
        """Test entries are enabled with empty params by default."""
        definition = SourceDefinition(name="feed", type="rss")
        assert definition.enabled is True
        assert definition.params == {}

    def test_name_required(self):
        """Test that an empty name is rejected."""
        with pytest.raises(ValidationError):
            SourceDefinition(name="", type="rss")
