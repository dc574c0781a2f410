"""Unit tests for the source factory."""

from unittest.mock import patch

import pytest

from curator.config.sources import SourceDefinition
from curator.core.config_loader import load_source_catalog
from curator.core.exceptions import ConfigNotFoundError, ConfigValidationError
from curator.infrastructure.http_client import HTTPClient
from curator.services.collector.sources.ecosystem_programs import EcosystemProgramsSource
from curator.services.collector.sources.factory import (
    SOURCE_CLASSES,
    create_source,
    get_all_source_names,
    get_source_class,
)
from curator.services.collector.sources.hackernews import HackerNewsSource
from curator.services.collector.sources.rss import RSSSource


def patch_catalog(*definitions: SourceDefinition):
    """Replace the loaded source catalog."""
    catalog = {d.name: d for d in definitions}
    return patch("curator.core.config_loader.load_source_catalog", return_value=catalog)


class TestCatalog:
    """Tests against the shipped source catalog."""

    def test_all_source_names_in_order(self):
        """Test catalog order is preserved."""
        assert get_all_source_names() == [
            "github",
            "hackernews",
            "devto",
            "yc_blog",
            "crunchbase_news",
            "cointelegraph_funding",
            "ecosystem_programs",
        ]

    def test_enabled_only(self):
        """Test disabled sources are filtered out."""
        names = get_all_source_names(enabled_only=True)

        assert "cointelegraph_funding" not in names
        assert len(names) == 6

    def test_every_catalog_type_is_registered(self):
        """Test each catalog entry maps to a known implementation."""
        for definition in load_source_catalog().values():
            assert get_source_class(definition.type) is not None, definition.name


class TestCreateSource:
    """Tests for create_source()."""

    def test_create_from_catalog(self, mock_http_client: HTTPClient):
        """Test building a source with catalog params and the shared client."""
        source = create_source("hackernews", http_client=mock_http_client)

        assert isinstance(source, HackerNewsSource)
        assert source.name == "hackernews"
        assert source.config.min_points == 10
        assert source._http_client is mock_http_client

    def test_rss_entry_uses_generic_collector(self):
        """Test feed entries build RSS sources with their content type."""
        source = create_source("cointelegraph_funding")

        assert isinstance(source, RSSSource)
        assert source.config.content_type == "funding"

    def test_overrides_take_precedence(self):
        """Test explicit overrides win over catalog params."""
        source = create_source("hackernews", overrides={"min_points": 99})

        assert source.config.min_points == 99

    def test_inline_programs(self):
        """Test the shipped program catalog validates."""
        source = create_source("ecosystem_programs")

        assert isinstance(source, EcosystemProgramsSource)
        assert len(source.config.programs) == 3

    def test_unknown_name(self):
        """Test that names missing from the catalog raise ConfigNotFoundError."""
        with pytest.raises(ConfigNotFoundError):
            create_source("does_not_exist")

    def test_unknown_type(self):
        """Test that an unregistered implementation type is rejected."""
        with patch_catalog(SourceDefinition(name="odd", type="carrier_pigeon")):
            with pytest.raises(ConfigValidationError) as exc_info:
                create_source("odd")

        assert exc_info.value.field == "sources.odd.type"

    def test_invalid_params(self):
        """Test that params failing validation are rejected."""
        with pytest.raises(ConfigValidationError) as exc_info:
            create_source("hackernews", overrides={"limit": 0})

        assert exc_info.value.field == "sources.hackernews.params"

    def test_rss_without_feed_url(self):
        """Test that an RSS entry without a feed URL is rejected."""
        with patch_catalog(SourceDefinition(name="blank_feed", type="rss")):
            with pytest.raises(ConfigValidationError, match="feed_url"):
                create_source("blank_feed")


class TestGetSourceClass:
    """Tests for get_source_class()."""

    def test_known_and_unknown(self):
        """Test lookup by implementation type."""
        assert get_source_class("rss") is RSSSource
        assert get_source_class("nope") is None
        assert set(SOURCE_CLASSES) == {"github", "hackernews", "devto", "rss", "ecosystem_programs"}
