"""Unit tests for ContentDeduplicator.

Tests cover:
- URL normalization
- Text similarity
- Exact URL matches across queue and production tables
- Fuzzy title matches, thresholds and tie-breaking
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from curator.config import DedupConfig
from curator.infrastructure.datastore import DataStore
from curator.models.content import ReviewStatus
from curator.services.collector.deduplicator import (
    ContentDeduplicator,
    DedupReason,
    normalize_text,
    normalize_url,
    similarity,
)


def create_queue_record(
    title: str,
    url: str,
    description: str = "Unrelated body text",
    fetched_at: datetime | None = None,
) -> dict[str, Any]:
    """Create a queue row with a pre-normalized URL."""
    return {
        "title": title,
        "description": description,
        "url": url,
        "normalized_url": normalize_url(url),
        "source": "test",
        "score": 60,
        "category": "medium-fit",
        "confidence": 0.6,
        "score_factors": {},
        "metadata": {},
        "fetched_at": fetched_at or datetime.now(UTC),
        "status": ReviewStatus.PENDING_REVIEW,
    }


def create_production_record(title: str, url: str) -> dict[str, Any]:
    """Create a production row."""
    return {
        "title": title,
        "description": "Approved body text",
        "url": url,
        "normalized_url": normalize_url(url),
        "source": "test",
        "score": 80,
        "category": "high-fit",
        "confidence": 0.9,
        "metadata": {},
        "approved_by": "alice",
        "approved_at": datetime.now(UTC),
    }


@pytest.fixture
def deduplicator(store: DataStore) -> ContentDeduplicator:
    """Create deduplicator with title-only comparison."""
    return ContentDeduplicator(store, DedupConfig(compare_description=False))


class TestNormalizeUrl:
    """Tests for URL normalization."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://WWW.Example.com/Path/", "https://example.com/path"),
            ("https://example.com:443/a", "https://example.com/a"),
            ("http://example.com:8080/a", "http://example.com:8080/a"),
            ("https://example.com/a#section", "https://example.com/a"),
            ("https://example.com/a?utm_source=x&b=2&a=1", "https://example.com/a?a=1&b=2"),
            ("https://example.com/a?utm_whatever=1&ref=hn", "https://example.com/a"),
            ("  https://example.com/a  ", "https://example.com/a"),
        ],
    )
    def test_normalization(self, url, expected):
        """Test normalization rules."""
        assert normalize_url(url) == expected

    def test_equivalent_urls_collapse(self):
        """Test that tracking variants normalize to the same key."""
        a = normalize_url("https://www.example.com/launch/?utm_campaign=spring")
        b = normalize_url("https://example.com/launch?fbclid=abc")
        assert a == b

    def test_custom_tracking_params(self):
        """Test configured tracking parameters."""
        assert normalize_url("https://example.com/?src=x", tracking_params=["src"]) == (
            "https://example.com"
        )


class TestSimilarity:
    """Tests for text similarity."""

    def test_normalize_text(self):
        """Test punctuation and case folding."""
        assert normalize_text("Hello,  World!") == "hello world"
        assert normalize_text(None) == ""

    def test_identical_after_normalization(self):
        """Test that punctuation-only differences are identical."""
        assert similarity("Show HN: Rustlings!", "show hn rustlings") == 1.0

    def test_empty(self):
        """Test that empty input never matches."""
        assert similarity("", "anything") == 0.0

    def test_near_and_far(self):
        """Test relative ordering of close and unrelated titles."""
        title = "Open source vector database in Rust"
        near = similarity(title, "Open-source vector database, in Rust!")
        far = similarity(title, "Grant program for DAO tooling")

        assert near == 1.0
        assert far < 0.5


class TestIsDuplicate:
    """Tests for duplicate detection against storage."""

    @pytest.mark.asyncio
    async def test_new_item(self, deduplicator, make_item):
        """Test that an empty store has no duplicates."""
        result = await deduplicator.is_duplicate(make_item())

        assert result.is_duplicate is False
        assert result.duplicate_of is None

    @pytest.mark.asyncio
    async def test_exact_url_in_queue(self, deduplicator, store, make_item):
        """Test exact match on normalized URL."""
        row = await store.insert(
            "queue_projects", create_queue_record("Something else", "https://example.com/tool")
        )

        result = await deduplicator.is_duplicate(
            make_item(title="Different title", url="https://www.example.com/tool/?utm_source=hn")
        )

        assert result.is_duplicate is True
        assert result.reason == DedupReason.EXACT_URL
        assert result.duplicate_of == str(row["id"])
        assert result.match.similarity == 1.0

    @pytest.mark.asyncio
    async def test_exact_url_in_production_other_type(self, deduplicator, store, make_item):
        """Test that production tables of every type are checked."""
        await store.insert("resources", create_production_record("Guide", "https://example.com/g"))

        result = await deduplicator.is_duplicate(make_item(url="https://example.com/g"))

        assert result.is_duplicate is True
        assert result.match.table == "resources"

    @pytest.mark.asyncio
    async def test_fuzzy_title_match(self, deduplicator, store, make_item):
        """Test that near-identical titles under another URL are duplicates."""
        await store.insert(
            "queue_projects",
            create_queue_record("Launchpad for indie founders", "https://other.example/launchpad"),
        )

        result = await deduplicator.is_duplicate(make_item(title="Launchpad for Indie Founders!"))

        assert result.is_duplicate is True
        assert result.reason == DedupReason.FUZZY_MATCH

    @pytest.mark.asyncio
    async def test_below_threshold(self, deduplicator, store, make_item):
        """Test that unrelated titles are not duplicates."""
        await store.insert(
            "queue_projects",
            create_queue_record("Quarterly grants for DAO tooling", "https://grants.example"),
        )

        result = await deduplicator.is_duplicate(make_item())

        assert result.is_duplicate is False

    @pytest.mark.asyncio
    async def test_exact_beats_fuzzy(self, deduplicator, store, make_item):
        """Test that an exact URL match wins over a perfect title match."""
        await store.insert(
            "queue_projects",
            create_queue_record("Launchpad for indie founders", "https://other.example/a"),
        )
        exact = await store.insert(
            "queue_resources",
            create_queue_record("Unrelated", "https://example.com/launchpad"),
        )

        result = await deduplicator.is_duplicate(make_item())

        assert result.reason == DedupReason.EXACT_URL
        assert result.duplicate_of == str(exact["id"])

    @pytest.mark.asyncio
    async def test_tie_goes_to_most_recent(self, deduplicator, store, make_item):
        """Test that equal similarity prefers the most recently fetched record."""
        now = datetime.now(UTC)
        await store.insert(
            "queue_projects",
            create_queue_record(
                "Launchpad for indie founders",
                "https://a.example/1",
                fetched_at=now - timedelta(days=3),
            ),
        )
        newer = await store.insert(
            "queue_resources",
            create_queue_record(
                "Launchpad for indie founders", "https://b.example/2", fetched_at=now
            ),
        )

        result = await deduplicator.is_duplicate(make_item())

        assert result.duplicate_of == str(newer["id"])

    @pytest.mark.asyncio
    async def test_description_blend(self, store, make_item):
        """Test that differing descriptions can pull a title match below threshold."""
        deduplicator = ContentDeduplicator(store, DedupConfig(title_weight=0.5))
        await store.insert(
            "queue_projects",
            create_queue_record(
                "Launchpad for indie founders",
                "https://other.example/x",
                description="Quarterly grant program for zero knowledge research teams",
            ),
        )

        result = await deduplicator.is_duplicate(make_item())

        assert result.is_duplicate is False
