"""Unit tests for canonical item construction."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from curator.core.exceptions import ContentValidationError
from curator.models.content import ContentType
from curator.services.collector.transformer import (
    MAX_DESCRIPTION_LENGTH,
    build_item,
    clean_text,
    parse_datetime,
)

FETCHED_AT = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


def build(**overrides):
    """Build an item with defaults for omitted fields."""
    kwargs = {
        "title": "Example project",
        "url": "https://example.com/project",
        "description": "Example description",
        "source": "test",
        "content_type": ContentType.PROJECT,
        "fetched_at": FETCHED_AT,
    }
    kwargs.update(overrides)
    return build_item(**kwargs)


class TestCleanText:
    """Tests for clean_text."""

    def test_strips_html_and_entities(self):
        """Test tag removal, entity decoding and whitespace collapsing."""
        raw = "<p>Hello&nbsp;<b>world</b> &amp;\n friends</p>"
        assert clean_text(raw) == "Hello world & friends"

    def test_non_string(self):
        """Test that non-strings become empty text."""
        assert clean_text(None) == ""
        assert clean_text(42) == ""

    def test_truncates(self):
        """Test truncation with ellipsis."""
        text = clean_text("word " * 100, max_length=20)
        assert len(text) <= 20
        assert text.endswith("...")


class TestParseDatetime:
    """Tests for parse_datetime."""

    def test_iso_with_z(self):
        """Test ISO-8601 with Z suffix."""
        assert parse_datetime("2026-01-02T03:04:05Z") == datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)

    def test_rfc822(self):
        """Test RFC-822 dates from feeds."""
        parsed = parse_datetime("Fri, 02 Jan 2026 03:04:05 +0100")
        assert parsed == datetime(2026, 1, 2, 2, 4, 5, tzinfo=UTC)

    def test_epoch(self):
        """Test unix timestamps."""
        assert parse_datetime(0) == datetime(1970, 1, 1, tzinfo=UTC)

    def test_naive_assumed_utc(self):
        """Test that naive datetimes are treated as UTC."""
        assert parse_datetime(datetime(2026, 1, 1)).tzinfo == UTC

    def test_converts_offsets(self):
        """Test that aware datetimes are converted to UTC."""
        value = datetime(2026, 1, 1, 9, tzinfo=timezone(timedelta(hours=9)))
        assert parse_datetime(value) == datetime(2026, 1, 1, tzinfo=UTC)

    @pytest.mark.parametrize("value", [None, "", "not a date", True, [2026]])
    def test_unparseable(self, value):
        """Test that garbage yields None."""
        assert parse_datetime(value) is None


class TestBuildItem:
    """Tests for build_item."""

    def test_basic(self):
        """Test a valid project item."""
        item = build(metadata={"stars": 120, "owner": "octo"})

        assert item.type == ContentType.PROJECT
        assert item.metadata == {"stars": 120, "owner": "octo", "tags": []}
        assert item.fetched_at == FETCHED_AT

    def test_description_falls_back_to_title(self):
        """Test that a missing description uses the title."""
        item = build(description=None)
        assert item.description == "Example project"

    def test_description_truncated(self):
        """Test that long descriptions are bounded."""
        item = build(description="x" * (MAX_DESCRIPTION_LENGTH * 2))
        assert len(item.description) == MAX_DESCRIPTION_LENGTH

    def test_metadata_dates_serialized(self):
        """Test that typed metadata is dumped to JSON-safe values."""
        item = build(
            content_type=ContentType.RESOURCE,
            metadata={"published_at": "2026-01-02T00:00:00Z", "author": "Ada"},
        )
        assert item.metadata["published_at"] == "2026-01-02T00:00:00Z"

    def test_unknown_metadata_kept(self):
        """Test that metadata is an open map."""
        item = build(metadata={"hn_id": "123"})
        assert item.metadata["hn_id"] == "123"

    def test_deterministic(self):
        """Test that the same input yields the same item."""
        assert build(metadata={"stars": 5}) == build(metadata={"stars": 5})

    @pytest.mark.parametrize(
        ("overrides", "field"),
        [
            ({"title": "   "}, "title"),
            ({"url": "not-a-url"}, "url"),
            ({"url": "ftp://example.com/x"}, "url"),
            ({"url": None}, "url"),
        ],
    )
    def test_invalid_fields(self, overrides, field):
        """Test that invalid core fields raise ContentValidationError."""
        with pytest.raises(ContentValidationError) as exc_info:
            build(**overrides)
        assert exc_info.value.field == field

    def test_invalid_metadata(self):
        """Test that typed metadata is validated."""
        with pytest.raises(ContentValidationError) as exc_info:
            build(content_type=ContentType.FUNDING, metadata={"amount_min": 10, "amount_max": 5})
        assert exc_info.value.field == "metadata"

    def test_negative_stars_rejected(self):
        """Test numeric bounds in project metadata."""
        with pytest.raises(ContentValidationError):
            build(metadata={"stars": -1})
