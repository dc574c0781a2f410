"""Unit tests for queue and production models."""

import pytest

from curator.models.base import TimestampMixin, UUIDMixin
from curator.models.content import (
    TABLES,
    TERMINAL_STATUSES,
    ContentType,
    FundingProgram,
    Project,
    QueueProject,
    QueueResource,
    Resource,
    ReviewStatus,
    all_content_tables,
    production_table_for,
    queue_table_for,
)


class TestTableRegistry:
    """Tests for the content type to table mapping."""

    def test_every_type_has_both_tables(self):
        """Test that each content type maps to a queue and a production table."""
        assert set(TABLES) == set(ContentType)
        assert queue_table_for(ContentType.PROJECT) == "queue_projects"
        assert production_table_for(ContentType.FUNDING) == "funding_programs"
        assert queue_table_for("resource") == "queue_resources"

    def test_unknown_type(self):
        """Test that an unknown type name is rejected."""
        with pytest.raises(ValueError):
            queue_table_for("video")

    def test_all_content_tables_queue_first(self):
        """Test listing order of all tables."""
        assert all_content_tables() == [
            "queue_projects",
            "queue_funding_programs",
            "queue_resources",
            "projects",
            "funding_programs",
            "resources",
        ]


class TestColumns:
    """Tests for table definitions."""

    @pytest.mark.parametrize("model", [QueueProject, QueueResource, Project, Resource])
    def test_normalized_url_is_unique(self, model):
        """Test that every table enforces one row per normalized URL."""
        assert model.__table__.columns["normalized_url"].unique is True

    def test_metadata_column_name(self):
        """Test that item metadata is stored in a column named metadata."""
        assert "metadata" in QueueProject.__table__.columns
        assert QueueProject.__table__.columns["metadata"].nullable is False

    def test_queue_has_review_columns(self):
        """Test that queue tables carry status and reviewer columns."""
        columns = QueueProject.__table__.columns
        for name in ("status", "reviewed_by", "reviewed_at", "reviewer_notes", "score_factors"):
            assert name in columns
        assert columns["status"].index is True

    def test_production_type_columns(self):
        """Test type-specific production columns."""
        assert "github_stars" in Project.__table__.columns
        assert "deadline" in FundingProgram.__table__.columns
        assert "published_at" in Resource.__table__.columns
        assert "status" not in Project.__table__.columns
        assert Project.__table__.columns["approved_by"].nullable is False

    def test_mixins(self):
        """Test that every table uses the UUID and timestamp mixins."""
        for model in (QueueProject, Project):
            assert issubclass(model, UUIDMixin)
            assert issubclass(model, TimestampMixin)
            assert model.__table__.columns["id"].primary_key is True
            assert model.__table__.columns["created_at"].nullable is False


class TestReviewStatus:
    """Tests for ReviewStatus."""

    def test_values(self):
        """Test the stored string values."""
        assert [s.value for s in ReviewStatus] == [
            "pending_review",
            "under_review",
            "needs_info",
            "approved",
            "rejected",
        ]

    def test_terminal_statuses(self):
        """Test which statuses end the review."""
        assert TERMINAL_STATUSES == {ReviewStatus.APPROVED, ReviewStatus.REJECTED}
