"""Unit tests for the exception hierarchy."""

from curator.core.exceptions import (
    ConfigNotFoundError,
    ConfigValidationError,
    CuratorError,
    DatabaseError,
    InvalidActionError,
    PipelineError,
    RecordNotFoundError,
    ReviewError,
    ServiceError,
    SourceFetchError,
    StorageConflictError,
    StorageUnavailableError,
)


class TestCuratorError:
    """Tests for the base exception."""

    def test_message_and_context(self):
        """Test that message and context are kept."""
        error = CuratorError("Something went wrong", context={"item_id": "123"})

        assert error.message == "Something went wrong"
        assert str(error) == "Something went wrong"
        assert error.context == {"item_id": "123"}

    def test_with_context_chains(self):
        """Test that with_context adds keys and returns self."""
        error = CuratorError("boom")
        assert error.with_context(source="github") is error
        assert error.context["source"] == "github"

    def test_to_dict(self):
        """Test serialization for API responses."""
        data = RecordNotFoundError("QueueRecord", "abc").to_dict()

        assert data["error_type"] == "RecordNotFoundError"
        assert data["message"] == "QueueRecord with id=abc not found"
        assert data["context"]["record_id"] == "abc"


class TestStorageErrors:
    """Tests for storage error taxonomy."""

    def test_conflict_is_database_error(self):
        """Test StorageConflictError carries the table."""
        error = StorageConflictError("queue_projects")

        assert isinstance(error, DatabaseError)
        assert error.table == "queue_projects"
        assert "queue_projects" in error.message

    def test_unavailable_missing_relation(self):
        """Test StorageUnavailableError records a missing relation."""
        error = StorageUnavailableError("gone", table="projects", missing_relation=True)

        assert error.missing_relation is True
        assert error.context == {"table": "projects", "missing_relation": True}


class TestServiceErrors:
    """Tests for service-level errors."""

    def test_source_fetch_error(self):
        """Test SourceFetchError message and status code."""
        error = SourceFetchError("github", "HTTP 503", status_code=503)

        assert error.message == "github fetch failed: HTTP 503"
        assert error.status_code == 503
        assert error.context["service_name"] == "github"

    def test_pipeline_error_is_service_error(self):
        """Test PipelineError names the pipeline service."""
        error = PipelineError("storage down")
        assert isinstance(error, ServiceError)
        assert error.service_name == "pipeline"


class TestConfigErrors:
    """Tests for configuration errors."""

    def test_structured_validation_error(self):
        """Test structured ConfigValidationError."""
        error = ConfigValidationError(field="weights", value=90, reason="must sum to 100")

        assert error.message == "Invalid config value for weights: must sum to 100"
        assert error.context["value"] == "90"

    def test_not_found_error(self):
        """Test ConfigNotFoundError message."""
        error = ConfigNotFoundError("sources.nope")
        assert error.message == "Configuration not found: sources.nope"
        assert error.context["config_path"] == "sources.nope"


def test_invalid_action_is_review_error():
    """Test InvalidActionError lists allowed actions."""
    error = InvalidActionError("publish", ["approve", "reject"])

    assert isinstance(error, ReviewError)
    assert error.allowed == ["approve", "reject"]
    assert "approve, reject" in error.message
