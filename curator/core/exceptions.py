"""Custom exceptions for the Curator application.

This module defines all custom exceptions used throughout the application.
All exceptions inherit from CuratorError for easy catching.

Exception classes include context dictionaries for structured logging
and debugging. Use the `context` property to access additional details.
"""

from typing import Any


class CuratorError(Exception):
    """Base exception for all Curator errors.

    All custom exceptions in the application should inherit from this class.
    Provides a context dictionary for structured error information.

    Attributes:
        context: Dictionary with additional error context

    Example:
        >>> try:
        ...     raise CuratorError("Something went wrong", context={"item_id": "123"})
        ... except CuratorError as e:
        ...     print(f"Error: {e}, Context: {e.context}")
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize CuratorError.

        Args:
            message: Error message
            context: Optional dictionary with additional context
        """
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def with_context(self, **kwargs: Any) -> "CuratorError":
        """Add additional context to the exception.

        Args:
            **kwargs: Key-value pairs to add to context

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization.

        Returns:
            Dictionary with error type, message, and context
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


# ============================================
# Database Errors
# ============================================


class DatabaseError(CuratorError):
    """Base exception for database-related errors."""

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        operation: str | None = None,
    ) -> None:
        """Initialize DatabaseError.

        Args:
            message: Error message
            context: Additional context
            operation: Database operation that failed (e.g., "insert", "update")
        """
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        super().__init__(message, context=ctx)
        self.operation = operation


class RecordNotFoundError(DatabaseError):
    """Raised when a database record is not found.

    Attributes:
        model: The table or model that was queried
        record_id: The ID that was not found
    """

    def __init__(
        self,
        model: str,
        record_id: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize RecordNotFoundError.

        Args:
            model: Name of the table or model
            record_id: ID that was not found
            context: Additional context
        """
        ctx = context or {}
        ctx.update({"model": model, "record_id": record_id})
        super().__init__(f"{model} with id={record_id} not found", context=ctx)
        self.model = model
        self.record_id = record_id


class StorageConflictError(DatabaseError):
    """Raised when a write violates a uniqueness constraint.

    The pipeline treats this as a duplicate that slipped past the
    deduplication filter; it is not a run failure.

    Attributes:
        table: Table the write targeted
    """

    def __init__(
        self,
        table: str,
        message: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize StorageConflictError.

        Args:
            table: Table the write targeted
            message: Optional driver message
            context: Additional context
        """
        ctx = context or {}
        ctx["table"] = table
        super().__init__(
            message or f"Uniqueness constraint violated on {table}",
            context=ctx,
            operation=ctx.get("operation"),
        )
        self.table = table


class StorageUnavailableError(DatabaseError):
    """Raised when the data store cannot serve requests.

    Covers both connection failures and a missing relation. A missing
    relation requires out-of-band schema provisioning and is never retried.

    Attributes:
        table: Table involved, if known
        missing_relation: True when the relation does not exist
    """

    def __init__(
        self,
        message: str,
        table: str | None = None,
        missing_relation: bool = False,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize StorageUnavailableError.

        Args:
            message: Error message
            table: Table involved, if known
            missing_relation: Whether the relation does not exist
            context: Additional context
        """
        ctx = context or {}
        if table:
            ctx["table"] = table
        ctx["missing_relation"] = missing_relation
        super().__init__(message, context=ctx)
        self.table = table
        self.missing_relation = missing_relation


# ============================================
# Configuration Errors
# ============================================


class ConfigError(CuratorError):
    """Base exception for configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigError.

        Args:
            message: Error message
            config_path: Path to the config file/key
            context: Additional context
        """
        ctx = context or {}
        if config_path:
            ctx["config_path"] = config_path
        super().__init__(message, context=ctx)


class ConfigValidationError(ConfigError):
    """Raised when configuration validation fails.

    Supports two usage patterns:
    1. Simple: ConfigValidationError("error message")
    2. Structured: ConfigValidationError(field="name", value="x", reason="invalid")

    Attributes:
        field: Field that failed validation (optional)
        value: Invalid value (optional)
        reason: Validation failure reason (optional)
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        field: str | None = None,
        value: Any = None,
        reason: str | None = None,
        config_path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigValidationError.

        Args:
            message: Simple error message (if not using structured format)
            field: Field that failed validation
            value: Invalid value
            reason: Reason for validation failure
            config_path: Path to the config file/key
            context: Additional context
        """
        ctx = context or {}
        if field is not None:
            ctx.update({"field": field, "value": str(value), "reason": reason})
            msg = message or f"Invalid config value for {field}: {reason}"
        else:
            msg = message or "Configuration validation failed"
        super().__init__(msg, config_path=config_path, context=ctx)
        self.field = field
        self.value = value
        self.reason = reason


class ConfigNotFoundError(ConfigError):
    """Raised when a configuration file or key is not found."""

    def __init__(
        self,
        config_path: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigNotFoundError.

        Args:
            config_path: Missing file or key
            context: Additional context
        """
        super().__init__(
            f"Configuration not found: {config_path}",
            config_path=config_path,
            context=context,
        )


# ============================================
# Service Errors
# ============================================


class ServiceError(CuratorError):
    """Base exception for service-level errors."""

    def __init__(
        self,
        message: str,
        service_name: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ServiceError.

        Args:
            message: Error message
            service_name: Name of the failing service
            context: Additional context
        """
        ctx = context or {}
        if service_name:
            ctx["service_name"] = service_name
        super().__init__(message, context=ctx)
        self.service_name = service_name


class ExternalAPIError(ServiceError):
    """Raised when an external API call fails.

    Attributes:
        status_code: HTTP status code, if any
    """

    def __init__(
        self,
        message: str,
        service_name: str | None = None,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ExternalAPIError.

        Args:
            message: Error message
            service_name: Name of the external service
            status_code: HTTP status code
            context: Additional context
        """
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message, service_name=service_name, context=ctx)
        self.status_code = status_code


class SourceFetchError(ExternalAPIError):
    """Raised when a content source cannot be fetched.

    Recovered by the pipeline: the source is skipped and the error is
    recorded in the run result.
    """

    def __init__(
        self,
        source: str,
        reason: str,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize SourceFetchError.

        Args:
            source: Source name
            reason: Failure description
            status_code: HTTP status code, if any
            context: Additional context
        """
        super().__init__(
            f"{source} fetch failed: {reason}",
            service_name=source,
            status_code=status_code,
            context=context,
        )
        self.source = source
        self.reason = reason


class AIScoringError(ServiceError):
    """Raised when AI scoring is unavailable or returns invalid output.

    The scorer recovers by falling back to rule-based scoring.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize AIScoringError."""
        super().__init__(message, service_name="ai_scorer", context=context)


class PipelineError(ServiceError):
    """Raised when a pipeline run must abort (storage or configuration failure)."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize PipelineError."""
        super().__init__(message, service_name="pipeline", context=context)


# ============================================
# Content Errors
# ============================================


class ContentError(CuratorError):
    """Base exception for content-related errors."""


class ContentValidationError(ContentError):
    """Raised when a content item fails validation.

    Attributes:
        field: Offending field
        reason: Why validation failed
    """

    def __init__(
        self,
        field: str,
        reason: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ContentValidationError.

        Args:
            field: Offending field
            reason: Why validation failed
            context: Additional context
        """
        ctx = context or {}
        ctx.update({"field": field, "reason": reason})
        super().__init__(f"Invalid content field '{field}': {reason}", context=ctx)
        self.field = field
        self.reason = reason


# ============================================
# Review Errors
# ============================================


class ReviewError(CuratorError):
    """Base exception for review/approval errors."""


class InvalidActionError(ReviewError):
    """Raised when a review request names an unknown action or content type."""

    def __init__(self, action: str, allowed: list[str]) -> None:
        """Initialize InvalidActionError.

        Args:
            action: The rejected value
            allowed: Accepted values
        """
        super().__init__(
            f"Invalid review action '{action}'. Allowed: {', '.join(allowed)}",
            context={"action": action, "allowed": allowed},
        )
        self.action = action
        self.allowed = allowed
