"""Canonical item construction.

Sources map their native records through ``build_item``, which validates
the type-specific metadata against a pydantic model and the item itself
against ContentItem. The content type is decided here, once, and carried
through the rest of the pipeline.

All helpers are pure so that transforming the same raw record twice
yields identical items.
"""

import html
import re
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from curator.core.exceptions import ContentValidationError
from curator.models.content import ContentType
from curator.services.collector.base import ContentItem

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")

MAX_DESCRIPTION_LENGTH = 1000


# ============================================
# Typed metadata
# ============================================


class _MetadataBase(BaseModel):
    """Open map with typed known keys; unknown keys are kept as-is."""

    model_config = ConfigDict(extra="allow")

    tags: list[str] = Field(default_factory=list)


class ProjectMetadata(_MetadataBase):
    """Startup/project metadata.

    Attributes:
        team_size: Number of people on the team
        funding_raised: Total funding raised (USD)
        founded_year: Year the project started
        launch_date: Launch or last activity date
        stars: GitHub stargazers
        points: Community votes (e.g. HN points)
        comments: Discussion size
        owner: Owner or organization handle
        language: Primary programming language
    """

    team_size: int | None = Field(default=None, ge=0)
    funding_raised: float | None = Field(default=None, ge=0)
    founded_year: int | None = Field(default=None, ge=1900, le=2100)
    launch_date: datetime | None = None
    stars: int | None = Field(default=None, ge=0)
    points: int | None = Field(default=None, ge=0)
    comments: int | None = Field(default=None, ge=0)
    owner: str | None = None
    language: str | None = None


class FundingMetadata(_MetadataBase):
    """Funding program metadata.

    Attributes:
        organization: Organization running the program
        amount_min: Smallest award (USD)
        amount_max: Largest award or pool size (USD)
        deadline: Application deadline
        ecosystem: Ecosystem/chain the program serves
        eligibility: Eligibility criteria
    """

    organization: str | None = None
    amount_min: float | None = Field(default=None, ge=0)
    amount_max: float | None = Field(default=None, ge=0)
    deadline: datetime | None = None
    ecosystem: str | None = None
    eligibility: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_amounts(self) -> "FundingMetadata":
        """Validate that amount_min does not exceed amount_max."""
        if (
            self.amount_min is not None
            and self.amount_max is not None
            and self.amount_min > self.amount_max
        ):
            raise ValueError("amount_min must not exceed amount_max")
        return self


class ResourceMetadata(_MetadataBase):
    """Resource/news metadata.

    Attributes:
        author: Author name
        resource_type: article, news, guide, ...
        published_at: Publication date
        reactions: Positive reactions
        comments: Comment count
        reading_time: Reading time in minutes
    """

    author: str | None = None
    resource_type: str | None = None
    published_at: datetime | None = None
    reactions: int | None = Field(default=None, ge=0)
    comments: int | None = Field(default=None, ge=0)
    reading_time: int | None = Field(default=None, ge=0)


METADATA_MODELS: dict[ContentType, type[_MetadataBase]] = {
    ContentType.PROJECT: ProjectMetadata,
    ContentType.FUNDING: FundingMetadata,
    ContentType.RESOURCE: ResourceMetadata,
}


# ============================================
# Builders
# ============================================


def build_item(
    *,
    title: Any,
    url: Any,
    description: Any,
    source: str,
    content_type: ContentType | str,
    fetched_at: datetime,
    metadata: dict[str, Any] | None = None,
) -> ContentItem:
    """Build a validated ContentItem.

    A missing description falls back to the title so that items with only
    a headline still satisfy the non-empty invariant.

    Raises:
        ContentValidationError: If the metadata or item fails validation
    """
    content_type = ContentType(content_type)
    title_text = clean_text(title)
    description_text = clean_text(description, MAX_DESCRIPTION_LENGTH) or title_text

    try:
        meta = METADATA_MODELS[content_type].model_validate(metadata or {})
    except ValidationError as e:
        raise ContentValidationError("metadata", _first_error(e)) from e

    try:
        return ContentItem(
            title=title_text,
            url=url if isinstance(url, str) else "",
            description=description_text,
            source=source,
            type=content_type,
            metadata=meta.model_dump(mode="json", exclude_none=True),
            fetched_at=fetched_at,
        )
    except ValidationError as e:
        field = str(e.errors()[0]["loc"][0]) if e.errors() else "item"
        raise ContentValidationError(field, _first_error(e)) from e


def clean_text(value: Any, max_length: int | None = None) -> str:
    """Strip HTML tags, unescape entities, collapse whitespace.

    Args:
        value: Raw text (non-strings become "")
        max_length: Truncate to this many characters

    Returns:
        Cleaned text
    """
    if not isinstance(value, str):
        return ""
    text = _WS_RE.sub(" ", html.unescape(_TAG_RE.sub(" ", value))).strip()
    if max_length is not None and len(text) > max_length:
        text = text[: max_length - 3].rstrip() + "..."
    return text


def parse_datetime(value: Any) -> datetime | None:
    """Parse ISO-8601, RFC-822 or unix-epoch values into aware UTC datetimes.

    Returns:
        Datetime, or None if the value is empty or unparseable
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, int | float) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=UTC)
    elif isinstance(value, str):
        text = value.strip()
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            try:
                parsed = parsedate_to_datetime(text)
            except (TypeError, ValueError):
                return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _first_error(e: ValidationError) -> str:
    errors = e.errors()
    if not errors:
        return str(e)
    first = errors[0]
    loc = ".".join(str(part) for part in first["loc"])
    return f"{loc}: {first['msg']}" if loc else first["msg"]


__all__ = [
    "ProjectMetadata",
    "FundingMetadata",
    "ResourceMetadata",
    "METADATA_MODELS",
    "MAX_DESCRIPTION_LENGTH",
    "build_item",
    "clean_text",
    "parse_datetime",
]
