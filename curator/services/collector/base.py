"""Base interfaces and DTOs for content collection.

This module defines the core data structures and abstract interfaces
used throughout the ingestion pipeline:

    fetch() -> FetchResult -> transform() -> ContentItem -> score -> ScoredItem
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any, ClassVar, Generic, TypeVar

import httpx
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    JsonValue,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from curator.core.exceptions import ContentValidationError, SourceFetchError
from curator.core.logging import get_logger
from curator.infrastructure.http_client import HTTPClient
from curator.models.content import ContentType

logger = get_logger(__name__)

ConfigT = TypeVar("ConfigT", bound=BaseModel)

_HTTP_URL = TypeAdapter(HttpUrl)


class FetchResult(BaseModel):
    """Raw payload from one source fetch.

    A failed fetch is a result with ``error`` set, never an exception, so
    one broken source cannot abort the others.

    Attributes:
        source: Source name
        data: Source-native response (parsed JSON, feed text, ...)
        fetched_at: When the fetch completed
        error: Failure description, None on success
        status_code: HTTP status code of a failed request, if any
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    source: str
    data: Any = None
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    error: str | None = None
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        """True when the fetch succeeded."""
        return self.error is None


class ContentItem(BaseModel):
    """Canonical content item, independent of source.

    Attributes:
        title: Non-empty title
        url: Absolute http(s) URL, the identity key
        description: Non-empty description
        source: Name of the originating source
        type: Content type, decided once at transform time
        metadata: Typed open map of type-specific fields
        fetched_at: When the item was fetched
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    url: str
    description: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1)
    type: ContentType
    metadata: dict[str, JsonValue] = Field(default_factory=dict)
    fetched_at: datetime

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        """Strip surrounding whitespace before the emptiness check."""
        return v.strip() if isinstance(v, str) else v

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Require an absolute http(s) URL; keep the original spelling."""
        v = v.strip()
        try:
            _HTTP_URL.validate_python(v)
        except ValidationError as e:
            raise ValueError(f"not an absolute http(s) URL: {v!r}") from e
        return v


class ScoreComponents(BaseModel):
    """Rule-based factor points before aggregation."""

    quality: int = Field(ge=0, le=100, description="Content quality points")
    relevance: int = Field(ge=0, le=100, description="Keyword relevance points")
    freshness: int = Field(ge=0, le=100, description="Recency points")
    completeness: int = Field(ge=0, le=100, description="Data completeness points")
    fit_adjustment: int = Field(default=0, description="Type-specific band bonus or penalty")

    @property
    def total(self) -> int:
        """Sum of all factors, unclamped."""
        return (
            self.quality + self.relevance + self.freshness + self.completeness + self.fit_adjustment
        )


class AIAssessment(BaseModel):
    """Structured answer from the AI scorer.

    Attributes:
        relevance: Fit with the target audience (0-10)
        quality: Substance and credibility (0-10)
        urgency: Time sensitivity (0-10)
        summary: One or two sentence summary
        reasoning: Why these scores were given
        confidence: Self-reported confidence (0-1)
        details: Type-specific extra fields
    """

    relevance: float = Field(ge=0, le=10)
    quality: float = Field(ge=0, le=10)
    urgency: float = Field(ge=0, le=10)
    summary: str = Field(default="", max_length=2000)
    reasoning: str = Field(default="", max_length=4000)
    confidence: float = Field(default=0.5, ge=0, le=1)
    details: dict[str, JsonValue] = Field(default_factory=dict)

    @property
    def score_100(self) -> float:
        """Mean of the three sub-scores on the 0-100 scale."""
        return (self.relevance + self.quality + self.urgency) / 3 * 10


class ScoredItem(ContentItem):
    """Content item with its final score.

    Attributes:
        score: Final score (0-100)
        category: "high-fit", "medium-fit" or "low-fit"
        confidence: Confidence in the score (0-1)
        rule_score: Rule-based score before AI blending
        components: Rule-based factor breakdown
        ai: AI assessment, None when not used or unavailable
        ai_summary: Short summary from the AI scorer
        ai_reasoning: Reasoning from the AI scorer
    """

    score: int = Field(ge=0, le=100)
    category: str
    confidence: float = Field(ge=0.0, le=1.0)
    rule_score: int = Field(ge=0, le=100)
    components: ScoreComponents
    ai: AIAssessment | None = None
    ai_summary: str | None = None
    ai_reasoning: str | None = None


class BaseSource(ABC, Generic[ConfigT]):
    """Abstract base class for all source collectors.

    Subclasses implement ``_fetch_raw`` (network) plus ``_records`` and
    ``_transform_record`` (pure mapping). The base class turns network
    failures into failed FetchResults and skips malformed records.

    Attributes:
        name: Source name from the catalog
        content_type: Default content type produced by the source
    """

    content_type: ClassVar[ContentType] = ContentType.RESOURCE

    def __init__(
        self,
        config: ConfigT,
        name: str,
        http_client: HTTPClient | None = None,
    ) -> None:
        """Initialize source collector.

        Args:
            config: Typed source configuration
            name: Source name (becomes ContentItem.source)
            http_client: Shared HTTP client; a private one is created if omitted
        """
        self._config = config
        self.name = name
        self._owns_client = http_client is None
        self._http_client = http_client or HTTPClient()

    @property
    def config(self) -> ConfigT:
        """Source configuration."""
        return self._config

    @classmethod
    @abstractmethod
    def build_config(cls, overrides: dict[str, Any]) -> ConfigT:
        """Build the typed config from catalog parameters."""

    # ============================================
    # Fetch
    # ============================================

    async def fetch(self) -> FetchResult:
        """Fetch the raw payload.

        Returns:
            FetchResult; ``error`` is set on network, HTTP or parse failure
        """
        try:
            data = await self._fetch_raw()
        except SourceFetchError as e:
            logger.warning("Source fetch failed", source=self.name, error=e.reason)
            return FetchResult(
                source=self.name, error=e.message, status_code=e.status_code
            )
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("Source returned error status", source=self.name, status=status)
            return FetchResult(
                source=self.name, error=f"{self.name}: HTTP {status}", status_code=status
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Source fetch failed", source=self.name, error=str(e))
            return FetchResult(source=self.name, error=f"{self.name}: {e}")

        return FetchResult(source=self.name, data=data)

    @abstractmethod
    async def _fetch_raw(self) -> Any:
        """Perform the network call(s) and return the source-native payload."""

    # ============================================
    # Transform
    # ============================================

    def transform(self, raw: FetchResult) -> list[ContentItem]:
        """Map a raw payload to canonical items.

        Deterministic and side-effect free; malformed records are skipped.

        Args:
            raw: Successful fetch result

        Returns:
            Canonical content items in payload order
        """
        if not raw.ok or raw.data is None:
            return []

        items: list[ContentItem] = []
        skipped = 0
        for record in self._records(raw.data):
            try:
                item = self._transform_record(record, raw.fetched_at)
            except (
                KeyError,
                TypeError,
                ValueError,
                AttributeError,
                ContentValidationError,
            ) as e:
                skipped += 1
                logger.debug("Skipping malformed record", source=self.name, error=str(e))
                continue
            if item is not None:
                items.append(item)

        if skipped:
            logger.info("Skipped malformed records", source=self.name, skipped=skipped)
        return items

    @abstractmethod
    def _records(self, data: Any) -> Iterable[Any]:
        """Split the payload into raw records."""

    @abstractmethod
    def _transform_record(self, record: Any, fetched_at: datetime) -> ContentItem | None:
        """Map one raw record; return None to filter it out."""

    # ============================================
    # Convenience
    # ============================================

    async def collect(self) -> list[ContentItem]:
        """Fetch and transform in one call.

        Raises:
            SourceFetchError: If the fetch failed
        """
        logger.info("Collecting from source", source=self.name)
        result = await self.fetch()
        if not result.ok:
            raise SourceFetchError(self.name, result.error or "unknown", result.status_code)
        items = self.transform(result)
        logger.info("Source collection complete", source=self.name, items=len(items))
        return items

    async def health_check(self) -> bool:
        """Check if the source is reachable.

        Returns:
            True if a fetch succeeds
        """
        result = await self.fetch()
        return result.ok

    async def close(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._owns_client:
            await self._http_client.close()


__all__ = [
    "FetchResult",
    "ContentItem",
    "ScoreComponents",
    "AIAssessment",
    "ScoredItem",
    "BaseSource",
]
