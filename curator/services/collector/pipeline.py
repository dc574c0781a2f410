"""Content collection pipeline.

Orchestrates the ingestion flow for every configured source:
1. Fetch the raw payload (bounded by a per-source timeout)
2. Transform to canonical items
3. Deduplicate against queue and production storage
4. Score (rule-based, optionally blended with AI)
5. Enqueue items at or above the score threshold

Source-level failures are recorded and the run moves on to the next
source. Only storage unavailability or configuration errors abort a run.
"""

import asyncio
import time
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from curator.config import PipelineConfig
from curator.core.config_loader import load_source_catalog
from curator.core.exceptions import (
    ConfigError,
    PipelineError,
    StorageUnavailableError,
)
from curator.core.logging import get_logger
from curator.infrastructure.http_client import HTTPClient
from curator.services.collector.base import BaseSource, ContentItem
from curator.services.collector.deduplicator import ContentDeduplicator
from curator.services.collector.queue_manager import ContentQueueManager
from curator.services.collector.scorer import ContentScorer
from curator.services.collector.sources.factory import create_source

logger = get_logger(__name__)

SourceFactory = Callable[[str], BaseSource[Any]]


class ItemOutcome(str, Enum):
    """What happened to one item."""

    DUPLICATE = "duplicate"
    BELOW_THRESHOLD = "below_threshold"
    CONFLICT = "conflict"
    STORED = "stored"
    ERROR = "error"


class SourceRunStats(BaseModel):
    """Counters for one source within a run."""

    source: str
    fetched: int = 0
    unique: int = 0
    scored: int = 0
    stored: int = 0
    rejected: int = 0
    failed: int = 0
    error: str | None = None
    item_errors: list[str] = Field(default_factory=list)


class RunResult(BaseModel):
    """Aggregate result of one pipeline run.

    Attributes:
        fetched: Items produced by transform across all sources
        unique: Items that passed the duplicate filter
        scored: Items scored
        stored: Queue records inserted
        rejected: Duplicates, conflicts and items scored below the threshold
        failed: Items whose processing raised
        errors: Per-source and per-item failure messages
        duration: Wall time in seconds
    """

    fetched: int = 0
    unique: int = 0
    scored: int = 0
    stored: int = 0
    rejected: int = 0
    failed: int = 0
    errors: list[str] = Field(default_factory=list)
    duration: float = 0.0
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    sources: list[SourceRunStats] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when no source reported an error."""
        return not self.errors

    def add(self, stats: SourceRunStats) -> None:
        """Fold one source's counters into the totals."""
        self.sources.append(stats)
        self.fetched += stats.fetched
        self.unique += stats.unique
        self.scored += stats.scored
        self.stored += stats.stored
        self.rejected += stats.rejected
        self.failed += stats.failed
        if stats.error:
            self.errors.append(stats.error)
        self.errors.extend(stats.item_errors)


class ContentPipeline:
    """Runs fetch, transform, dedup, score and enqueue for each source.

    Holds no run settings; everything run-specific comes from the
    PipelineConfig passed to ``run``.

    Attributes:
        deduplicator: Duplicate filter
        scorer: Content scorer
        queue_manager: Queue writer
    """

    def __init__(
        self,
        deduplicator: ContentDeduplicator,
        scorer: ContentScorer,
        queue_manager: ContentQueueManager,
        http_client: HTTPClient | None = None,
        source_factory: SourceFactory | None = None,
    ):
        """Initialize pipeline.

        Args:
            deduplicator: Duplicate filter
            scorer: Content scorer
            queue_manager: Queue writer
            http_client: HTTP client shared by the sources it creates
            source_factory: Builds a source from its catalog name
                (default: ``create_source`` with the shared client)
        """
        self.deduplicator = deduplicator
        self.scorer = scorer
        self.queue_manager = queue_manager
        self.http_client = http_client
        self._source_factory = source_factory or self._default_factory

    def _default_factory(self, name: str) -> BaseSource[Any]:
        return create_source(name, http_client=self.http_client)

    def resolve_sources(self, config: PipelineConfig) -> list[str]:
        """Source names to run: explicit list, else every enabled catalog entry."""
        if config.sources:
            return list(config.sources)
        return [name for name, d in load_source_catalog().items() if d.enabled]

    async def run(self, config: PipelineConfig) -> RunResult:
        """Execute one full pipeline pass.

        Args:
            config: Run configuration

        Returns:
            RunResult with aggregate and per-source counters

        Raises:
            PipelineError: If storage is unavailable or configuration is invalid
        """
        started = time.monotonic()
        result = RunResult()

        try:
            names = self.resolve_sources(config)
        except ConfigError as e:
            raise PipelineError(f"Invalid source configuration: {e.message}") from e

        logger.info(
            "Pipeline run started",
            sources=names,
            batch_size=config.batch_size,
            score_threshold=config.score_threshold,
            use_ai=config.use_ai,
        )

        for name in names:
            try:
                stats = await self._run_source(name, config)
            except StorageUnavailableError as e:
                logger.error("Storage unavailable, aborting run", source=name, error=e.message)
                raise PipelineError(
                    f"Storage unavailable: {e.message}",
                    context={"source": name, "table": e.table},
                ) from e
            result.add(stats)

        result.duration = round(time.monotonic() - started, 3)
        logger.info(
            "Pipeline run complete",
            fetched=result.fetched,
            unique=result.unique,
            scored=result.scored,
            stored=result.stored,
            rejected=result.rejected,
            errors=len(result.errors),
            duration=result.duration,
        )
        return result

    async def _run_source(self, name: str, config: PipelineConfig) -> SourceRunStats:
        stats = SourceRunStats(source=name)

        try:
            source = self._source_factory(name)
        except ConfigError as e:
            stats.error = f"{name}: {e.message}"
            logger.warning("Source not available", source=name, error=e.message)
            return stats

        try:
            try:
                async with asyncio.timeout(config.source_timeout_seconds):
                    raw = await source.fetch()
            except TimeoutError:
                stats.error = f"{name}: fetch timed out after {config.source_timeout_seconds}s"
                logger.warning("Source fetch timed out", source=name)
                return stats

            if not raw.ok:
                stats.error = raw.error or f"{name}: fetch failed"
                return stats

            items = source.transform(raw)
            if config.max_items_per_source is not None:
                items = items[: config.max_items_per_source]
            stats.fetched = len(items)

            outcomes = await self._process_items(items, config)
        except StorageUnavailableError:
            raise
        except Exception as e:
            error_msg = f"{name}: {e}"
            stats.error = error_msg
            logger.error("Source processing failed", source=name, error=str(e), exc_info=True)
            return stats
        finally:
            await source.close()

        for outcome, message in outcomes:
            if outcome == ItemOutcome.ERROR:
                stats.failed += 1
                stats.item_errors.append(f"{name}: {message}")
                continue
            if outcome == ItemOutcome.DUPLICATE:
                stats.rejected += 1
                continue
            stats.unique += 1
            stats.scored += 1
            if outcome == ItemOutcome.STORED:
                stats.stored += 1
            else:
                stats.rejected += 1

        logger.info(
            "Source processed",
            source=name,
            fetched=stats.fetched,
            unique=stats.unique,
            stored=stats.stored,
            rejected=stats.rejected,
            failed=stats.failed,
        )
        return stats

    async def _process_items(
        self, items: list[ContentItem], config: PipelineConfig
    ) -> list[tuple[ItemOutcome, str | None]]:
        """Process items with at most ``batch_size`` in flight.

        A failing item yields an ERROR outcome with its message and does
        not affect its siblings.

        Raises:
            StorageUnavailableError: Re-raised from any item; siblings are cancelled
        """
        semaphore = asyncio.Semaphore(config.batch_size)

        async def bounded(item: ContentItem) -> tuple[ItemOutcome, str | None]:
            async with semaphore:
                try:
                    return await self._process_item(item, config), None
                except StorageUnavailableError:
                    raise
                except Exception as e:
                    logger.error(
                        "Item processing failed",
                        title=item.title[:50],
                        url=item.url,
                        error=str(e),
                        exc_info=True,
                    )
                    return ItemOutcome.ERROR, str(e)

        try:
            async with asyncio.TaskGroup() as tg:
                tasks = [tg.create_task(bounded(item)) for item in items]
        except ExceptionGroup as eg:
            storage = eg.subgroup(StorageUnavailableError)
            if storage is not None:
                raise _first_leaf(storage) from eg
            raise _first_leaf(eg) from eg

        return [task.result() for task in tasks]

    async def _process_item(self, item: ContentItem, config: PipelineConfig) -> ItemOutcome:
        dedup = await self.deduplicator.is_duplicate(item)
        if dedup.is_duplicate:
            return ItemOutcome.DUPLICATE

        scored = await self.scorer.score_content(item, use_ai=config.use_ai)
        if scored.score < config.score_threshold:
            logger.debug(
                "Item below threshold",
                title=item.title[:50],
                score=scored.score,
                threshold=config.score_threshold,
            )
            return ItemOutcome.BELOW_THRESHOLD

        record = await self.queue_manager.enqueue(scored)
        return ItemOutcome.STORED if record is not None else ItemOutcome.CONFLICT


def _first_leaf(group: BaseExceptionGroup) -> BaseException:
    first = group.exceptions[0]
    while isinstance(first, BaseExceptionGroup):
        first = first.exceptions[0]
    return first


__all__ = [
    "ContentPipeline",
    "RunResult",
    "SourceRunStats",
    "ItemOutcome",
]
