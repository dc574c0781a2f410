"""Review queue manager service.

Stores scored items in the per-type queue tables and answers queue
queries (pending items, status counts). Records are inserted with status
``pending_review`` and are never modified here afterwards; review
actions live in ``curator.services.review``.
"""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field, JsonValue

from curator.config import DedupConfig
from curator.core.exceptions import StorageConflictError
from curator.core.logging import get_logger
from curator.infrastructure.datastore import DataStore, Record
from curator.models.content import TABLES, ContentType, ReviewStatus, queue_table_for
from curator.services.collector.base import ScoredItem
from curator.services.collector.deduplicator import normalize_url

logger = get_logger(__name__)

OPEN_STATUSES = [ReviewStatus.PENDING_REVIEW, ReviewStatus.UNDER_REVIEW, ReviewStatus.NEEDS_INFO]


class QueueItem(BaseModel):
    """Queue record as returned to callers."""

    id: uuid.UUID
    content_type: ContentType
    title: str
    description: str
    url: str
    normalized_url: str
    source: str
    score: int
    category: str
    confidence: float
    status: ReviewStatus
    ai_summary: str | None = None
    ai_reasoning: str | None = None
    score_factors: dict[str, JsonValue] = Field(default_factory=dict)
    metadata: dict[str, JsonValue] = Field(default_factory=dict)
    fetched_at: datetime | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    reviewer_notes: str | None = None
    rejection_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, content_type: ContentType, row: Record) -> "QueueItem":
        """Build from a queue table row."""
        return cls.model_validate({**row, "content_type": content_type})


class TypeQueueStats(BaseModel):
    """Queue statistics for one content type."""

    content_type: ContentType
    table: str
    total: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    latest_created_at: datetime | None = None


class QueueStatus(BaseModel):
    """Statistics across all queue tables."""

    total: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    by_type: dict[str, TypeQueueStats] = Field(default_factory=dict)
    production_total: int = 0
    last_enqueued_at: datetime | None = None


class ContentQueueManager:
    """Manages the per-type review queues.

    Attributes:
        store: Data store (injected)
        dedup_config: Supplies the URL normalization rules
    """

    def __init__(self, store: DataStore, dedup_config: DedupConfig | None = None):
        """Initialize queue manager.

        Args:
            store: Data store
            dedup_config: Dedup configuration (uses defaults if not provided)
        """
        self.store = store
        self.dedup_config = dedup_config or DedupConfig()

    async def enqueue(self, item: ScoredItem) -> Record | None:
        """Insert a scored item as a pending queue record.

        A uniqueness violation means the item is already queued (or raced
        another insert); it is treated as a duplicate, not an error.

        Args:
            item: Scored item

        Returns:
            The inserted record, or None if it already existed
        """
        table = queue_table_for(item.type)
        record = self.build_record(item)
        try:
            inserted = await self.store.insert(table, record)
        except StorageConflictError:
            logger.info(
                "Item already queued (unique constraint)",
                table=table,
                normalized_url=record["normalized_url"],
            )
            return None

        logger.info(
            "Item queued",
            table=table,
            id=str(inserted["id"]),
            score=item.score,
            category=item.category,
        )
        return inserted

    def build_record(self, item: ScoredItem) -> dict[str, Any]:
        """Map a scored item to queue table columns."""
        factors: dict[str, Any] = item.components.model_dump()
        factors["rule_score"] = item.rule_score
        if item.ai is not None:
            factors["ai"] = item.ai.model_dump(
                mode="json", include={"relevance", "quality", "urgency", "confidence", "details"}
            )

        return {
            "title": item.title,
            "description": item.description,
            "url": item.url,
            "normalized_url": normalize_url(
                item.url, self.dedup_config.tracking_params, self.dedup_config.tracking_prefixes
            ),
            "source": item.source,
            "score": item.score,
            "category": item.category,
            "confidence": item.confidence,
            "ai_summary": item.ai_summary,
            "ai_reasoning": item.ai_reasoning,
            "score_factors": factors,
            "metadata": dict(item.metadata),
            "fetched_at": item.fetched_at,
            "status": ReviewStatus.PENDING_REVIEW,
        }

    async def get_pending(
        self,
        content_type: ContentType | None = None,
        limit: int = 50,
        statuses: list[ReviewStatus] | None = None,
    ) -> list[QueueItem]:
        """Items awaiting review, highest score first.

        Args:
            content_type: Restrict to one type (default: all)
            limit: Maximum items per type
            statuses: Statuses to include (default: every non-terminal status)

        Returns:
            Queue items sorted by score descending
        """
        wanted = statuses or OPEN_STATUSES
        types = [content_type] if content_type else list(TABLES)

        items: list[QueueItem] = []
        for ctype in types:
            rows = await self.store.select(
                queue_table_for(ctype),
                {"status__in": wanted},
                order_by=["-score", "created_at"],
                limit=limit,
            )
            items.extend(QueueItem.from_row(ctype, row) for row in rows)

        items.sort(key=lambda i: i.score, reverse=True)
        return items[:limit] if content_type is None else items

    async def find(self, item_id: uuid.UUID | str) -> QueueItem | None:
        """Locate a queue record by id across every queue table."""
        for ctype in TABLES:
            row = await self.store.get(queue_table_for(ctype), {"id": item_id})
            if row is not None:
                return QueueItem.from_row(ctype, row)
        return None

    async def status(self) -> QueueStatus:
        """Counts per type and status, plus production totals.

        Returns:
            QueueStatus snapshot
        """
        result = QueueStatus()
        for ctype, tables in TABLES.items():
            counts = await self.store.count_by(tables.queue, "status")
            by_status = {_status_key(k): v for k, v in counts.items()}
            latest = await self.store.max_value(tables.queue, "created_at")

            type_stats = TypeQueueStats(
                content_type=ctype,
                table=tables.queue,
                total=sum(by_status.values()),
                by_status=by_status,
                latest_created_at=latest,
            )
            result.by_type[ctype.value] = type_stats
            result.total += type_stats.total
            for status, count in by_status.items():
                result.by_status[status] = result.by_status.get(status, 0) + count
            if latest is not None and (
                result.last_enqueued_at is None or _aware(latest) > _aware(result.last_enqueued_at)
            ):
                result.last_enqueued_at = latest

            result.production_total += await self.store.count(tables.production)

        return result

    async def cleanup_rejected(
        self,
        older_than_days: int = 30,
        now: datetime | None = None,
    ) -> dict[str, int]:
        """Delete rejected records reviewed before the cutoff.

        Args:
            older_than_days: Age threshold in days
            now: Reference time (default: current time)

        Returns:
            Deleted count per content type
        """
        if older_than_days < 0:
            raise ValueError("older_than_days must be >= 0")
        cutoff = (now or datetime.now(UTC)) - timedelta(days=older_than_days)

        deleted: dict[str, int] = {}
        for ctype in TABLES:
            deleted[ctype.value] = await self.store.delete(
                queue_table_for(ctype),
                {"status": ReviewStatus.REJECTED, "reviewed_at__lt": cutoff},
            )

        logger.info("Rejected queue records cleaned up", cutoff=cutoff.isoformat(), **deleted)
        return deleted


def _status_key(value: Any) -> str:
    return value.value if isinstance(value, ReviewStatus) else str(value)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


__all__ = [
    "ContentQueueManager",
    "QueueItem",
    "QueueStatus",
    "TypeQueueStats",
    "OPEN_STATUSES",
]
