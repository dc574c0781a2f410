"""Content collection services.

This package implements the ingestion pipeline:
1. Source collectors fetch raw payloads from external sources
2. Transformer maps them to canonical content items
3. Deduplicator drops items already queued or in production
4. Scorer calculates fit scores (rule-based, optionally AI-blended)
5. Queue manager stores items for review
"""

from curator.services.collector.base import (
    AIAssessment,
    BaseSource,
    ContentItem,
    FetchResult,
    ScoreComponents,
    ScoredItem,
)
from curator.services.collector.deduplicator import (
    ContentDeduplicator,
    DedupReason,
    DedupResult,
)
from curator.services.collector.pipeline import ContentPipeline, RunResult
from curator.services.collector.queue_manager import ContentQueueManager, QueueItem, QueueStatus
from curator.services.collector.scorer import ContentScorer

__all__ = [
    # Base DTOs
    "FetchResult",
    "ContentItem",
    "ScoredItem",
    "ScoreComponents",
    "AIAssessment",
    "BaseSource",
    # Deduplicator
    "ContentDeduplicator",
    "DedupResult",
    "DedupReason",
    # Scorer
    "ContentScorer",
    # Queue
    "ContentQueueManager",
    "QueueItem",
    "QueueStatus",
    # Pipeline
    "ContentPipeline",
    "RunResult",
]
