"""Content deduplication service.

An item is a duplicate when an existing queue or production record has
(a) the same normalized URL, or (b) a title (optionally blended with the
description) whose similarity reaches the configured threshold.

Exact URL matches always win over fuzzy ones. Among fuzzy matches the
highest similarity wins; ties go to the most recently fetched record.

This filter is check-then-act and therefore not race-free. The unique
``normalized_url`` constraint on every table is what actually prevents
double inserts; the filter only avoids pointless scoring and AI calls.
"""

import re
from collections.abc import Iterable
from datetime import UTC, datetime
from difflib import SequenceMatcher
from enum import Enum
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit

from pydantic import BaseModel

from curator.config import DEFAULT_TRACKING_PARAMS, DedupConfig
from curator.core.logging import get_logger
from curator.infrastructure.datastore import DataStore, Record
from curator.models.content import TABLES, all_content_tables
from curator.services.collector.base import ContentItem

logger = get_logger(__name__)

_NON_WORD_RE = re.compile(r"[^\w\s]")
_WS_RE = re.compile(r"\s+")
_DEFAULT_PORTS = {"http": 80, "https": 443}
_CANDIDATE_COLUMNS = ["id", "title", "description", "normalized_url", "created_at"]


class DedupReason(str, Enum):
    """Reason for duplicate detection."""

    EXACT_URL = "exact_url"
    FUZZY_MATCH = "fuzzy_match"


class DuplicateMatch(BaseModel):
    """Existing record an item was matched against.

    Attributes:
        table: Table holding the record
        record_id: Record id
        normalized_url: Record's normalized URL
        title: Record's title
        similarity: 1.0 for exact URL matches
    """

    table: str
    record_id: str
    normalized_url: str
    title: str
    similarity: float


class DedupResult(BaseModel):
    """Result of duplicate detection.

    Attributes:
        is_duplicate: Whether the item is a duplicate
        reason: Reason for duplicate detection
        match: The existing record that matched
    """

    is_duplicate: bool
    reason: DedupReason | None = None
    match: DuplicateMatch | None = None

    @property
    def duplicate_of(self) -> str | None:
        """Id of the matched record, if any."""
        return self.match.record_id if self.match else None


# ============================================
# Normalization helpers
# ============================================


def normalize_url(
    url: str,
    tracking_params: Iterable[str] = DEFAULT_TRACKING_PARAMS,
    tracking_prefixes: Iterable[str] = ("utm_",),
) -> str:
    """Canonical form of a URL for identity comparison.

    Lower-cases scheme, host and path, strips ``www.``, default ports,
    fragments, the trailing slash and tracking parameters, and sorts the
    remaining query parameters.

    Args:
        url: URL to normalize
        tracking_params: Query parameter names to drop
        tracking_prefixes: Query parameter prefixes to drop

    Returns:
        Normalized URL string
    """
    raw = url.strip()
    try:
        parts = urlsplit(raw)
        port = parts.port
    except ValueError:
        return raw.lower().rstrip("/")

    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        host = f"{host}:{port}"

    path = parts.path.lower().rstrip("/")

    drop = {p.lower() for p in tracking_params}
    prefixes = tuple(p.lower() for p in tracking_prefixes)
    query = sorted(
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key.lower() not in drop and not key.lower().startswith(prefixes)
    )

    normalized = f"{scheme}://{host}{path}"
    if query:
        normalized += "?" + urlencode(query)
    return normalized


def normalize_text(text: str | None) -> str:
    """Lower-case, drop punctuation, collapse whitespace."""
    if not text:
        return ""
    return _WS_RE.sub(" ", _NON_WORD_RE.sub(" ", text.lower())).strip()


def similarity(a: str | None, b: str | None) -> float:
    """Similarity of two texts in [0, 1].

    Mean of token-set Jaccard overlap and difflib's sequence ratio, both
    computed on normalized text. Empty input on either side scores 0.
    """
    left, right = normalize_text(a), normalize_text(b)
    if not left or not right:
        return 0.0
    if left == right:
        return 1.0

    left_tokens, right_tokens = set(left.split()), set(right.split())
    jaccard = len(left_tokens & right_tokens) / len(left_tokens | right_tokens)
    ratio = SequenceMatcher(None, left, right).ratio()
    return (jaccard + ratio) / 2


def _recency(row: Record) -> datetime:
    value = row.get("fetched_at") or row.get("created_at")
    if not isinstance(value, datetime):
        return datetime.min.replace(tzinfo=UTC)
    return value if value.tzinfo else value.replace(tzinfo=UTC)


# ============================================
# Deduplicator
# ============================================


class ContentDeduplicator:
    """Detects items already present in queue or production storage.

    Attributes:
        store: Data store (injected)
        config: Deduplication configuration
    """

    def __init__(self, store: DataStore, config: DedupConfig | None = None):
        """Initialize deduplicator.

        Args:
            store: Data store
            config: Deduplication configuration (uses defaults if not provided)
        """
        self.store = store
        self.config = config or DedupConfig()

    def normalize(self, url: str) -> str:
        """Normalize a URL with the configured tracking parameters."""
        return normalize_url(url, self.config.tracking_params, self.config.tracking_prefixes)

    def item_similarity(self, item: ContentItem, row: Record) -> float:
        """Similarity between an item and an existing record."""
        title_sim = similarity(item.title, row.get("title"))
        other_description = row.get("description")
        if not (self.config.compare_description and item.description and other_description):
            return title_sim

        description_sim = similarity(item.description, other_description)
        weight = self.config.title_weight
        return weight * title_sim + (1 - weight) * description_sim

    async def is_duplicate(self, item: ContentItem) -> DedupResult:
        """Check an item against every queue and production table.

        Args:
            item: Candidate item

        Returns:
            DedupResult with duplicate status and matched record
        """
        normalized = self.normalize(item.url)
        tables = all_content_tables()

        for table in tables:
            row = await self.store.get(table, {"normalized_url": normalized})
            if row is not None:
                logger.info(
                    "Duplicate detected (URL match)",
                    title=item.title[:50],
                    table=table,
                    normalized_url=normalized,
                )
                return DedupResult(
                    is_duplicate=True,
                    reason=DedupReason.EXACT_URL,
                    match=self._match(table, row, 1.0),
                )

        best: tuple[float, datetime, str, Record] | None = None
        for table in tables:
            rows = await self.store.select(
                table,
                columns=self._columns_for(table),
                order_by="-created_at",
                limit=self.config.candidate_limit,
            )
            for row in rows:
                score = self.item_similarity(item, row)
                if score < self.config.similarity_threshold:
                    continue
                key = (score, _recency(row))
                if best is None or key > (best[0], best[1]):
                    best = (score, key[1], table, row)

        if best is None:
            return DedupResult(is_duplicate=False)

        score, _, table, row = best
        logger.info(
            "Duplicate detected (fuzzy match)",
            title=item.title[:50],
            matched_title=str(row.get("title"))[:50],
            table=table,
            similarity=round(score, 3),
        )
        return DedupResult(
            is_duplicate=True,
            reason=DedupReason.FUZZY_MATCH,
            match=self._match(table, row, score),
        )

    def _columns_for(self, table: str) -> list[str]:
        if table in {t.queue for t in TABLES.values()}:
            return [*_CANDIDATE_COLUMNS, "fetched_at"]
        return _CANDIDATE_COLUMNS

    @staticmethod
    def _match(table: str, row: dict[str, Any], score: float) -> DuplicateMatch:
        return DuplicateMatch(
            table=table,
            record_id=str(row["id"]),
            normalized_url=str(row.get("normalized_url", "")),
            title=str(row.get("title", "")),
            similarity=round(score, 4),
        )


__all__ = [
    "ContentDeduplicator",
    "DedupResult",
    "DedupReason",
    "DuplicateMatch",
    "normalize_url",
    "normalize_text",
    "similarity",
]
