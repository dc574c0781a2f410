"""Queue and production ORM models.

Each content type has a review queue table and a production table.
Queue records are created by the ingestion pipeline with status
``pending_review`` and only change through review actions. Production
records are written exclusively by approval.

Both tables enforce uniqueness on ``normalized_url``; this constraint is
what makes repeated runs and retried approvals idempotent.
"""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from curator.models.base import Base, TimestampMixin, UUIDMixin


class ContentType(str, enum.Enum):
    """Kind of content an item represents."""

    PROJECT = "project"
    FUNDING = "funding"
    RESOURCE = "resource"


class ReviewStatus(str, enum.Enum):
    """Queue record review status."""

    PENDING_REVIEW = "pending_review"  # Created by pipeline, awaiting review
    UNDER_REVIEW = "under_review"  # A reviewer picked it up
    NEEDS_INFO = "needs_info"  # Reviewer asked for more information
    APPROVED = "approved"  # Promoted to production
    REJECTED = "rejected"  # Will not be published


TERMINAL_STATUSES = frozenset({ReviewStatus.APPROVED, ReviewStatus.REJECTED})


def _status_column() -> Mapped[ReviewStatus]:
    return mapped_column(
        Enum(
            ReviewStatus,
            name="review_status",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
            length=32,
        ),
        nullable=False,
        default=ReviewStatus.PENDING_REVIEW,
        index=True,
    )


class ContentColumnsMixin:
    """Columns shared by queue and production records."""

    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    normalized_url: Mapped[str] = mapped_column(String(2048), nullable=False, unique=True)
    source: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    category: Mapped[str] = mapped_column(String(32), nullable=False, default="low-fit")
    confidence: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    ai_summary: Mapped[str | None] = mapped_column(Text)
    item_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )


class QueueRecordMixin(ContentColumnsMixin):
    """Review queue columns.

    Attributes:
        status: Current review status
        score_factors: Rule-based factor breakdown and AI sub-scores
        ai_reasoning: Free-text reasoning from the AI scorer
        fetched_at: When the item was fetched from its source
        reviewed_by: Reviewer identifier
        reviewed_at: When the last review action happened
        reviewer_notes: Free-text notes from the reviewer
        rejection_reason: Reason recorded on rejection
    """

    score_factors: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    ai_reasoning: Mapped[str | None] = mapped_column(Text)
    fetched_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    @declared_attr
    @classmethod
    def status(cls) -> Mapped[ReviewStatus]:
        """Review status column."""
        return _status_column()

    reviewed_by: Mapped[str | None] = mapped_column(String(255))
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    reviewer_notes: Mapped[str | None] = mapped_column(Text)
    rejection_reason: Mapped[str | None] = mapped_column(Text)


class ProductionRecordMixin(ContentColumnsMixin):
    """Production columns.

    Provenance is copied by value (``url``, ``source``); there is no
    foreign key to the queue.
    """

    approved_by: Mapped[str] = mapped_column(String(255), nullable=False)
    approved_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ============================================
# Queue tables
# ============================================


class QueueProject(Base, UUIDMixin, TimestampMixin, QueueRecordMixin):
    """Startup/project awaiting review."""

    __tablename__ = "queue_projects"
    __table_args__ = (Index("idx_queue_projects_status_score", "status", "score"),)


class QueueFundingProgram(Base, UUIDMixin, TimestampMixin, QueueRecordMixin):
    """Funding program awaiting review."""

    __tablename__ = "queue_funding_programs"
    __table_args__ = (Index("idx_queue_funding_programs_status_score", "status", "score"),)


class QueueResource(Base, UUIDMixin, TimestampMixin, QueueRecordMixin):
    """Resource or news item awaiting review."""

    __tablename__ = "queue_resources"
    __table_args__ = (Index("idx_queue_resources_status_score", "status", "score"),)


# ============================================
# Production tables
# ============================================


class Project(Base, UUIDMixin, TimestampMixin, ProductionRecordMixin):
    """Approved startup/project."""

    __tablename__ = "projects"

    team_size: Mapped[int | None] = mapped_column(Integer)
    funding_raised: Mapped[float | None] = mapped_column(Float)
    github_stars: Mapped[int | None] = mapped_column(Integer)
    launch_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class FundingProgram(Base, UUIDMixin, TimestampMixin, ProductionRecordMixin):
    """Approved funding program."""

    __tablename__ = "funding_programs"

    organization: Mapped[str | None] = mapped_column(String(255))
    amount_min: Mapped[float | None] = mapped_column(Float)
    amount_max: Mapped[float | None] = mapped_column(Float)
    deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class Resource(Base, UUIDMixin, TimestampMixin, ProductionRecordMixin):
    """Approved resource or news item."""

    __tablename__ = "resources"

    author: Mapped[str | None] = mapped_column(String(255))
    resource_type: Mapped[str | None] = mapped_column(String(64))
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


# ============================================
# Table registry
# ============================================


@dataclass(frozen=True)
class ContentTables:
    """Queue and production table names for a content type."""

    queue: str
    production: str


TABLES: dict[ContentType, ContentTables] = {
    ContentType.PROJECT: ContentTables(
        queue=QueueProject.__tablename__, production=Project.__tablename__
    ),
    ContentType.FUNDING: ContentTables(
        queue=QueueFundingProgram.__tablename__, production=FundingProgram.__tablename__
    ),
    ContentType.RESOURCE: ContentTables(
        queue=QueueResource.__tablename__, production=Resource.__tablename__
    ),
}


def queue_table_for(content_type: ContentType | str) -> str:
    """Queue table name for a content type."""
    return TABLES[ContentType(content_type)].queue


def production_table_for(content_type: ContentType | str) -> str:
    """Production table name for a content type."""
    return TABLES[ContentType(content_type)].production


def all_content_tables() -> list[str]:
    """Every queue and production table, queue tables first."""
    return [t.queue for t in TABLES.values()] + [t.production for t in TABLES.values()]


__all__ = [
    "ContentType",
    "ReviewStatus",
    "TERMINAL_STATUSES",
    "QueueProject",
    "QueueFundingProgram",
    "QueueResource",
    "Project",
    "FundingProgram",
    "Resource",
    "ContentTables",
    "TABLES",
    "queue_table_for",
    "production_table_for",
    "all_content_tables",
]
