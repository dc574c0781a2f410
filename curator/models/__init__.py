"""ORM models.

Importing this package registers every table on ``Base.metadata``.
"""

from curator.models.base import Base, TimestampMixin, UUIDMixin
from curator.models.content import (
    TABLES,
    TERMINAL_STATUSES,
    ContentTables,
    ContentType,
    FundingProgram,
    Project,
    QueueFundingProgram,
    QueueProject,
    QueueResource,
    Resource,
    ReviewStatus,
    all_content_tables,
    production_table_for,
    queue_table_for,
)

__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
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
