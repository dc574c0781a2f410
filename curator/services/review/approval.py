"""Review and approval service.

Applies reviewer actions to queue records. Approval copies the record into
the type's production table and marks the queue record ``approved`` in one
transaction: if either write fails, neither is committed.

Approved and rejected queue records are kept with their terminal status;
nothing is deleted on approval.
"""

import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from curator.core.exceptions import (
    ContentValidationError,
    InvalidActionError,
    RecordNotFoundError,
    ReviewError,
)
from curator.core.logging import get_logger
from curator.core.state_machine import InvalidTransitionError, create_review_state_machine
from curator.infrastructure.datastore import DataStore, Record
from curator.models.content import (
    TABLES,
    ContentType,
    ReviewStatus,
    production_table_for,
    queue_table_for,
)
from curator.services.collector.transformer import (
    FundingMetadata,
    ProjectMetadata,
    ResourceMetadata,
)

logger = get_logger(__name__)

# Columns copied verbatim from the queue record
_SHARED_COLUMNS = (
    "title",
    "description",
    "url",
    "normalized_url",
    "source",
    "score",
    "category",
    "confidence",
    "ai_summary",
    "metadata",
)


class ReviewAction(str, Enum):
    """Reviewer actions."""

    APPROVE = "approve"
    REJECT = "reject"
    START_REVIEW = "start_review"
    REQUEST_INFO = "request_info"


ACTION_TARGETS: dict[ReviewAction, ReviewStatus] = {
    ReviewAction.APPROVE: ReviewStatus.APPROVED,
    ReviewAction.REJECT: ReviewStatus.REJECTED,
    ReviewAction.START_REVIEW: ReviewStatus.UNDER_REVIEW,
    ReviewAction.REQUEST_INFO: ReviewStatus.NEEDS_INFO,
}

APPROVAL_ACTIONS = [ReviewAction.APPROVE, ReviewAction.REJECT]


class ApprovalResult(BaseModel):
    """Outcome of one review action.

    Attributes:
        item_id: Queue record id
        content_type: Content type of the record
        action: Action applied
        previous_status: Status before the action
        status: Status after the action
        production_id: Production record id (approvals only)
        production_created: False when an existing production record was reused
        reviewed_by: Reviewer
        reviewed_at: When the action was applied
    """

    item_id: uuid.UUID
    content_type: ContentType
    action: ReviewAction
    previous_status: ReviewStatus
    status: ReviewStatus
    production_id: uuid.UUID | None = None
    production_created: bool = False
    reviewed_by: str
    reviewed_at: datetime


class ReviewRequest(BaseModel):
    """One entry of a batch review."""

    item_id: uuid.UUID
    action: str
    reviewed_by: str = Field(..., min_length=1)
    notes: str | None = None
    rejection_reason: str | None = None
    content_type: ContentType | None = None


class BatchReviewResult(BaseModel):
    """Per-item outcomes of a batch review."""

    results: list[ApprovalResult] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)

    @property
    def succeeded(self) -> int:
        """Number of items processed successfully."""
        return len(self.results)

    @property
    def failed(self) -> int:
        """Number of items that failed."""
        return len(self.errors)


class ApprovalService:
    """Applies reviewer actions to queue records.

    Attributes:
        store: Data store (injected)
    """

    def __init__(self, store: DataStore):
        """Initialize approval service.

        Args:
            store: Data store
        """
        self.store = store

    async def process_approval(
        self,
        item_id: uuid.UUID | str,
        action: str,
        reviewed_by: str,
        notes: str | None = None,
        rejection_reason: str | None = None,
        content_type: ContentType | None = None,
    ) -> ApprovalResult:
        """Approve or reject a queue record.

        Args:
            item_id: Queue record id
            action: "approve" or "reject"
            reviewed_by: Reviewer identifier
            notes: Reviewer notes
            rejection_reason: Reason for a rejection (defaults to notes)
            content_type: Restrict the lookup to one queue table

        Returns:
            ApprovalResult

        Raises:
            InvalidActionError: If the action is not approve/reject
            RecordNotFoundError: If no queue record has this id
            InvalidTransitionError: If the record is already approved or rejected
        """
        parsed = _parse_action(action, APPROVAL_ACTIONS)
        patch: dict[str, Any] = {"reviewer_notes": notes}
        if parsed == ReviewAction.REJECT:
            patch["rejection_reason"] = rejection_reason or notes
        return await self._apply(item_id, parsed, reviewed_by, patch, content_type)

    async def mark_under_review(
        self,
        item_id: uuid.UUID | str,
        reviewed_by: str,
        content_type: ContentType | None = None,
    ) -> ApprovalResult:
        """Move a record to ``under_review``."""
        return await self._apply(item_id, ReviewAction.START_REVIEW, reviewed_by, {}, content_type)

    async def request_info(
        self,
        item_id: uuid.UUID | str,
        reviewed_by: str,
        notes: str,
        content_type: ContentType | None = None,
    ) -> ApprovalResult:
        """Move a record to ``needs_info`` with a note on what is missing."""
        return await self._apply(
            item_id,
            ReviewAction.REQUEST_INFO,
            reviewed_by,
            {"reviewer_notes": notes},
            content_type,
        )

    async def review(
        self,
        item_id: uuid.UUID | str,
        action: str,
        reviewed_by: str,
        notes: str | None = None,
        rejection_reason: str | None = None,
        content_type: ContentType | None = None,
    ) -> ApprovalResult:
        """Dispatch any reviewer action by name."""
        parsed = _parse_action(action, list(ReviewAction))
        if parsed in APPROVAL_ACTIONS:
            return await self.process_approval(
                item_id, parsed.value, reviewed_by, notes, rejection_reason, content_type
            )
        if parsed == ReviewAction.REQUEST_INFO:
            return await self.request_info(item_id, reviewed_by, notes or "", content_type)
        return await self.mark_under_review(item_id, reviewed_by, content_type)

    async def process_batch(self, requests: list[ReviewRequest]) -> BatchReviewResult:
        """Apply several review actions independently.

        One failing item does not affect the others. Storage outages still
        propagate.

        Returns:
            BatchReviewResult with per-item results and error messages
        """
        batch = BatchReviewResult()
        for request in requests:
            try:
                result = await self.review(
                    request.item_id,
                    request.action,
                    request.reviewed_by,
                    notes=request.notes,
                    rejection_reason=request.rejection_reason,
                    content_type=request.content_type,
                )
            except (
                ReviewError,
                RecordNotFoundError,
                InvalidTransitionError,
                ContentValidationError,
            ) as e:
                batch.errors[str(request.item_id)] = e.message
            else:
                batch.results.append(result)

        logger.info("Batch review complete", succeeded=batch.succeeded, failed=batch.failed)
        return batch

    # ============================================
    # Internals
    # ============================================

    async def _apply(
        self,
        item_id: uuid.UUID | str,
        action: ReviewAction,
        reviewed_by: str,
        patch: dict[str, Any],
        content_type: ContentType | None,
    ) -> ApprovalResult:
        target = ACTION_TARGETS[action]
        now = datetime.now(UTC)

        async with self.store.transaction() as tx:
            ctype, row = await self._load(tx, item_id, content_type)
            previous = ReviewStatus(row["status"])

            sm = create_review_state_machine(previous)
            sm.transition(target)

            production_id: uuid.UUID | None = None
            created = False
            if target == ReviewStatus.APPROVED:
                production_id, created = await self._promote(tx, ctype, row, reviewed_by, now)

            updated = await tx.update(
                queue_table_for(ctype),
                {"id": row["id"], "status": previous},
                {
                    **patch,
                    "status": target,
                    "reviewed_by": reviewed_by,
                    "reviewed_at": now,
                },
            )
            # Status filter makes the update a compare-and-set
            if updated != 1:
                raise ReviewError(
                    "Queue record changed during review",
                    context={"item_id": str(row["id"]), "expected_status": previous.value},
                )

        logger.info(
            "Review action applied",
            item_id=str(row["id"]),
            content_type=ctype.value,
            action=action.value,
            status=target.value,
            reviewed_by=reviewed_by,
            production_id=str(production_id) if production_id else None,
        )
        return ApprovalResult(
            item_id=row["id"],
            content_type=ctype,
            action=action,
            previous_status=previous,
            status=target,
            production_id=production_id,
            production_created=created,
            reviewed_by=reviewed_by,
            reviewed_at=now,
        )

    async def _load(
        self,
        tx: DataStore,
        item_id: uuid.UUID | str,
        content_type: ContentType | None,
    ) -> tuple[ContentType, Record]:
        try:
            key = item_id if isinstance(item_id, uuid.UUID) else uuid.UUID(str(item_id))
        except ValueError as e:
            raise RecordNotFoundError("QueueRecord", item_id) from e

        types = [content_type] if content_type else list(TABLES)
        for ctype in types:
            row = await tx.get(queue_table_for(ctype), {"id": key})
            if row is not None:
                return ctype, row
        raise RecordNotFoundError("QueueRecord", key)

    async def _promote(
        self,
        tx: DataStore,
        content_type: ContentType,
        row: Record,
        approved_by: str,
        approved_at: datetime,
    ) -> tuple[uuid.UUID, bool]:
        """Copy a queue record into production, reusing an existing copy.

        Returns:
            Tuple of (production id, whether a new row was inserted)
        """
        table = production_table_for(content_type)
        existing = await tx.get(table, {"normalized_url": row["normalized_url"]})
        if existing is not None:
            logger.info(
                "Production record already exists",
                table=table,
                normalized_url=row["normalized_url"],
            )
            return existing["id"], False

        record = build_production_record(content_type, row, approved_by, approved_at)
        inserted = await tx.insert(table, record)
        return inserted["id"], True


def build_production_record(
    content_type: ContentType,
    row: Record,
    approved_by: str,
    approved_at: datetime,
) -> dict[str, Any]:
    """Map a queue record to production table columns.

    Raises:
        ContentValidationError: If the stored metadata no longer validates
    """
    record: dict[str, Any] = {col: row.get(col) for col in _SHARED_COLUMNS}
    record["metadata"] = record["metadata"] or {}
    record["approved_by"] = approved_by
    record["approved_at"] = approved_at

    meta = record["metadata"]
    try:
        if content_type == ContentType.PROJECT:
            project = ProjectMetadata.model_validate(meta)
            record.update(
                team_size=project.team_size,
                funding_raised=project.funding_raised,
                github_stars=project.stars,
                launch_date=project.launch_date,
            )
        elif content_type == ContentType.FUNDING:
            funding = FundingMetadata.model_validate(meta)
            record.update(
                organization=funding.organization,
                amount_min=funding.amount_min,
                amount_max=funding.amount_max,
                deadline=funding.deadline,
            )
        else:
            resource = ResourceMetadata.model_validate(meta)
            record.update(
                author=resource.author,
                resource_type=resource.resource_type,
                published_at=resource.published_at,
            )
    except ValidationError as e:
        raise ContentValidationError("metadata", str(e)) from e
    return record


def _parse_action(action: str | ReviewAction, allowed: list[ReviewAction]) -> ReviewAction:
    values = [a.value for a in allowed]
    if str(getattr(action, "value", action)) not in values:
        raise InvalidActionError(str(action), values)
    return ReviewAction(action)


__all__ = [
    "ApprovalService",
    "ApprovalResult",
    "ReviewAction",
    "ReviewRequest",
    "BatchReviewResult",
    "ACTION_TARGETS",
    "build_production_record",
]
