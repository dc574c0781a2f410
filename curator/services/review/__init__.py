"""Review services: reviewer actions on queued content."""

from curator.services.review.approval import (
    ApprovalResult,
    ApprovalService,
    BatchReviewResult,
    ReviewAction,
    ReviewRequest,
)

__all__ = [
    "ApprovalService",
    "ApprovalResult",
    "ReviewAction",
    "ReviewRequest",
    "BatchReviewResult",
]
