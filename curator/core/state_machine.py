"""Generic State Machine for model status transitions.

This module provides a reusable state machine pattern for managing
status transitions of review queue records.

Example:
    sm = create_review_state_machine("pending_review")

    if sm.can_transition(ReviewStatus.UNDER_REVIEW):
        sm.transition(ReviewStatus.UNDER_REVIEW)

    sm.transition(ReviewStatus.APPROVED)
"""

from enum import Enum
from typing import Generic, TypeVar

from curator.core.exceptions import CuratorError

T = TypeVar("T", bound=str | Enum)

# Type alias for transition maps
TransitionMap = dict[T, list[T]]


class InvalidTransitionError(CuratorError):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, current: T, target: T, allowed: list[T] | None = None):
        self.current = current
        self.target = target
        self.allowed = allowed or []
        self.error_code = "INVALID_TRANSITION"
        allowed_str = ", ".join(str(s) for s in self.allowed) if self.allowed else "none"
        super().__init__(
            message=f"Invalid transition from '{current}' to '{target}'. "
            f"Allowed transitions: {allowed_str}",
            context={
                "current": str(current),
                "target": str(target),
                "allowed": [str(s) for s in self.allowed],
            },
        )


class StateMachine(Generic[T]):
    """Generic state machine for status transitions.

    Provides a type-safe way to manage status transitions with
    explicit allowed transitions defined upfront.

    Attributes:
        current: Current state
        transitions: Map of allowed transitions from each state
    """

    def __init__(self, initial: T, transitions: TransitionMap[T]):
        """Initialize state machine.

        Args:
            initial: Initial state
            transitions: Map of state -> list of allowed target states
        """
        self._current = initial
        self._transitions = transitions

    @property
    def current(self) -> T:
        """Get current state."""
        return self._current

    @property
    def allowed_transitions(self) -> list[T]:
        """Get list of states we can transition to from current state."""
        return self._transitions.get(self._current, [])

    def can_transition(self, target: T) -> bool:
        """Check if transition to target state is allowed.

        Args:
            target: Target state to check

        Returns:
            True if transition is allowed, False otherwise
        """
        return target in self.allowed_transitions

    def transition(self, target: T) -> None:
        """Perform transition to target state.

        Args:
            target: Target state

        Raises:
            InvalidTransitionError: If transition is not allowed
        """
        if not self.can_transition(target):
            raise InvalidTransitionError(
                current=self._current,
                target=target,
                allowed=self.allowed_transitions,
            )
        self._current = target

    def __repr__(self) -> str:
        return f"StateMachine(current={self._current!r}, allowed={self.allowed_transitions!r})"


# ============================================
# Predefined Transition Maps
# ============================================


def get_review_transitions() -> TransitionMap:
    """Get transition map for ReviewStatus."""
    from curator.models.content import ReviewStatus

    return {
        ReviewStatus.PENDING_REVIEW: [
            ReviewStatus.UNDER_REVIEW,
            ReviewStatus.NEEDS_INFO,
            ReviewStatus.APPROVED,
            ReviewStatus.REJECTED,
        ],
        ReviewStatus.UNDER_REVIEW: [
            ReviewStatus.NEEDS_INFO,
            ReviewStatus.APPROVED,
            ReviewStatus.REJECTED,
        ],
        ReviewStatus.NEEDS_INFO: [
            ReviewStatus.UNDER_REVIEW,
            ReviewStatus.APPROVED,
            ReviewStatus.REJECTED,
        ],
        ReviewStatus.APPROVED: [],  # Terminal state
        ReviewStatus.REJECTED: [],  # Terminal state
    }


def create_review_state_machine(initial_status: str | None = None) -> StateMachine:
    """Create a state machine for queue record review status.

    Args:
        initial_status: Initial status (default: PENDING_REVIEW)

    Returns:
        Configured StateMachine for review status
    """
    from curator.models.content import ReviewStatus

    initial = ReviewStatus(initial_status) if initial_status else ReviewStatus.PENDING_REVIEW
    return StateMachine(initial, get_review_transitions())
