"""Idea lifecycle transition table."""

from __future__ import annotations

from echoroom.errors import InvalidTransitionError
from echoroom.models.idea import IdeaStatus

VALID_TRANSITIONS: dict[IdeaStatus, frozenset[IdeaStatus]] = {
    IdeaStatus.DRAFT: frozenset({IdeaStatus.SUBMITTED}),
    IdeaStatus.SUBMITTED: frozenset({IdeaStatus.UNDER_REVIEW}),
    IdeaStatus.UNDER_REVIEW: frozenset({IdeaStatus.APPROVED, IdeaStatus.REJECTED}),
    IdeaStatus.APPROVED: frozenset({IdeaStatus.ARCHIVED}),
    IdeaStatus.REJECTED: frozenset({IdeaStatus.ARCHIVED}),
    IdeaStatus.ARCHIVED: frozenset(),
}

# Happy path for advance()
ADVANCE_PATH: dict[IdeaStatus, IdeaStatus] = {
    IdeaStatus.DRAFT: IdeaStatus.SUBMITTED,
    IdeaStatus.SUBMITTED: IdeaStatus.UNDER_REVIEW,
    IdeaStatus.UNDER_REVIEW: IdeaStatus.APPROVED,
}


def allowed_targets(current: IdeaStatus) -> list[str]:
    return sorted(s.value for s in VALID_TRANSITIONS.get(current, frozenset()))


def can_transition(current: IdeaStatus, target: IdeaStatus) -> bool:
    """Check whether a transition from current to target is in the table."""
    return target in VALID_TRANSITIONS.get(current, frozenset())


def validate_transition(current: IdeaStatus, target: IdeaStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is in the table."""
    if not can_transition(current, target):
        raise InvalidTransitionError(current.value, target.value, allowed_targets(current))
