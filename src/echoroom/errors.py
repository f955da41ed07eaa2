"""Error taxonomy for EchoRoom operations.

Every error carries a ``kind`` that callers can switch on. All of them are
recoverable: fix the input, or reload the record and retry.
"""

from __future__ import annotations


class EchoRoomError(Exception):
    """Base class for all EchoRoom errors."""

    kind = "Error"


class ValidationError(EchoRoomError):
    """Raised when a field has the wrong shape, length, or enum value."""

    kind = "ValidationError"


class NotFoundError(EchoRoomError):
    """Raised when a record id is unknown."""

    kind = "NotFound"

    def __init__(self, record_type: str, record_id: str) -> None:
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(f"{record_type} not found: {record_id}")


class VersionConflictError(EchoRoomError):
    """Raised when the caller's expected version is stale."""

    kind = "VersionConflict"

    def __init__(self, idea_id: str, expected: int, actual: int) -> None:
        self.idea_id = idea_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Version conflict on idea {idea_id}: expected {expected}, current is {actual}. "
            "Reload the idea and retry."
        )


class InvalidTransitionError(EchoRoomError):
    """Raised when a status change is not in the transition table."""

    kind = "InvalidTransition"

    def __init__(
        self,
        from_status: str,
        to_status: str,
        allowed: list[str] | None = None,
        *,
        reason: str | None = None,
    ) -> None:
        self.from_status = from_status
        self.to_status = to_status
        self.allowed = allowed or []
        super().__init__(
            reason
            or f"Invalid status transition from '{from_status}' to '{to_status}'. "
            f"Allowed transitions: {self.allowed}"
        )
