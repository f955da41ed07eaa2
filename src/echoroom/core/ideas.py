"""Idea Lifecycle Engine.

Creates ideas and moves them through the review lifecycle. Every mutation is
guarded by an optimistic version check and serialized per idea through the
store's lock, so a stale caller gets a VersionConflict instead of silently
overwriting someone else's change.
"""

import logging
from datetime import UTC, datetime

from echoroom.core.transitions import ADVANCE_PATH, allowed_targets, validate_transition
from echoroom.errors import (
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
    VersionConflictError,
)
from echoroom.events.bus import EventBus
from echoroom.events.types import EventType
from echoroom.models.idea import Idea, IdeaStatus, StateTransition
from echoroom.storage.base import RecordStore
from echoroom.validation import validate_description, validate_idea_form, validate_title

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _coerce_status(value: IdeaStatus | str) -> IdeaStatus:
    try:
        return IdeaStatus(value)
    except ValueError as e:
        raise ValidationError(
            f"Invalid status: {value}. Expected one of {[s.value for s in IdeaStatus]}"
        ) from e


def _check_version(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"expected_version must be a non-negative integer, got {value!r}")
    return value


class IdeaEngine:
    """Engine for managing idea lifecycle and operations."""

    def __init__(self, store: RecordStore, event_bus: EventBus) -> None:
        """Initialize the IdeaEngine.

        Args:
            store: Record store that owns idea records
            event_bus: Event bus for emitting lifecycle events
        """
        self._store = store
        self._event_bus = event_bus

    async def create(
        self,
        *,
        title: str,
        description: str,
        author_id: str | None = None,
    ) -> Idea:
        """Create a new idea in Draft with version 0.

        Args:
            title: Idea title, 3-100 characters after trimming
            description: Idea description, 1-2000 characters after trimming
            author_id: Verified id of the submitting user

        Returns:
            Created Idea instance

        Raises:
            ValidationError: If title or description is out of bounds
        """
        validate_idea_form(title, description).raise_for_error()

        now = _now()
        idea = Idea(
            title=title.strip(),
            description=description.strip(),
            author_id=author_id,
            created_at=now,
            updated_at=now,
        )

        await self._store.insert_idea(idea.to_storage())

        logger.info("Created idea: %s - %s", idea.id, idea.title)

        await self._event_bus.emit(
            EventType.IDEA_CREATED,
            {"idea_id": idea.id, "title": idea.title, "author_id": author_id},
        )

        return idea

    async def get(self, idea_id: str) -> Idea | None:
        """Get an idea by ID, or None if it does not exist."""
        data = await self._store.get_idea(idea_id)
        if data is None:
            return None

        return Idea(**data)

    async def require(self, idea_id: str) -> Idea:
        """Get an idea by ID.

        Raises:
            NotFoundError: If no idea has this ID
        """
        idea = await self.get(idea_id)
        if idea is None:
            raise NotFoundError("Idea", idea_id)
        return idea

    async def transition(
        self,
        idea_id: str,
        expected_version: int,
        target_status: IdeaStatus | str,
    ) -> Idea:
        """Move an idea to a new status.

        Checks run in this order under the idea's lock: existence, version,
        transition legality. A failed check leaves the record untouched.

        Args:
            idea_id: Idea to transition
            expected_version: Version the caller last saw
            target_status: Desired status

        Returns:
            The updated Idea, with version incremented by one

        Raises:
            ValidationError: If target_status is not a known status
            NotFoundError: If the idea does not exist
            VersionConflictError: If expected_version is stale
            InvalidTransitionError: If the status change is not allowed
        """
        target = _coerce_status(target_status)
        expected_version = _check_version(expected_version)

        async with self._store.lock(idea_id):
            current = await self.require(idea_id)
            self._check_version_matches(current, expected_version)
            try:
                validate_transition(current.status, target)
            except InvalidTransitionError:
                logger.warning(
                    "Rejected transition for idea %s: %s -> %s",
                    idea_id, current.status.value, target.value,
                )
                raise

            data = await self._store.update_idea(
                idea_id,
                {"status": target.value, "version": current.version + 1, "updated_at": _now()},
            )

        updated = Idea(**data)
        logger.info(
            "Transitioned idea %s: %s -> %s (v%d)",
            idea_id, current.status.value, updated.status.value, updated.version,
        )

        await self._event_bus.emit(
            EventType.IDEA_TRANSITIONED,
            {
                "idea_id": idea_id,
                "from_status": current.status.value,
                "to_status": updated.status.value,
                "version": updated.version,
            },
        )

        return updated

    async def apply(self, request: StateTransition) -> Idea:
        """Apply a StateTransition request."""
        return await self.transition(request.idea_id, request.from_version, request.target_status)

    async def advance(self, idea_id: str, expected_version: int) -> Idea | None:
        """Advance an idea one step along the happy path.

        Happy path: Draft -> Submitted -> UnderReview -> Approved

        Returns:
            Updated Idea, or None if the idea has no next happy-path status

        Raises:
            NotFoundError, VersionConflictError: As for transition()
        """
        expected_version = _check_version(expected_version)
        current = await self.require(idea_id)
        self._check_version_matches(current, expected_version)

        next_status = ADVANCE_PATH.get(current.status)
        if next_status is None:
            logger.debug("Idea %s has no next status from %s", idea_id, current.status.value)
            return None

        return await self.transition(idea_id, expected_version, next_status)

    async def update(
        self,
        idea_id: str,
        expected_version: int,
        *,
        title: str | None = None,
        description: str | None = None,
    ) -> Idea:
        """Edit an idea's title and/or description.

        Same version guard as transition(). An update that changes nothing
        returns the idea as-is without bumping the version.

        Raises:
            ValidationError: If a new value is out of bounds
            NotFoundError: If the idea does not exist
            VersionConflictError: If expected_version is stale
            InvalidTransitionError: If the idea is archived
        """
        expected_version = _check_version(expected_version)
        changes: dict[str, str] = {}
        if title is not None:
            validate_title(title).raise_for_error()
            changes["title"] = title.strip()
        if description is not None:
            validate_description(description).raise_for_error()
            changes["description"] = description.strip()

        async with self._store.lock(idea_id):
            current = await self.require(idea_id)
            self._check_version_matches(current, expected_version)
            if current.is_archived:
                raise InvalidTransitionError(
                    current.status.value,
                    current.status.value,
                    reason=f"Idea {idea_id} is archived and accepts no further changes",
                )

            changed_fields = [k for k, v in changes.items() if getattr(current, k) != v]
            if not changed_fields:
                return current

            updates = {k: changes[k] for k in changed_fields}
            updates["version"] = current.version + 1
            updates["updated_at"] = _now()
            data = await self._store.update_idea(idea_id, updates)

        updated = Idea(**data)
        logger.info("Updated idea %s: %s (v%d)", idea_id, ", ".join(changed_fields), updated.version)

        await self._event_bus.emit(
            EventType.IDEA_UPDATED,
            {"idea_id": idea_id, "changes": changed_fields, "version": updated.version},
        )

        return updated

    def _check_version_matches(self, current: Idea, expected_version: int) -> None:
        if current.version != expected_version:
            logger.warning(
                "Version conflict on idea %s: expected %d, current %d",
                current.id, expected_version, current.version,
            )
            raise VersionConflictError(current.id, expected_version, current.version)

    @staticmethod
    def allowed_next(idea: Idea) -> list[str]:
        """Statuses this idea may move to next."""
        return allowed_targets(idea.status)
