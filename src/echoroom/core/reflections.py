"""Reflections written after an outcome is recorded."""

import logging

from echoroom.core.experiments import ExperimentEngine
from echoroom.errors import NotFoundError
from echoroom.events.bus import EventBus
from echoroom.events.types import EventType
from echoroom.models.experiment import Reflection
from echoroom.storage.base import RecordStore
from echoroom.validation import validate_reflection_form

logger = logging.getLogger(__name__)


class ReflectionEngine:
    """Engine for post-outcome reflections."""

    def __init__(
        self, store: RecordStore, event_bus: EventBus, experiments: ExperimentEngine
    ) -> None:
        self._store = store
        self._event_bus = event_bus
        self._experiments = experiments

    async def create(
        self,
        outcome_id: str,
        *,
        content: str,
        created_by: str | None = None,
    ) -> Reflection:
        """Write a reflection on an outcome.

        Raises:
            ValidationError: If content is not 15-5000 characters after trimming
            NotFoundError: If the outcome does not exist
        """
        validate_reflection_form(content).raise_for_error()
        if await self._experiments.get_outcome(outcome_id) is None:
            raise NotFoundError("Outcome", outcome_id)

        reflection = Reflection(
            outcome_id=outcome_id,
            content=content.strip(),
            created_by=created_by,
        )
        await self._store.insert_reflection(reflection.to_storage())

        logger.info("Created reflection %s on outcome %s", reflection.id, outcome_id)
        await self._event_bus.emit(
            EventType.REFLECTION_CREATED,
            {"reflection_id": reflection.id, "outcome_id": outcome_id},
        )
        return reflection

    async def list_reflections(self, *, outcome_id: str | None = None) -> list[Reflection]:
        return [Reflection(**d) for d in await self._store.query_reflections(outcome_id=outcome_id)]
