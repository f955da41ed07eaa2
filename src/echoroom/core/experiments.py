"""Experiment and outcome tracking.

Approved ideas are promoted to experiments; each experiment gets at most one
recorded outcome.
"""

import logging

from echoroom.core.ideas import IdeaEngine
from echoroom.errors import NotFoundError, ValidationError
from echoroom.events.bus import EventBus
from echoroom.events.types import EventType
from echoroom.models.experiment import Experiment, Outcome, OutcomeResult
from echoroom.models.idea import IdeaStatus
from echoroom.storage.base import RecordStore
from echoroom.validation import parse_date, validate_experiment_form, validate_outcome_form

logger = logging.getLogger(__name__)


class ExperimentEngine:
    """Engine for experiments and their outcomes."""

    def __init__(self, store: RecordStore, event_bus: EventBus, ideas: IdeaEngine) -> None:
        self._store = store
        self._event_bus = event_bus
        self._ideas = ideas

    async def create(
        self,
        *,
        idea_id: str,
        title: str,
        hypothesis: str,
        start_date: str,
        end_date: str,
        created_by: str | None = None,
    ) -> Experiment:
        """Promote an approved idea to an experiment.

        Raises:
            ValidationError: If a field is invalid or the idea is not Approved
            NotFoundError: If the idea does not exist
        """
        validate_experiment_form(title, hypothesis, start_date, end_date).raise_for_error()

        idea = await self._ideas.require(idea_id)
        if idea.status != IdeaStatus.APPROVED:
            raise ValidationError(
                f"Only approved ideas can be promoted to experiments "
                f"(idea {idea_id} is {idea.status.value})"
            )

        experiment = Experiment(
            idea_id=idea_id,
            title=title.strip(),
            hypothesis=hypothesis.strip(),
            start_date=parse_date(start_date),
            end_date=parse_date(end_date),
            created_by=created_by,
        )
        await self._store.insert_experiment(experiment.to_storage())

        logger.info("Created experiment %s for idea %s", experiment.id, idea_id)
        await self._event_bus.emit(
            EventType.EXPERIMENT_CREATED,
            {"experiment_id": experiment.id, "idea_id": idea_id},
        )
        return experiment

    async def get(self, experiment_id: str) -> Experiment | None:
        data = await self._store.get_experiment(experiment_id)
        return Experiment(**data) if data else None

    async def require(self, experiment_id: str) -> Experiment:
        experiment = await self.get(experiment_id)
        if experiment is None:
            raise NotFoundError("Experiment", experiment_id)
        return experiment

    async def list_experiments(self, *, idea_id: str | None = None) -> list[Experiment]:
        return [Experiment(**d) for d in await self._store.query_experiments(idea_id=idea_id)]

    async def record_outcome(
        self,
        experiment_id: str,
        *,
        result: str,
        notes: str | None = None,
        created_by: str | None = None,
    ) -> Outcome:
        """Record the outcome of an experiment.

        Raises:
            ValidationError: If result/notes are invalid or an outcome already exists
            NotFoundError: If the experiment does not exist
        """
        validate_outcome_form(result, notes).raise_for_error()

        async with self._store.lock(experiment_id):
            await self.require(experiment_id)
            if await self._store.get_outcome_for_experiment(experiment_id) is not None:
                raise ValidationError(f"Outcome already recorded for experiment {experiment_id}")

            outcome = Outcome(
                experiment_id=experiment_id,
                result=OutcomeResult(result),
                notes=notes or None,
                created_by=created_by,
            )
            await self._store.insert_outcome(outcome.to_storage())

        logger.info("Recorded %s outcome for experiment %s", outcome.result.value, experiment_id)
        await self._event_bus.emit(
            EventType.OUTCOME_RECORDED,
            {
                "outcome_id": outcome.id,
                "experiment_id": experiment_id,
                "result": outcome.result.value,
            },
        )
        return outcome

    async def get_outcome(self, outcome_id: str) -> Outcome | None:
        data = await self._store.get_outcome(outcome_id)
        return Outcome(**data) if data else None

    async def outcome_for(self, experiment_id: str) -> Outcome | None:
        data = await self._store.get_outcome_for_experiment(experiment_id)
        return Outcome(**data) if data else None
