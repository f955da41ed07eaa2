"""Event type constants for EchoRoom."""

from enum import StrEnum


class EventType(StrEnum):
    IDEA_CREATED = "idea.created"
    IDEA_UPDATED = "idea.updated"
    IDEA_TRANSITIONED = "idea.transitioned"

    EXPERIMENT_CREATED = "experiment.created"
    OUTCOME_RECORDED = "outcome.recorded"
    REFLECTION_CREATED = "reflection.created"
