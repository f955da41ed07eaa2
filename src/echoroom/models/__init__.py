"""EchoRoom data models."""

from echoroom.models.experiment import Experiment, Outcome, OutcomeResult, Reflection
from echoroom.models.idea import Idea, IdeaStatus, StateTransition

__all__ = [
    "Experiment",
    "Idea",
    "IdeaStatus",
    "Outcome",
    "OutcomeResult",
    "Reflection",
    "StateTransition",
]
