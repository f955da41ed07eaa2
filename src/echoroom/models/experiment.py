"""Experiment, outcome and reflection models."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class OutcomeResult(StrEnum):
    SUCCESS = "Success"
    MIXED = "Mixed"
    FAILED = "Failed"


class Experiment(BaseModel):
    """A time-boxed test of an approved idea's hypothesis."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    idea_id: str
    title: str
    hypothesis: str
    start_date: date
    end_date: date
    created_by: str | None = None
    created_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def to_storage(self) -> dict:
        return self.model_dump(mode="json")

    def to_response(self, *, detail: str = "summary") -> dict:
        data = {
            "_v": "1.0",
            "id": self.id,
            "idea_id": self.idea_id,
            "title": self.title,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
        }
        if detail != "summary":
            data.update(
                {
                    "hypothesis": self.hypothesis,
                    "duration_days": self.duration_days,
                    "created_by": self.created_by,
                    "created_at": self.created_at,
                }
            )
        return data


class Outcome(BaseModel):
    """The recorded result of an experiment."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    experiment_id: str
    result: OutcomeResult
    notes: str | None = None
    created_by: str | None = None
    created_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())

    def to_storage(self) -> dict:
        return self.model_dump(mode="json")

    def to_response(self) -> dict:
        return {
            "_v": "1.0",
            "id": self.id,
            "experiment_id": self.experiment_id,
            "result": self.result.value,
            "notes": self.notes,
            "created_at": self.created_at,
        }


class Reflection(BaseModel):
    """A written look back on an outcome."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    outcome_id: str
    content: str
    created_by: str | None = None
    created_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())

    def to_storage(self) -> dict:
        return self.model_dump(mode="json")

    def to_response(self) -> dict:
        return {
            "_v": "1.0",
            "id": self.id,
            "outcome_id": self.outcome_id,
            "content": self.content,
            "created_at": self.created_at,
        }
