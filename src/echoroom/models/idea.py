"""Idea model with lifecycle status and version counter."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class IdeaStatus(StrEnum):
    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    UNDER_REVIEW = "UnderReview"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    ARCHIVED = "Archived"


class Idea(BaseModel):
    """An idea moving through the review lifecycle under optimistic locking."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    title: str
    description: str
    status: IdeaStatus = IdeaStatus.DRAFT
    version: int = Field(default=0, ge=0)
    author_id: str | None = None
    created_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    updated_at: str | None = None

    @property
    def is_archived(self) -> bool:
        return self.status == IdeaStatus.ARCHIVED

    def to_storage(self) -> dict:
        return self.model_dump(mode="json")

    def to_response(self, *, detail: str = "summary") -> dict:
        data = {
            "_v": "1.0",
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "version": self.version,
        }
        if detail != "summary":
            data.update(
                {
                    "description": self.description,
                    "author_id": self.author_id,
                    "created_at": self.created_at,
                    "updated_at": self.updated_at,
                }
            )
        return data


class StateTransition(BaseModel):
    """A single status-change request. Built per call, never stored."""

    model_config = ConfigDict(frozen=True)

    idea_id: str = Field(..., min_length=1)
    from_version: int = Field(..., ge=0)
    target_status: IdeaStatus
