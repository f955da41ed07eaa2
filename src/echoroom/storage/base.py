"""Abstract storage interface for EchoRoom records."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Any


class RecordStore(ABC):
    """Owner of all EchoRoom records.

    Records go in and come out as plain dicts. Callers always receive copies,
    so the only way to change a stored record is through the store.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the backend for use."""

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources."""

    @abstractmethod
    def lock(self, record_id: str) -> AbstractAsyncContextManager[Any]:
        """Mutual exclusion for read-check-write sequences on one idea or experiment.

        Held by the engines from the check of a stored record until the write
        that depends on it.
        """

    # --- Idea operations ---

    @abstractmethod
    async def insert_idea(self, idea: dict[str, Any]) -> dict[str, Any]:
        """Insert an idea. Returns the inserted idea."""

    @abstractmethod
    async def get_idea(self, idea_id: str) -> dict[str, Any] | None:
        """Get an idea by ID. Returns None if not found."""

    @abstractmethod
    async def update_idea(self, idea_id: str, updates: dict[str, Any]) -> dict[str, Any] | None:
        """Apply updates to an idea. Returns the updated idea or None."""

    @abstractmethod
    async def query_ideas(
        self,
        *,
        status: str | None = None,
        author_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """Ideas matching the filters, in creation order."""

    # --- Experiment operations ---

    @abstractmethod
    async def insert_experiment(self, experiment: dict[str, Any]) -> dict[str, Any]:
        """Insert an experiment."""

    @abstractmethod
    async def get_experiment(self, experiment_id: str) -> dict[str, Any] | None:
        """Get an experiment by ID."""

    @abstractmethod
    async def query_experiments(self, *, idea_id: str | None = None) -> list[dict[str, Any]]:
        """Experiments, optionally restricted to one idea, in creation order."""

    # --- Outcome operations ---

    @abstractmethod
    async def insert_outcome(self, outcome: dict[str, Any]) -> dict[str, Any]:
        """Insert an outcome."""

    @abstractmethod
    async def get_outcome(self, outcome_id: str) -> dict[str, Any] | None:
        """Get an outcome by ID."""

    @abstractmethod
    async def get_outcome_for_experiment(self, experiment_id: str) -> dict[str, Any] | None:
        """Get the outcome recorded for an experiment, if any."""

    # --- Reflection operations ---

    @abstractmethod
    async def insert_reflection(self, reflection: dict[str, Any]) -> dict[str, Any]:
        """Insert a reflection."""

    @abstractmethod
    async def query_reflections(self, *, outcome_id: str | None = None) -> list[dict[str, Any]]:
        """Reflections, optionally restricted to one outcome, in creation order."""

    # --- Stats ---

    @abstractmethod
    async def get_stats(self) -> dict[str, int]:
        """Record counts per table."""
