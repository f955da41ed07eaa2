"""In-memory storage backend. Contents reset when the process exits."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from echoroom.storage.base import RecordStore

logger = logging.getLogger(__name__)

# Field whitelist per table for update operations
_ALLOWED_COLUMNS: dict[str, set[str]] = {
    "ideas": {"title", "description", "status", "version", "updated_at"},
}


def _validate_update_keys(table: str, updates: dict[str, Any]) -> dict[str, Any]:
    """Filter update dict to only allowed field names."""
    allowed = _ALLOWED_COLUMNS.get(table, set())
    filtered = {k: v for k, v in updates.items() if k in allowed}
    rejected = set(updates.keys()) - allowed - {"id"}
    if rejected:
        logger.warning("Rejected invalid field names for %s: %s", table, rejected)
    return filtered


class InMemoryStore(RecordStore):
    """Dict-backed store with one asyncio lock per stored idea or experiment."""

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, dict[str, Any]]] = {
            "ideas": {},
            "experiments": {},
            "outcomes": {},
            "reflections": {},
        }
        self._locks: dict[str, asyncio.Lock] = {}

    async def initialize(self) -> None:
        logger.info("Initialized in-memory store")

    async def close(self) -> None:
        for table in self._tables.values():
            table.clear()
        self._locks.clear()

    def lock(self, record_id: str) -> asyncio.Lock:
        # Unknown ids get a throwaway lock; the caller's lookup then raises NotFound.
        lock = self._locks.get(record_id)
        return lock if lock is not None else asyncio.Lock()

    def _insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        rows = self._tables[table]
        if record["id"] in rows:
            raise ValueError(f"Duplicate id in {table}: {record['id']}")
        rows[record["id"]] = dict(record)
        return dict(record)

    def _get(self, table: str, record_id: str) -> dict[str, Any] | None:
        row = self._tables[table].get(record_id)
        return dict(row) if row is not None else None

    def _scan(self, table: str, **filters: Any) -> list[dict[str, Any]]:
        active = {k: v for k, v in filters.items() if v is not None}
        return [
            dict(row)
            for row in self._tables[table].values()
            if all(row.get(k) == v for k, v in active.items())
        ]

    # --- Idea operations ---

    async def insert_idea(self, idea: dict[str, Any]) -> dict[str, Any]:
        inserted = self._insert("ideas", idea)
        self._locks[inserted["id"]] = asyncio.Lock()
        return inserted

    async def get_idea(self, idea_id: str) -> dict[str, Any] | None:
        return self._get("ideas", idea_id)

    async def update_idea(self, idea_id: str, updates: dict[str, Any]) -> dict[str, Any] | None:
        row = self._tables["ideas"].get(idea_id)
        if row is None:
            return None
        row.update(_validate_update_keys("ideas", updates))
        return dict(row)

    async def query_ideas(
        self,
        *,
        status: str | None = None,
        author_id: str | None = None,
    ) -> list[dict[str, Any]]:
        return self._scan("ideas", status=status, author_id=author_id)

    # --- Experiment operations ---

    async def insert_experiment(self, experiment: dict[str, Any]) -> dict[str, Any]:
        inserted = self._insert("experiments", experiment)
        self._locks[inserted["id"]] = asyncio.Lock()
        return inserted

    async def get_experiment(self, experiment_id: str) -> dict[str, Any] | None:
        return self._get("experiments", experiment_id)

    async def query_experiments(self, *, idea_id: str | None = None) -> list[dict[str, Any]]:
        return self._scan("experiments", idea_id=idea_id)

    # --- Outcome operations ---

    async def insert_outcome(self, outcome: dict[str, Any]) -> dict[str, Any]:
        return self._insert("outcomes", outcome)

    async def get_outcome(self, outcome_id: str) -> dict[str, Any] | None:
        return self._get("outcomes", outcome_id)

    async def get_outcome_for_experiment(self, experiment_id: str) -> dict[str, Any] | None:
        matches = self._scan("outcomes", experiment_id=experiment_id)
        return matches[0] if matches else None

    # --- Reflection operations ---

    async def insert_reflection(self, reflection: dict[str, Any]) -> dict[str, Any]:
        return self._insert("reflections", reflection)

    async def query_reflections(self, *, outcome_id: str | None = None) -> list[dict[str, Any]]:
        return self._scan("reflections", outcome_id=outcome_id)

    async def get_stats(self) -> dict[str, int]:
        return {name: len(rows) for name, rows in self._tables.items()}
