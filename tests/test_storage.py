"""Tests for the in-memory record store."""

from __future__ import annotations

import asyncio

import pytest

from echoroom.models.experiment import Experiment, Outcome, Reflection
from echoroom.models.idea import Idea
from echoroom.storage.memory_store import InMemoryStore


class TestIdeas:
    async def test_insert_and_get(self, store: InMemoryStore) -> None:
        idea = Idea(title="Stored", description="d")
        await store.insert_idea(idea.to_storage())

        data = await store.get_idea(idea.id)
        assert data["title"] == "Stored"
        assert data["status"] == "Draft"
        assert data["version"] == 0

    async def test_get_missing(self, store: InMemoryStore) -> None:
        assert await store.get_idea("missing") is None

    async def test_duplicate_id_rejected(self, store: InMemoryStore) -> None:
        idea = Idea(id="dup", title="One", description="d")
        await store.insert_idea(idea.to_storage())
        with pytest.raises(ValueError, match="Duplicate"):
            await store.insert_idea(idea.to_storage())

    async def test_update_filters_unknown_fields(self, store: InMemoryStore) -> None:
        idea = Idea(title="Before", description="d", author_id="ann")
        await store.insert_idea(idea.to_storage())

        updated = await store.update_idea(
            idea.id, {"title": "After", "author_id": "mallory", "id": "other"}
        )

        assert updated["title"] == "After"
        assert updated["author_id"] == "ann"
        assert updated["id"] == idea.id

    async def test_update_missing(self, store: InMemoryStore) -> None:
        assert await store.update_idea("missing", {"title": "x"}) is None

    async def test_reads_return_copies(self, store: InMemoryStore) -> None:
        idea = Idea(title="Original", description="d")
        inserted = await store.insert_idea(idea.to_storage())
        inserted["title"] = "tampered"
        fetched = await store.get_idea(idea.id)
        fetched["title"] = "tampered"

        assert (await store.get_idea(idea.id))["title"] == "Original"

    async def test_query_filters_and_order(self, store: InMemoryStore) -> None:
        for i, author in enumerate(["ann", "bob", "ann"]):
            await store.insert_idea(
                Idea(id=f"i{i}", title=f"Idea {i}", description="d", author_id=author).to_storage()
            )

        assert [d["id"] for d in await store.query_ideas()] == ["i0", "i1", "i2"]
        assert [d["id"] for d in await store.query_ideas(author_id="ann")] == ["i0", "i2"]
        assert await store.query_ideas(status="Approved") == []

    async def test_lock_is_per_idea(self, store: InMemoryStore) -> None:
        for idea_id in ("a", "b"):
            await store.insert_idea(Idea(id=idea_id, title="Locked", description="d").to_storage())

        assert store.lock("a") is store.lock("a")
        assert store.lock("a") is not store.lock("b")
        assert isinstance(store.lock("a"), asyncio.Lock)

    async def test_unknown_ids_are_not_retained(self, store: InMemoryStore) -> None:
        """Locks for ids that were never stored are not kept."""
        assert isinstance(store.lock("missing"), asyncio.Lock)
        assert store.lock("missing") is not store.lock("missing")
        assert store._locks == {}

    async def test_experiments_get_a_lock(self, store: InMemoryStore) -> None:
        experiment = Experiment(
            idea_id="i1", title="Exp", hypothesis="h",
            start_date="2024-01-01", end_date="2024-01-02",
        )
        await store.insert_experiment(experiment.to_storage())
        assert store.lock(experiment.id) is store.lock(experiment.id)


class TestWorkflowRecords:
    async def test_experiment_outcome_reflection(self, store: InMemoryStore) -> None:
        experiment = Experiment(
            idea_id="i1", title="Exp", hypothesis="h",
            start_date="2024-01-01", end_date="2024-01-02",
        )
        await store.insert_experiment(experiment.to_storage())
        outcome = Outcome(experiment_id=experiment.id, result="Success")
        await store.insert_outcome(outcome.to_storage())
        reflection = Reflection(outcome_id=outcome.id, content="Fifteen chars plus.")
        await store.insert_reflection(reflection.to_storage())

        assert (await store.get_experiment(experiment.id))["start_date"] == "2024-01-01"
        assert [d["id"] for d in await store.query_experiments(idea_id="i1")] == [experiment.id]
        assert (await store.get_outcome(outcome.id))["result"] == "Success"
        assert (await store.get_outcome_for_experiment(experiment.id))["id"] == outcome.id
        assert await store.get_outcome_for_experiment("missing") is None
        assert len(await store.query_reflections(outcome_id=outcome.id)) == 1

    async def test_stats_and_close(self, store: InMemoryStore) -> None:
        await store.insert_idea(Idea(title="Counted", description="d").to_storage())
        assert await store.get_stats() == {
            "ideas": 1,
            "experiments": 0,
            "outcomes": 0,
            "reflections": 0,
        }

        await store.close()
        assert (await store.get_stats())["ideas"] == 0
