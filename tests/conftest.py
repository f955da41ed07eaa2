"""Shared test fixtures for EchoRoom."""

from __future__ import annotations

from pathlib import Path

import pytest

from echoroom.config import Config
from echoroom.core.dashboard import Dashboard
from echoroom.core.experiments import ExperimentEngine
from echoroom.core.ideas import IdeaEngine
from echoroom.core.reflections import ReflectionEngine
from echoroom.events.bus import EventBus
from echoroom.storage.memory_store import InMemoryStore


@pytest.fixture
async def store() -> InMemoryStore:
    s = InMemoryStore()
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def ideas(store: InMemoryStore, bus: EventBus) -> IdeaEngine:
    return IdeaEngine(store, bus)


@pytest.fixture
def experiments(store: InMemoryStore, bus: EventBus, ideas: IdeaEngine) -> ExperimentEngine:
    return ExperimentEngine(store, bus, ideas)


@pytest.fixture
def reflections(
    store: InMemoryStore, bus: EventBus, experiments: ExperimentEngine
) -> ReflectionEngine:
    return ReflectionEngine(store, bus, experiments)


@pytest.fixture
def dashboard(store: InMemoryStore) -> Dashboard:
    return Dashboard(store, pagination_default=10, pagination_max=50)


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(home_path=tmp_path)
