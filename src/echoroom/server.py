"""FastMCP server — 4 tools, 3 resources, 1 prompt."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime
from typing import Annotated, Any, Literal

from fastmcp import FastMCP
from pydantic import Field

from echoroom.config import Config
from echoroom.core.dashboard import Dashboard, IdeaFilter
from echoroom.core.experiments import ExperimentEngine
from echoroom.core.ideas import IdeaEngine
from echoroom.core.reflections import ReflectionEngine
from echoroom.core.transitions import VALID_TRANSITIONS
from echoroom.errors import EchoRoomError
from echoroom.events.activity import ActivityFeed
from echoroom.events.bus import EventBus
from echoroom.models.idea import IdeaStatus
from echoroom.storage.base import RecordStore
from echoroom.storage.memory_store import InMemoryStore

logger = logging.getLogger(__name__)


def _json(data: dict[str, Any]) -> str:
    return json.dumps(data, default=str)


def _ok(data: dict[str, Any]) -> str:
    """Return a versioned JSON success response."""
    return _json({**data, "_v": "1.0"})


def _err(msg: str, kind: str = "ValidationError") -> str:
    """Return a versioned JSON error response."""
    return _json({"_v": "1.0", "error": msg, "kind": kind})


def _fail(e: EchoRoomError) -> str:
    return _err(str(e), e.kind)


def create_server(config: Config | None = None, store: RecordStore | None = None) -> FastMCP:
    """Create the FastMCP server over a single owned record store."""
    config = config or Config()
    mcp = FastMCP(config.server_name)

    state: dict[str, Any] = {}
    _lock = asyncio.Lock()

    async def _init() -> dict[str, Any]:
        async with _lock:
            if "ideas" not in state:
                record_store = store or InMemoryStore()
                await record_store.initialize()
                bus = EventBus()
                ideas = IdeaEngine(record_store, bus)
                experiments = ExperimentEngine(record_store, bus, ideas)
                state["store"] = record_store
                state["bus"] = bus
                state["activity"] = ActivityFeed().attach(bus)
                state["ideas"] = ideas
                state["experiments"] = experiments
                state["reflections"] = ReflectionEngine(record_store, bus, experiments)
                state["dashboard"] = Dashboard(
                    record_store,
                    pagination_default=config.pagination_default,
                    pagination_max=config.pagination_max,
                )
                logger.info(
                    "Server %s initialized with %s", config.server_name, type(record_store).__name__
                )
        return state

    # ── er_idea ───────────────────────────────────────────────

    @mcp.tool()
    async def er_idea(
        action: Annotated[
            Literal["create", "get", "update", "transition", "advance"],
            Field(description="create | get | update | transition | advance"),
        ],
        idea_id: Annotated[
            str | None,
            Field(description="Existing idea ID (get, update, transition, advance)"),
        ] = None,
        title: Annotated[
            str | None,
            Field(description="Title, 3-100 chars (create, update)"),
        ] = None,
        description: Annotated[
            str | None,
            Field(description="Description, 1-2000 chars (create, update)"),
        ] = None,
        author_id: Annotated[
            str | None,
            Field(description="Verified author ID (create)"),
        ] = None,
        expected_version: Annotated[
            int | None,
            Field(description="Version last seen by the caller (update, transition, advance)", ge=0),
        ] = None,
        target_status: Annotated[
            str | None,
            Field(description="Draft|Submitted|UnderReview|Approved|Rejected|Archived (transition)"),
        ] = None,
    ) -> str:
        """Submit ideas and move them through the review lifecycle: Draft, Submitted, UnderReview, Approved or Rejected, Archived. Every change needs the version you last saw; a stale version returns kind=VersionConflict and you should reload with action="get" and retry.

Actions: create (new Draft idea), get (load idea), update (edit title/description), transition (change status), advance (next happy-path status)."""  # noqa: E501
        s = await _init()
        engine: IdeaEngine = s["ideas"]

        if action == "create":
            if not title or not title.strip():
                return _err("Title is required for create")
            if not description or not description.strip():
                return _err("Description is required for create")
            try:
                idea = await engine.create(
                    title=title, description=description, author_id=author_id
                )
            except EchoRoomError as e:
                return _fail(e)
            return _ok(idea.to_response(detail="full"))

        if not idea_id or not idea_id.strip():
            return _err(f"idea_id is required for {action}")
        idea_id = idea_id.strip()

        if action == "get":
            idea = await engine.get(idea_id)
            if idea is None:
                return _err(f"Idea not found: {idea_id}", "NotFound")
            data = idea.to_response(detail="full")
            data["allowed_next"] = engine.allowed_next(idea)
            return _ok(data)

        if expected_version is None:
            return _err(f"expected_version is required for {action}")

        try:
            if action == "update":
                idea = await engine.update(
                    idea_id, expected_version, title=title, description=description
                )
                return _ok(idea.to_response(detail="full"))

            if action == "transition":
                if not target_status or not target_status.strip():
                    return _err("target_status is required for transition")
                idea = await engine.transition(idea_id, expected_version, target_status.strip())
                return _ok(idea.to_response(detail="full"))

            if action == "advance":
                advanced = await engine.advance(idea_id, expected_version)
                if advanced is None:
                    return _err(
                        f"Idea {idea_id} has no next status on the happy path",
                        "InvalidTransition",
                    )
                return _ok(advanced.to_response(detail="full"))
        except EchoRoomError as e:
            return _fail(e)

        return _err(f"Unknown action: {action}")

    # ── er_list ───────────────────────────────────────────────

    @mcp.tool()
    async def er_list(
        status: Annotated[
            str | None,
            Field(description="Filter by status"),
        ] = None,
        author_id: Annotated[
            str | None,
            Field(description="Filter by author"),
        ] = None,
        created_after: Annotated[
            str | None,
            Field(description="ISO timestamp, inclusive lower bound on created_at"),
        ] = None,
        created_before: Annotated[
            str | None,
            Field(description="ISO timestamp, inclusive upper bound on created_at"),
        ] = None,
        sort_by: Annotated[
            Literal["created_at", "updated_at", "title", "status"],
            Field(description="Sort key (default: created_at)"),
        ] = "created_at",
        descending: Annotated[
            bool,
            Field(description="Reverse the sort order"),
        ] = False,
        detail: Annotated[
            str,
            Field(description="summary or full (default: summary)"),
        ] = "summary",
        limit: Annotated[
            int,
            Field(description="Max results (clamped to the configured page maximum)", ge=1),
        ] = 10,
        offset: Annotated[
            int,
            Field(description="Pagination offset", ge=0),
        ] = 0,
    ) -> str:
        """List ideas filtered by status, author, or creation date, sorted by the requested key."""
        s = await _init()
        try:
            flt = IdeaFilter(
                status=IdeaStatus(status) if status else None,
                author_id=author_id,
                created_after=datetime.fromisoformat(created_after) if created_after else None,
                created_before=datetime.fromisoformat(created_before) if created_before else None,
                sort_by=sort_by,
                descending=descending,
            )
        except ValueError as e:
            return _err(str(e))

        ideas = await s["dashboard"].list_ideas(flt, limit=limit, offset=offset)
        items = [i.to_response(detail=detail) for i in ideas]
        return _ok({"count": len(items), "ideas": items})

    # ── er_experiment ─────────────────────────────────────────

    @mcp.tool()
    async def er_experiment(
        action: Annotated[
            Literal["create", "get", "list", "outcome"],
            Field(description="create | get | list | outcome"),
        ],
        idea_id: Annotated[
            str | None,
            Field(description="Approved idea to promote (create); filter (list)"),
        ] = None,
        experiment_id: Annotated[
            str | None,
            Field(description="Existing experiment ID (get, outcome)"),
        ] = None,
        title: Annotated[
            str | None,
            Field(description="Experiment title, 3-100 chars (create)"),
        ] = None,
        hypothesis: Annotated[
            str | None,
            Field(description="Hypothesis, 1-500 chars (create)"),
        ] = None,
        start_date: Annotated[
            str | None,
            Field(description="Start date YYYY-MM-DD (create)"),
        ] = None,
        end_date: Annotated[
            str | None,
            Field(description="End date YYYY-MM-DD, not before start (create)"),
        ] = None,
        result: Annotated[
            str | None,
            Field(description="Success | Mixed | Failed (outcome)"),
        ] = None,
        notes: Annotated[
            str | None,
            Field(description="Optional notes, up to 1000 chars (outcome)"),
        ] = None,
        author_id: Annotated[
            str | None,
            Field(description="Verified author ID (create, outcome)"),
        ] = None,
    ) -> str:
        """Promote approved ideas to time-boxed experiments and record their outcome.

Actions: create (new experiment), get (experiment with outcome), list (experiments, optionally for one idea), outcome (record result)."""  # noqa: E501
        s = await _init()
        engine: ExperimentEngine = s["experiments"]

        try:
            if action == "create":
                if not idea_id or not idea_id.strip():
                    return _err("idea_id is required for create")
                experiment = await engine.create(
                    idea_id=idea_id.strip(),
                    title=title,
                    hypothesis=hypothesis,
                    start_date=start_date,
                    end_date=end_date,
                    created_by=author_id,
                )
                return _ok(experiment.to_response(detail="full"))

            if action == "list":
                experiments = await engine.list_experiments(idea_id=idea_id)
                items = [e.to_response() for e in experiments]
                return _ok({"count": len(items), "experiments": items})

            if not experiment_id or not experiment_id.strip():
                return _err(f"experiment_id is required for {action}")
            experiment_id = experiment_id.strip()

            if action == "get":
                experiment = await engine.require(experiment_id)
                outcome = await engine.outcome_for(experiment_id)
                data = experiment.to_response(detail="full")
                data["outcome"] = outcome.to_response() if outcome else None
                return _ok(data)

            if action == "outcome":
                outcome = await engine.record_outcome(
                    experiment_id, result=result, notes=notes, created_by=author_id
                )
                return _ok(outcome.to_response())
        except EchoRoomError as e:
            return _fail(e)

        return _err(f"Unknown action: {action}")

    # ── er_reflection ─────────────────────────────────────────

    @mcp.tool()
    async def er_reflection(
        action: Annotated[
            Literal["create", "list"],
            Field(description="create | list"),
        ],
        outcome_id: Annotated[
            str | None,
            Field(description="Outcome reflected on (create); filter (list)"),
        ] = None,
        content: Annotated[
            str | None,
            Field(description="Reflection text, 15-5000 chars (create)"),
        ] = None,
        author_id: Annotated[
            str | None,
            Field(description="Verified author ID (create)"),
        ] = None,
    ) -> str:
        """Write and list reflections on recorded outcomes."""
        s = await _init()
        engine: ReflectionEngine = s["reflections"]

        if action == "create":
            if not outcome_id or not outcome_id.strip():
                return _err("outcome_id is required for create")
            try:
                reflection = await engine.create(
                    outcome_id.strip(), content=content, created_by=author_id
                )
            except EchoRoomError as e:
                return _fail(e)
            return _ok(reflection.to_response())

        if action == "list":
            reflections = await engine.list_reflections(outcome_id=outcome_id)
            items = [r.to_response() for r in reflections]
            return _ok({"count": len(items), "reflections": items})

        return _err(f"Unknown action: {action}")

    # ── Resources (3) ──────────────────────────────────────────

    @mcp.resource("er://dashboard")
    async def er_resource_dashboard() -> str:
        """Idea counts by status and author."""
        s = await _init()
        return _ok(await s["dashboard"].summary())

    @mcp.resource("er://transitions")
    async def er_resource_transitions() -> str:
        """The idea lifecycle transition table."""
        return _ok({
            "transitions": {
                status.value: sorted(t.value for t in targets)
                for status, targets in VALID_TRANSITIONS.items()
            }
        })

    @mcp.resource("er://activity")
    async def er_resource_activity() -> str:
        """Recent lifecycle events, newest first."""
        s = await _init()
        entries = s["activity"].recent(limit=config.pagination_max)
        return _ok({"count": len(entries), "events": entries})

    # ── Prompts (1) ──────────────────────────────────────────

    @mcp.prompt()
    async def er_review() -> str:
        """Review queue — ideas waiting on a decision and experiments without an outcome."""
        s = await _init()
        dashboard: Dashboard = s["dashboard"]
        parts = ["# EchoRoom Review\n"]

        waiting = [
            idea
            async for idea in dashboard.iter_ideas(IdeaFilter(status=IdeaStatus.UNDER_REVIEW))
        ]
        parts.append(f"## Under Review ({len(waiting)})")
        for idea in waiting:
            parts.append(f"  - {idea.title} [{idea.id}] v{idea.version}")

        open_experiments = []
        for experiment in await s["experiments"].list_experiments():
            if await s["experiments"].outcome_for(experiment.id) is None:
                open_experiments.append(experiment)
        parts.append(f"\n## Experiments Awaiting Outcome ({len(open_experiments)})")
        for experiment in open_experiments:
            parts.append(f"  - {experiment.title} (ends {experiment.end_date.isoformat()})")

        recent = s["activity"].recent(limit=10)
        parts.append(f"\n## Recent Activity ({len(recent)})")
        for entry in recent:
            subject = next((v for k, v in entry["data"].items() if k.endswith("_id")), "")
            parts.append(f"  - {entry['event']} {subject}".rstrip())

        return "\n".join(parts)

    return mcp
