"""CLI — serve, config, transitions, check, demo."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from echoroom.config import Config
from echoroom.core.transitions import VALID_TRANSITIONS
from echoroom.errors import EchoRoomError
from echoroom.validation import (
    ValidationResult,
    validate_experiment_form,
    validate_idea_form,
    validate_outcome_form,
    validate_reflection_form,
)


def _setup_logging(config: Config) -> None:
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@click.group()
@click.version_option(package_name="echoroom")
@click.option(
    "--home",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Config directory (default: ~/.echoroom or $ECHOROOM_HOME)",
)
@click.pass_context
def main(ctx: click.Context, home: Path | None) -> None:
    """EchoRoom — ideas, experiments, outcomes, reflections."""
    config = Config.load(home.expanduser().resolve() if home else None)
    _setup_logging(config)
    ctx.obj = config


@main.command()
@click.option("--transport", type=click.Choice(["stdio"]), default="stdio")
@click.pass_obj
def serve(config: Config, transport: str) -> None:
    """Start the MCP server. Ideas are kept in memory for the life of the process."""
    from echoroom.server import create_server

    server = create_server(config)
    server.run(transport=transport)  # type: ignore[arg-type]


@main.command("config")
@click.option("--save", is_flag=True, help="Write the effective config to config.yaml")
@click.pass_obj
def show_config(config: Config, save: bool) -> None:
    """Show the effective configuration."""
    if save:
        config.save()
        click.echo(f"Saved {config.config_file}")
    click.echo(json.dumps(config.to_dict(), indent=2))


@main.command()
def transitions() -> None:
    """Print the idea lifecycle transition table."""
    table = Table(title="Idea Lifecycle")
    table.add_column("From", style="cyan")
    table.add_column("Allowed targets")
    for status, targets in VALID_TRANSITIONS.items():
        table.add_row(status.value, ", ".join(sorted(t.value for t in targets)) or "(terminal)")
    Console().print(table)


@main.group()
def check() -> None:
    """Validate form input without storing anything."""


def _report(result: ValidationResult) -> None:
    if result.valid:
        click.echo("✓ valid")
        return
    click.echo(f"✗ {result.error}", err=True)
    sys.exit(1)


@check.command("idea")
@click.option("--title", default="")
@click.option("--description", default="")
def check_idea(title: str, description: str) -> None:
    """Validate an idea form."""
    _report(validate_idea_form(title, description))


@check.command("experiment")
@click.option("--title", default="")
@click.option("--hypothesis", default="")
@click.option("--start", "start_date", default="")
@click.option("--end", "end_date", default="")
def check_experiment(title: str, hypothesis: str, start_date: str, end_date: str) -> None:
    """Validate an experiment form."""
    _report(validate_experiment_form(title, hypothesis, start_date, end_date))


@check.command("outcome")
@click.option("--result", "result_value", default="")
@click.option("--notes", default=None)
def check_outcome(result_value: str, notes: str | None) -> None:
    """Validate an outcome form."""
    _report(validate_outcome_form(result_value, notes))


@check.command("reflection")
@click.argument("content", default="")
def check_reflection(content: str) -> None:
    """Validate reflection content."""
    _report(validate_reflection_form(content))


@main.command()
def demo() -> None:
    """Walk one idea through the full workflow in memory."""
    from echoroom.core.dashboard import Dashboard
    from echoroom.core.experiments import ExperimentEngine
    from echoroom.core.ideas import IdeaEngine
    from echoroom.core.reflections import ReflectionEngine
    from echoroom.events.activity import ActivityFeed
    from echoroom.events.bus import EventBus
    from echoroom.storage.memory_store import InMemoryStore

    console = Console()

    async def _demo() -> tuple[dict, list[dict]]:
        store = InMemoryStore()
        await store.initialize()
        try:
            bus = EventBus()
            activity = ActivityFeed().attach(bus)
            ideas = IdeaEngine(store, bus)
            experiments = ExperimentEngine(store, bus, ideas)
            reflections = ReflectionEngine(store, bus, experiments)

            idea = await ideas.create(
                title="Green checkout button",
                description="A green button may lift checkout conversion.",
                author_id="demo-user",
            )
            console.print(
                f"Created [bold]{idea.title}[/bold] ({idea.status.value}, v{idea.version})"
            )

            while (advanced := await ideas.advance(idea.id, idea.version)) is not None:
                idea = advanced
                console.print(f"  → {idea.status.value} (v{idea.version})")

            try:
                await ideas.transition(idea.id, 0, "Archived")
            except EchoRoomError as e:
                console.print(f"  [yellow]{e.kind}[/yellow]: {e}")

            experiment = await experiments.create(
                idea_id=idea.id,
                title="Checkout button A/B",
                hypothesis="Green buttons raise conversion by 5%",
                start_date="2024-01-01",
                end_date="2024-01-31",
                created_by="demo-user",
            )
            outcome = await experiments.record_outcome(
                experiment.id, result="Mixed", notes="Lift on mobile only."
            )
            await reflections.create(
                outcome.id,
                content="Device mix matters more than colour; segment the next test.",
                created_by="demo-user",
            )
            return await Dashboard(store).summary(), activity.recent(limit=len(activity))
        finally:
            await store.close()

    try:
        summary, events = asyncio.run(_demo())
    except EchoRoomError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    table = Table(title="Activity")
    table.add_column("Event", style="cyan", no_wrap=True)
    table.add_column("Details")
    for entry in reversed(events):
        table.add_row(entry["event"], ", ".join(f"{k}={v}" for k, v in entry["data"].items()))
    console.print(table)
    console.print(Panel(json.dumps(summary, indent=2), title="Dashboard"))
