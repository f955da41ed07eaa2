"""Tests for the command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from echoroom.cli import main


@pytest.fixture
def runner(monkeypatch, tmp_path: Path) -> CliRunner:
    monkeypatch.setenv("ECHOROOM_HOME", str(tmp_path))
    return CliRunner()


def test_config_shows_effective_values(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(main, ["config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["home_path"] == str(tmp_path)
    assert data["pagination_max"] == 50


def test_home_option_beats_env(runner: CliRunner, tmp_path: Path) -> None:
    """--home wins over $ECHOROOM_HOME."""
    home = tmp_path / "explicit"
    result = runner.invoke(main, ["--home", str(home), "config"])
    assert result.exit_code == 0
    assert json.loads(result.output)["home_path"] == str(home.resolve())


def test_config_save(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(main, ["config", "--save"])
    assert result.exit_code == 0
    assert (tmp_path / "config.yaml").exists()


def test_transitions_table(runner: CliRunner) -> None:
    result = runner.invoke(main, ["transitions"])
    assert result.exit_code == 0
    assert "UnderReview" in result.output
    assert "terminal" in result.output


def test_check_idea_valid(runner: CliRunner) -> None:
    result = runner.invoke(main, ["check", "idea", "--title", "abc", "--description", "d"])
    assert result.exit_code == 0
    assert "valid" in result.output


def test_check_idea_invalid(runner: CliRunner) -> None:
    result = runner.invoke(main, ["check", "idea", "--title", "ab", "--description", "d"])
    assert result.exit_code == 1


def test_check_experiment_dates(runner: CliRunner) -> None:
    result = runner.invoke(main, [
        "check", "experiment", "--title", "Test", "--hypothesis", "h",
        "--start", "2024-12-31", "--end", "2024-01-01",
    ])
    assert result.exit_code == 1


def test_check_outcome(runner: CliRunner) -> None:
    assert runner.invoke(main, ["check", "outcome", "--result", "Mixed"]).exit_code == 0
    assert runner.invoke(main, ["check", "outcome", "--result", "success"]).exit_code == 1


def test_check_reflection(runner: CliRunner) -> None:
    assert runner.invoke(main, ["check", "reflection", "x" * 15]).exit_code == 0
    assert runner.invoke(main, ["check", "reflection", "x" * 14]).exit_code == 1


def test_demo(runner: CliRunner) -> None:
    result = runner.invoke(main, ["demo"])
    assert result.exit_code == 0, result.output
    assert "Approved" in result.output
    assert "VersionConflict" in result.output
    assert "Dashboard" in result.output
    assert "Activity" in result.output
    assert "outcome.recorded" in result.output
