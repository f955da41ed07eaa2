"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import yaml

from echoroom.config import Config


def test_defaults(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("ECHOROOM_HOME", raising=False)
    monkeypatch.delenv("ECHOROOM_LOG_LEVEL", raising=False)
    config = Config.load(tmp_path)

    assert config.home_path == tmp_path
    assert config.log_level == "INFO"
    assert config.pagination_default == 10
    assert config.pagination_max == 50


def test_env_overrides(tmp_path: Path, monkeypatch) -> None:
    """Env vars apply when no home directory is passed."""
    monkeypatch.setenv("ECHOROOM_HOME", str(tmp_path / "env-home"))
    monkeypatch.setenv("ECHOROOM_LOG_LEVEL", "DEBUG")
    config = Config.load()

    assert config.home_path == tmp_path / "env-home"
    assert config.log_level == "DEBUG"


def test_explicit_home_beats_env(tmp_path: Path, monkeypatch) -> None:
    """An explicit home directory wins over $ECHOROOM_HOME."""
    monkeypatch.setenv("ECHOROOM_HOME", str(tmp_path / "env-home"))
    (tmp_path / "config.yaml").write_text(yaml.dump({"server_name": "explicit"}))
    config = Config.load(tmp_path)

    assert config.home_path == tmp_path
    assert config.server_name == "explicit"


def test_yaml_overrides(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("ECHOROOM_HOME", raising=False)
    (tmp_path / "config.yaml").write_text(
        yaml.dump({"pagination_max": "20", "server_name": "lab", "unknown_key": 1})
    )
    config = Config.load(tmp_path)

    assert config.pagination_max == 20
    assert config.server_name == "lab"
    assert not hasattr(config, "unknown_key")


def test_default_page_never_exceeds_max(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("ECHOROOM_HOME", raising=False)
    (tmp_path / "config.yaml").write_text(yaml.dump({"pagination_max": 5}))
    assert Config.load(tmp_path).pagination_default == 5


def test_save_round_trip(config: Config, monkeypatch) -> None:
    monkeypatch.delenv("ECHOROOM_HOME", raising=False)
    monkeypatch.delenv("ECHOROOM_LOG_LEVEL", raising=False)
    config.log_level = "WARNING"
    config.pagination_default = 7
    config.save()

    loaded = Config.load(config.home_path)
    assert loaded.log_level == "WARNING"
    assert loaded.pagination_default == 7
