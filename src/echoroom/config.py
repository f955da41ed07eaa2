"""EchoRoom configuration management."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class Config:
    """EchoRoom configuration."""

    home_path: Path = field(default_factory=lambda: Path.home() / ".echoroom")
    log_level: str = "INFO"
    pagination_default: int = 10
    pagination_max: int = 50
    server_name: str = "echoroom"

    @classmethod
    def load(cls, home_path: Path | None = None) -> Config:
        """Load config from defaults, env vars, then YAML file.

        An explicit ``home_path`` takes precedence over ``$ECHOROOM_HOME``.
        """
        config = cls()

        env_path = os.environ.get("ECHOROOM_HOME")
        if home_path:
            config.home_path = home_path
        elif env_path:
            config.home_path = Path(env_path)

        env_log = os.environ.get("ECHOROOM_LOG_LEVEL")
        if env_log:
            config.log_level = env_log

        config_file = config.config_file
        if config_file.exists():
            with open(config_file) as f:
                data = yaml.safe_load(f) or {}
            for key, value in data.items():
                if hasattr(config, key):
                    expected_type = type(getattr(config, key))
                    if isinstance(getattr(config, key), Path):
                        setattr(config, key, Path(value))
                    else:
                        setattr(config, key, expected_type(value))

        if config.pagination_default > config.pagination_max:
            config.pagination_default = config.pagination_max

        return config

    @property
    def config_file(self) -> Path:
        return self.home_path / "config.yaml"

    def to_dict(self) -> dict:
        return {
            "home_path": str(self.home_path),
            "log_level": self.log_level,
            "pagination_default": self.pagination_default,
            "pagination_max": self.pagination_max,
            "server_name": self.server_name,
        }

    def save(self) -> None:
        """Save current config to YAML."""
        self.home_path.mkdir(parents=True, exist_ok=True)
        data = self.to_dict()
        data.pop("home_path")
        with open(self.config_file, "w") as f:
            yaml.dump(data, f, default_flow_style=False)
