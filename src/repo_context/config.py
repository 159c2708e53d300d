"""Configuration loading for repo-context (.repo-context.toml)."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

CONFIG_FILENAME = ".repo-context.toml"

# Policy defaults; changing them changes reproducible outputs.
DEFAULT_HOT_DAYS = 30
DEFAULT_TOP_N = 10
DEFAULT_CONVENTION_LIMIT = 20
DEFAULT_MAX_FILE_BYTES = 1_000_000
DEFAULT_COMMAND_TIMEOUT = 10.0


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class ContextConfig:
    """Tunable policy constants for one pipeline run."""

    hot_days: int = DEFAULT_HOT_DAYS
    top_n: int = DEFAULT_TOP_N
    convention_limit: int = DEFAULT_CONVENTION_LIMIT
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES
    since: str | None = None
    command_timeout: float | None = DEFAULT_COMMAND_TIMEOUT
    github_api: bool = True

    def merged(self, **overrides: Any) -> ContextConfig:
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)


_INT_FIELDS = ("hot_days", "top_n", "convention_limit", "max_file_bytes")


def load_config(repo_path: str | Path, config_path: str | Path | None = None) -> ContextConfig:
    """Load configuration for a repository.

    Reads ``config_path`` when given, otherwise ``.repo-context.toml`` at the
    repository root. A missing file yields the defaults.
    """
    path = Path(config_path) if config_path else Path(repo_path) / CONFIG_FILENAME
    if not path.is_file():
        if config_path:
            raise ConfigError(f"Config file not found: {path}")
        return ContextConfig()

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e

    # Allow both a bare table and a [repo-context] section.
    section = data.get("repo-context", data)
    if not isinstance(section, dict):
        raise ConfigError(f"{path}: [repo-context] must be a table")

    known = {f.name for f in fields(ContextConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ConfigError(f"{path}: unknown settings: {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for key, value in section.items():
        if key in _INT_FIELDS:
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigError(f"{path}: {key} must be a positive integer")
        elif key == "since":
            if not isinstance(value, str):
                raise ConfigError(f"{path}: since must be a string")
        elif key == "command_timeout":
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
                raise ConfigError(f"{path}: command_timeout must be a positive number")
            value = float(value)
        elif key == "github_api":
            if not isinstance(value, bool):
                raise ConfigError(f"{path}: github_api must be true or false")
        values[key] = value

    return ContextConfig(**values)
