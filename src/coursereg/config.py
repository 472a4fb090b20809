"""Configuration loading for coursereg.

Settings are resolved in three layers: built-in defaults, an optional YAML
file, then ``COURSEREG_*`` environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

ENV_PREFIX = "COURSEREG_"


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass(frozen=True)
class Settings:
    """Runtime settings.

    Attributes:
        db_path: SQLite database file, or ":memory:".
        busy_timeout: Seconds a store call waits for a competing writer
            before failing.
        log_dir: Directory for rotating log files.
        log_level: Root coursereg log level.
        default_page_size: Page size used when a listing omits one.
        max_page_size: Upper bound accepted for a listing page size.
    """

    db_path: str = "coursereg.db"
    busy_timeout: float = 5.0
    log_dir: str = "logs"
    log_level: str = "INFO"
    default_page_size: int = 10
    max_page_size: int = 100

    def __post_init__(self) -> None:
        if self.busy_timeout <= 0:
            raise ConfigError("busy_timeout must be positive")
        if self.default_page_size < 1 or self.max_page_size < 1:
            raise ConfigError("page sizes must be at least 1")
        if self.default_page_size > self.max_page_size:
            raise ConfigError("default_page_size cannot exceed max_page_size")


def _coerce(name: str, raw: Any) -> Any:
    target = {f.name: f.type for f in fields(Settings)}[name]
    try:
        if target == "int":
            return int(raw)
        if target == "float":
            return float(raw)
        return str(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from e


def _from_mapping(data: Mapping[str, Any]) -> dict[str, Any]:
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown settings: {', '.join(unknown)}")
    return {key: _coerce(key, value) for key, value in data.items()}


def load_settings(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from defaults, an optional YAML file and the environment.

    Args:
        path: Optional YAML file with a top-level mapping of setting names.
        environ: Environment to read overrides from. Defaults to os.environ.

    Returns:
        Resolved settings.

    Raises:
        ConfigError: If the file is unreadable or a value is invalid.
    """
    settings = Settings()

    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping in {config_path}")
        settings = replace(settings, **_from_mapping(data))

    env = os.environ if environ is None else environ
    overrides = {
        f.name: env[ENV_PREFIX + f.name.upper()]
        for f in fields(Settings)
        if ENV_PREFIX + f.name.upper() in env
    }
    if overrides:
        settings = replace(settings, **_from_mapping(overrides))

    return settings
