"""Configuration loading utilities.

Supports YAML and JSON configuration files with schema validation.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from container_stats.core.exceptions import ConfigurationError
from container_stats.core.schemas import AgentConfig


def load_config(path: Path | str | None = None, **overrides: Any) -> AgentConfig:
    """Load and validate the agent configuration.

    Args:
        path: Path to YAML or JSON configuration file. None uses defaults only.
        **overrides: Values that take precedence over the file (None values are ignored)

    Returns:
        Validated AgentConfig object

    Raises:
        ConfigurationError: If the file is missing, unreadable, or invalid
    """
    data: dict[str, Any] = {}
    if path is not None:
        data = _read_config_file(Path(path))

    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return AgentConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    try:
        with open(path, encoding="utf-8") as f:
            if suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigurationError(
                    f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json"
                )
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read configuration file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping at the top level")
    return data
