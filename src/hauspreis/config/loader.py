"""
Configuration loading utilities.

Supports environment variable interpolation and config inheritance.
Minimal configs only need: project, data.path
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from hauspreis.config.settings import (
    CrossValidationConfig,
    DataConfig,
    MethodsConfig,
    OutputConfig,
    ProjectConfig,
)
from hauspreis.errors import ConfigurationError

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


def _interpolate_env_vars(value: str) -> str:
    """
    Interpolate environment variables in string values.

    Supports ${VAR} and ${VAR:default} syntax.
    """

    def replacer(match: re.Match[str]) -> str:
        default = match.group(2)
        return os.environ.get(match.group(1), default if default is not None else "")

    return _ENV_PATTERN.sub(replacer, value)


def _process_config_values(obj: Any) -> Any:
    """Recursively process config values for env var interpolation."""
    if isinstance(obj, str):
        return _interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _process_config_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_process_config_values(item) for item in obj]
    return obj


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is not None and not isinstance(data, dict):
        msg = f"Config file must contain a mapping at top level: {path}"
        raise ConfigurationError(msg)
    return _process_config_values(data) if data else {}


def config_from_dict(data: dict[str, Any]) -> ProjectConfig:
    """
    Build a validated ProjectConfig from a plain mapping.

    Args:
        data: Merged configuration mapping (already interpolated).

    Returns:
        Fully validated ProjectConfig instance.

    Raises:
        ConfigurationError: If required keys are missing or values are invalid.
    """
    project = data.get("project")
    if not project:
        msg = "Config must specify 'project' name"
        raise ConfigurationError(msg)

    data_section = data.get("data") or {}
    if not data_section.get("path"):
        msg = "Config must specify 'data.path'"
        raise ConfigurationError(msg)

    output_section = data.get("output") or {}

    try:
        return ProjectConfig(
            project=str(project),
            data=DataConfig(**data_section),
            cv=CrossValidationConfig(**(data.get("cv") or {})),
            methods=MethodsConfig(**(data.get("methods") or {})),
            output=OutputConfig(
                output_root=Path(output_section.get("root", "./output")),
            ),
        )
    except ValidationError as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigurationError(msg) from e


def load_config(
    config_path: Path,
    base_path: Path | None = None,
) -> ProjectConfig:
    """
    Load project configuration from YAML file(s).

    Args:
        config_path: Path to the main configuration file.
        base_path: Optional path to base configuration for inheritance.
            Defaults to a base.yaml next to config_path, if present.

    Returns:
        Fully validated ProjectConfig instance.
    """
    if not config_path.exists():
        msg = f"Config file not found: {config_path}"
        raise FileNotFoundError(msg)

    if base_path is not None:
        base_data = load_yaml(base_path)
    else:
        potential_base = config_path.parent / "base.yaml"
        is_self = potential_base.resolve() == config_path.resolve()
        base_data = (
            load_yaml(potential_base)
            if potential_base.exists() and not is_self
            else {}
        )

    merged = _deep_merge(base_data, load_yaml(config_path))
    return config_from_dict(merged)
