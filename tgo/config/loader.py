"""
Config loader for tgo.

This module loads the optional YAML config file and merges it with values
given on the command line or through TGO_* environment variables.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any

import yaml

from ..events.models import Verbosity
from .models import ReportConfig, parse_statuses
from .validation import ConfigError, ConfigValidator, ValidationResult


def load_config_data(path: str | Path) -> tuple[dict[str, Any] | None, ValidationResult]:
    """
    Load and validate the raw contents of a config file.

    Args:
        path: Path to the YAML config file

    Returns:
        Tuple of (data or None, ValidationResult)
        If validation fails, data will be None.
    """
    path = Path(path)

    if not path.exists():
        result = ValidationResult()
        result.add_error(
            str(path),
            "File not found",
            suggestion="Check the file path is correct"
        )
        return None, result

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        result = ValidationResult()
        result.add_error(
            str(path),
            f"Invalid YAML syntax: {e}",
            suggestion="Check YAML formatting (indentation, colons, etc.)"
        )
        return None, result

    # An empty file is an empty config
    if data is None:
        data = {}

    if not isinstance(data, dict):
        result = ValidationResult()
        result.add_error(
            str(path),
            "File must contain a YAML mapping (not a list or scalar)",
            value=type(data).__name__
        )
        return None, result

    result = ConfigValidator(data).validate()
    if not result.is_valid:
        return None, result
    return data, result


def build_config(data: dict[str, Any]) -> ReportConfig:
    """Turn validated config values into a ReportConfig."""
    values: dict[str, Any] = {}
    if data.get("verbosity") is not None:
        values["verbosity"] = Verbosity(data["verbosity"])
    if data.get("results") is not None:
        values["results"] = parse_statuses(data["results"])
    if data.get("summary") is not None:
        values["summary"] = parse_statuses(data["summary"])
    if data.get("bin"):
        values["bin"] = data["bin"]

    config = replace(ReportConfig(), **values)
    if data.get("all"):
        config = config.show_all()
    return config


def resolve_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ReportConfig:
    """
    Build the effective config: overrides win over the config file,
    the config file wins over defaults.

    Args:
        path: Optional config file
        overrides: Values from the command line or environment; None
            values are ignored

    Raises:
        ConfigError: If the config file or an override is invalid
    """
    data: dict[str, Any] = {}
    if path is not None:
        loaded, result = load_config_data(path)
        if loaded is None:
            raise ConfigError(result)
        data.update(loaded)

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    result = ConfigValidator(data).validate()
    if not result.is_valid:
        raise ConfigError(result)
    return build_config(data)

