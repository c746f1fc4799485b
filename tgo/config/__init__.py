"""
Configuration for tgo

This package provides the ReportConfig consumed by the reporting core, and
loading/validation of the optional YAML config file.

Usage:
    from tgo.config import resolve_config

    config = resolve_config("tgo.yaml", overrides={"verbosity": 2})
    config = config.with_runner_args(["-cover", "./..."])

Config file:
    verbosity: 1
    results: fail,none
    summary: [fail, none, skip]
    bin: go1.22
    all: false
"""

from .loader import build_config, load_config_data, resolve_config
from .models import (
    VERBOSE_RESULTS,
    VERBOSE_SUMMARY,
    ReportConfig,
    format_statuses,
    parse_statuses,
)
from .validation import ConfigError, ConfigValidator, ValidationError, ValidationResult

__all__ = [
    # Loader
    "build_config",
    "load_config_data",
    "resolve_config",
    # Models
    "VERBOSE_RESULTS",
    "VERBOSE_SUMMARY",
    "ReportConfig",
    "format_statuses",
    "parse_statuses",
    # Validation
    "ConfigError",
    "ConfigValidator",
    "ValidationError",
    "ValidationResult",
]
