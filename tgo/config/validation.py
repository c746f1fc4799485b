"""
Validation for tgo configuration files.

This module checks raw parsed YAML against the config schema and reports
every problem with a helpful message.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..events.models import Status, Verbosity
from .models import parse_statuses


# ─────────────────────────────────────────────────────────────────────────────
# Validation Result Types
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class ValidationError:
    """Represents a single validation error with context."""
    path: str  # e.g., "results" or "config.yaml"
    message: str
    value: Any = None
    suggestion: str | None = None

    def __str__(self) -> str:
        parts = [f"✗ {self.path}: {self.message}"]
        if self.value is not None:
            parts.append(f"   Got: {repr(self.value)}")
        if self.suggestion:
            parts.append(f"   Hint: {self.suggestion}")
        return "\n".join(parts)


@dataclass
class ValidationResult:
    """Result of config validation."""
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(
        self,
        path: str,
        message: str,
        value: Any = None,
        suggestion: str | None = None
    ) -> None:
        self.errors.append(ValidationError(path, message, value, suggestion))

    def __str__(self) -> str:
        if self.is_valid:
            return "✓ Config validation passed"
        lines = [f"Config validation failed with {len(self.errors)} error(s):\n"]
        lines.extend(str(e) for e in self.errors)
        return "\n".join(lines)


class ConfigError(ValueError):
    """Raised when a configuration file cannot be used."""

    def __init__(self, result: ValidationResult):
        super().__init__(str(result))
        self.result = result


# ─────────────────────────────────────────────────────────────────────────────
# Config Validator
# ─────────────────────────────────────────────────────────────────────────────

class ConfigValidator:
    """Validates raw parsed YAML against the config schema."""

    KNOWN_FIELDS = {"verbosity", "results", "summary", "bin", "all"}
    VALID_STATUSES = {s.value for s in Status}

    def __init__(self, data: dict[str, Any]):
        self.data = data
        self.result = ValidationResult()

    def validate(self) -> ValidationResult:
        """Run all validation checks and return result."""
        self._validate_fields()
        self._validate_verbosity()
        self._validate_statuses("results")
        self._validate_statuses("summary")
        self._validate_bin()
        self._validate_all()
        return self.result

    def _validate_fields(self) -> None:
        for key in self.data:
            if key not in self.KNOWN_FIELDS:
                self.result.add_error(
                    str(key),
                    f"Unknown field '{key}'",
                    suggestion=f"Valid fields are: {', '.join(sorted(self.KNOWN_FIELDS))}"
                )

    def _validate_verbosity(self) -> None:
        if "verbosity" not in self.data:
            return
        value = self.data["verbosity"]
        if isinstance(value, bool) or not isinstance(value, int):
            self.result.add_error(
                "verbosity",
                "Must be an integer",
                value=value,
                suggestion="Use a number from 0 (lowest) to 5 (highest)"
            )
            return
        if not Verbosity.V0 <= value <= Verbosity.V5:
            self.result.add_error(
                "verbosity",
                f"Must be between {int(Verbosity.V0)} and {int(Verbosity.V5)}",
                value=value,
            )

    def _validate_statuses(self, name: str) -> None:
        if name not in self.data:
            return
        value = self.data[name]
        if not isinstance(value, (str, list)):
            self.result.add_error(
                name,
                "Must be a comma separated string or a list of statuses",
                value=value,
            )
            return
        if isinstance(value, list) and not all(isinstance(v, str) for v in value):
            self.result.add_error(name, "List entries must be strings", value=value)
            return
        try:
            parse_statuses(value)
        except ValueError as e:
            self.result.add_error(
                name,
                str(e),
                value=value,
                suggestion=f"Valid statuses are: {', '.join(sorted(self.VALID_STATUSES))}, all, -"
            )

    def _validate_bin(self) -> None:
        if "bin" not in self.data:
            return
        value = self.data["bin"]
        if not isinstance(value, str) or not value.strip():
            self.result.add_error("bin", "Must be a non-empty string", value=value)

    def _validate_all(self) -> None:
        if "all" in self.data and not isinstance(self.data["all"], bool):
            self.result.add_error(
                "all",
                "Must be true or false",
                value=self.data["all"],
            )
