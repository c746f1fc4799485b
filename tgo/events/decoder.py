"""
Decoder for `go test -json` lines.

Each line of the runner's output is one JSON object (test2json format).
Lines that cannot be turned into an Event raise EventDecodeError so the
caller can log and skip them.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from typing import Any

from .models import ZERO_TIME, Action, Event

# Go trims trailing zeros and goes down to nanoseconds; datetime wants exactly microseconds
_FRACTION_PATTERN = re.compile(r"\.(\d+)")


class EventDecodeError(ValueError):
    """Raised when a single input line is not a well-formed event."""

    def __init__(self, message: str, line: str = ""):
        super().__init__(message)
        self.line = line

    def __str__(self) -> str:
        base = super().__str__()
        if self.line:
            return f"{base}: {self.line!r}"
        return base


def _microseconds(match: re.Match[str]) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def parse_time(value: str) -> datetime:
    """Parse an RFC3339 timestamp as emitted by Go into an aware datetime."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION_PATTERN.sub(_microseconds, text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def decode_event(line: str | bytes) -> Event:
    """
    Decode one line of `go test -json` output.

    Args:
        line: Raw line, with or without the trailing newline

    Returns:
        The decoded Event

    Raises:
        EventDecodeError: If the line is not a valid event object
    """
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    text = line.rstrip("\r\n")

    if not text.strip():
        raise EventDecodeError("Empty line", text)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise EventDecodeError(f"Invalid JSON ({e.msg})", text) from e

    if not isinstance(data, dict):
        raise EventDecodeError(
            f"Expected a JSON object, got {type(data).__name__}", text
        )

    return _event_from_dict(data, text)


def _event_from_dict(data: dict[str, Any], line: str) -> Event:
    raw_action = data.get("Action")
    try:
        action = Action(raw_action)
    except ValueError:
        raise EventDecodeError(f"Unknown action {raw_action!r}", line) from None

    package = _string_field(data, "Package", line)
    test = _string_field(data, "Test", line)
    output = _string_field(data, "Output", line)

    elapsed = data.get("Elapsed", 0.0)
    if elapsed is None:
        elapsed = 0.0
    if isinstance(elapsed, bool) or not isinstance(elapsed, (int, float)):
        raise EventDecodeError(f"Elapsed must be a number, got {elapsed!r}", line)

    raw_time = data.get("Time")
    if raw_time in (None, ""):
        time = ZERO_TIME
    elif isinstance(raw_time, str):
        try:
            time = parse_time(raw_time)
        except ValueError:
            raise EventDecodeError(f"Invalid time {raw_time!r}", line) from None
    else:
        raise EventDecodeError(f"Time must be a string, got {raw_time!r}", line)

    return Event(
        action=action,
        package=package,
        test=test,
        time=time,
        elapsed=float(elapsed),
        output=output,
    )


def _string_field(data: dict[str, Any], name: str, line: str) -> str:
    value = data.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise EventDecodeError(f"{name} must be a string, got {value!r}", line)
    return value
