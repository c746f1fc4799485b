"""
Test events from `go test -json`

This package provides the typed event model, the line decoder and the pure
operations over an event history (status resolution, compaction, coverage
extraction).

Usage:
    from tgo.events import decode_event, resolve_status, compact

    event = decode_event('{"Action":"pass","Package":"demo","Test":"TestX","Elapsed":0.01}')
    status = resolve_status([event])
"""

# Decoder
from .decoder import EventDecodeError, decode_event, parse_time

# History operations
from .history import (
    EventHistory,
    compact,
    find_coverage,
    first_by_action,
    has_action,
    has_multiple_results,
    is_blank_output,
    is_package_boilerplate,
    is_package_without_tests,
    is_structural,
    is_test_boilerplate,
    representative_event,
    resolve_status,
    runner_boilerplate_lines,
    sort_by_time,
)

# Models
from .models import (
    ALL_STATUSES,
    COMPACT_THRESHOLD,
    DEFAULT_STATUSES,
    STATUS_NAMES,
    TERMINAL_ACTIONS,
    Action,
    Event,
    Key,
    Status,
    Verbosity,
)

__all__ = [
    # Decoder
    "EventDecodeError",
    "decode_event",
    "parse_time",
    # History operations
    "EventHistory",
    "compact",
    "find_coverage",
    "first_by_action",
    "has_action",
    "has_multiple_results",
    "is_blank_output",
    "is_package_boilerplate",
    "is_package_without_tests",
    "is_structural",
    "is_test_boilerplate",
    "representative_event",
    "resolve_status",
    "runner_boilerplate_lines",
    "sort_by_time",
    # Models
    "ALL_STATUSES",
    "COMPACT_THRESHOLD",
    "DEFAULT_STATUSES",
    "STATUS_NAMES",
    "TERMINAL_ACTIONS",
    "Action",
    "Event",
    "Key",
    "Status",
    "Verbosity",
]
