"""
tgo - Colorized, incremental reports for go test

This package wraps `go test -json` and renders its event stream as a
human-oriented report: one line per test or package as soon as its
outcome is known, followed by grouped summaries and a final tally.

Subpackages:
    - events: Event model, line decoder and event history operations
    - storage: Event store and deterministic ordering
    - reporting: Terminal rendering of details, summaries and tally
    - sources: go test subprocess and replay sources
    - config: Report configuration, config file loading and validation

Usage:
    from tgo import ReportConfig, Reporter, StreamController

    controller = StreamController(ReportConfig(), Reporter())
    for line in open("go-test.json"):
        controller.feed_line(line)
    tally = controller.drain()
"""

__version__ = "0.1.0"

# Re-export events for convenience
from .events import (
    ALL_STATUSES,
    DEFAULT_STATUSES,
    Action,
    Event,
    EventDecodeError,
    Key,
    Status,
    Verbosity,
    compact,
    decode_event,
    find_coverage,
    resolve_status,
    sort_by_time,
)

# Re-export storage for convenience
from .storage import EventStore, ordered_keys

# Re-export reporting for convenience
from .reporting import Reporter, RunTally, colorize

# Re-export config for convenience
from .config import ConfigError, ReportConfig, parse_statuses, resolve_config

# Re-export sources for convenience
from .sources import (
    BaseSource,
    ProducerExit,
    SourceError,
    StreamSource,
    SubprocessSource,
    create_source,
)

# Run control
from .controller import RunState, StreamController
from .supervisor import supervise

__all__ = [
    # Package info
    "__version__",
    # Events
    "ALL_STATUSES",
    "DEFAULT_STATUSES",
    "Action",
    "Event",
    "EventDecodeError",
    "Key",
    "Status",
    "Verbosity",
    "compact",
    "decode_event",
    "find_coverage",
    "resolve_status",
    "sort_by_time",
    # Storage
    "EventStore",
    "ordered_keys",
    # Reporting
    "Reporter",
    "RunTally",
    "colorize",
    # Config
    "ConfigError",
    "ReportConfig",
    "parse_statuses",
    "resolve_config",
    # Sources
    "BaseSource",
    "ProducerExit",
    "SourceError",
    "StreamSource",
    "SubprocessSource",
    "create_source",
    # Run control
    "RunState",
    "StreamController",
    "supervise",
]
