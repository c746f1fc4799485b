"""
Reporting for go test runs

This package renders the human-oriented report: one detail line per test
or package, grouped summaries, a coverage listing and a final tally line.

Features:
    - Colorized status, package, test and timing annotations
    - Compacted output of failing tests
    - Natural ordering of tests within their package
    - Counts per status and total wall-clock time

Usage:
    from rich.console import Console
    from tgo.reporting import Reporter, RunTally

    reporter = Reporter(Console(), verbosity=0)
    reporter.print_detail(store.get(key))
    reporter.print_footer(RunTally.from_store(store, started_at))
"""

# Models
from .models import RunTally, format_duration

# Reporter
from .reporter import Reporter

# Styles
from .styles import STATUS_STYLES, STYLES, StyleCategory, colorize, status_style

__all__ = [
    # Models
    "RunTally",
    "format_duration",
    # Reporter
    "Reporter",
    # Styles
    "STATUS_STYLES",
    "STYLES",
    "StyleCategory",
    "colorize",
    "status_style",
]
