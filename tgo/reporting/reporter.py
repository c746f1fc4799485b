"""
Reporter for rendering test results to the terminal.

This module provides the Reporter class which turns event histories into
detail lines, grouped summaries, a coverage listing and the final tally
line. It writes straight to its console in the order it is called.
"""

from __future__ import annotations

from datetime import datetime

from rich.console import Console
from rich.text import Text

from ..events.history import (
    EventHistory,
    compact,
    find_coverage,
    first_by_action,
    has_multiple_results,
    is_blank_output,
    is_package_without_tests,
    representative_event,
    resolve_status,
    sort_by_time,
)
from ..events.models import COMPACT_THRESHOLD, TERMINAL_ACTIONS, Event, Key, Status, Verbosity
from ..storage import EventStore
from .models import RunTally, format_duration
from .styles import STYLES, StyleCategory, colorize, status_style

# Elapsed times below this are not worth printing
MIN_ELAPSED = 0.01

MULTIPLE_RESULTS = "[multiple results]"

DETAIL_RULE = "═══"
SUMMARY_RULE = "════════════"
FOOTER_RULE = "══════"


class Reporter:
    """
    Renders results for a run.

    Example:
        reporter = Reporter(Console(), verbosity=Verbosity.V0)

        reporter.print_detail(store.get(key))
        reporter.print_summary(store.with_action(Action.FAIL), Status.FAIL, store)
        reporter.print_footer(RunTally.from_store(store, started_at))
    """

    def __init__(self, console: Console | None = None, verbosity: int = Verbosity.V0):
        self.console = console or Console(highlight=False)
        self.verbosity = Verbosity(verbosity)

    # ─────────────────────────────────────────────────────────────────────────
    # Detail
    # ─────────────────────────────────────────────────────────────────────────

    def detail_header(self, history: EventHistory) -> Text | None:
        """
        Build the header line for one identity.

        Args:
            history: The full (uncompacted) event history of the identity

        Returns:
            The header line, or None for an empty history
        """
        event = representative_event(history)
        if event is None:
            return None

        status = resolve_status(history)
        style = status_style(status)
        header = Text.assemble(
            colorize(style, DETAIL_RULE),
            " ",
            colorize(style, status.display_name),
            " ",
            colorize(style, event.package),
        )
        if event.test:
            header.append_text(Text.assemble(".", colorize(StyleCategory.TEST, event.test)))

        for annotation in self._annotations(event, history):
            header.append(" ")
            header.append_text(annotation)
        return header

    def detail_body(self, history: EventHistory) -> list[Text]:
        """Output lines shown below the header, compacted at low verbosity."""
        events = sort_by_time(compact(history, self.verbosity))
        if self.verbosity <= COMPACT_THRESHOLD:
            events = tuple(e for e in events if not is_blank_output(e))
        return [self._body_line(e) for e in events]

    def print_detail(self, history: EventHistory) -> None:
        """Print the header for one identity, followed by its output if there is any."""
        header = self.detail_header(history)
        if header is None:
            return

        body = self.detail_body(history)
        self._print(header)
        if body:
            self._print()
            for line in body:
                self._print(line)
            self._print()

    def _annotations(self, event: Event, history: EventHistory) -> list[Text]:
        annotations = []
        if event.elapsed >= MIN_ELAPSED:
            annotations.append(colorize(StyleCategory.TIME, f"({event.elapsed:.2f}s)"))
        coverage = find_coverage(history)
        if coverage:
            annotations.append(colorize(StyleCategory.COVER, f"{{{coverage}}}"))
        if is_package_without_tests(history):
            annotations.append(Text("[no tests]"))
        if has_multiple_results(history):
            annotations.append(colorize(StyleCategory.NONE, MULTIPLE_RESULTS))
        return annotations

    def _body_line(self, event: Event) -> Text:
        parts = []
        if self.verbosity >= Verbosity.V3:
            parts.append(f"{event.action.value:>7}")
        if self.verbosity >= Verbosity.V2:
            parts.append(_format_clock(event.time))
        parts.append(event.output.rstrip("\n"))
        return Text(" ".join(parts))

    # ─────────────────────────────────────────────────────────────────────────
    # Summaries
    # ─────────────────────────────────────────────────────────────────────────

    def print_summary(
        self,
        group: EventStore,
        status: Status,
        store: EventStore | None = None,
    ) -> None:
        """
        Print a grouped summary for identities sharing a status.

        Args:
            group: The identities to list
            status: The status the group is listed under
            store: The whole run, used for per-package test counts
                (defaults to `group`)
        """
        store = store if store is not None else group
        style = status_style(status)
        rule = colorize(style, SUMMARY_RULE)
        prefix = colorize(style, f"{status.display_name:>6} ")

        self._print(Text.assemble(
            rule, " ", colorize(style, status.display_name), " ", f"[{len(group)}]", " ", rule,
        ))
        for key in group.ordered_keys():
            self._print(Text.assemble(prefix, self._summary_entry(key, group.get(key), style, store)))

    def _summary_entry(
        self,
        key: Key,
        history: EventHistory,
        style: StyleCategory,
        store: EventStore,
    ) -> Text:
        line = colorize(StyleCategory.PACKAGE, key.package)
        if not key.is_package:
            line.append_text(Text.assemble(".", colorize(StyleCategory.TEST, key.test)))

        ending = first_by_action(history, *TERMINAL_ACTIONS)
        if ending is not None and ending.elapsed >= MIN_ELAPSED:
            line.append("  ")
            line.append_text(colorize(StyleCategory.TIME, f"({ending.elapsed:.2f}s)"))

        if key.is_package:
            if is_package_without_tests(history):
                line.append("  [no tests]")
            else:
                count = store.package_tests(key.package).count_tests()
                line.append("  ")
                line.append_text(colorize(style, f"<{count} tests>"))
            coverage = find_coverage(history)
            if coverage:
                line.append("  ")
                line.append_text(colorize(StyleCategory.COVER, f"{{{coverage}}}"))

        if has_multiple_results(history):
            line.append("  ")
            line.append_text(colorize(StyleCategory.NONE, MULTIPLE_RESULTS))
        return line

    def print_coverage(self, store: EventStore) -> None:
        """Print one line per package that reported a coverage value."""
        rule = colorize(StyleCategory.COVER, SUMMARY_RULE)
        self._print(Text.assemble(rule, " ", colorize(StyleCategory.COVER, "COVR"), " ", rule))
        for key in store.ordered_keys():
            if not key.is_package:
                continue
            coverage = find_coverage(store.get(key))
            if not coverage:
                continue
            self._print(Text.assemble(
                colorize(StyleCategory.COVER, f"{coverage:>6} "),
                colorize(StyleCategory.PACKAGE, key.package),
            ))

    # ─────────────────────────────────────────────────────────────────────────
    # Footer
    # ─────────────────────────────────────────────────────────────────────────

    def footer_line(self, tally: RunTally) -> Text:
        """The final counts line, colored by the most severe non-empty category."""
        style = StyleCategory.LINE
        counts = {}
        for status in (Status.PASS, Status.FAIL, Status.NONE, Status.SKIP):
            counts[status] = Text(f"{status.display_name}:{tally.count(status)}")
        if tally.benched:
            counts[Status.BENCH] = Text(f"{Status.BENCH.display_name}:{tally.benched}")

        if tally.passed > 0:
            style = StyleCategory.PASS_BOLD
            counts[Status.PASS].stylize(STYLES[style])
        if tally.unfinished > 0:
            style = StyleCategory.NONE_BOLD
            counts[Status.NONE].stylize(STYLES[style])
        if tally.failed > 0:
            style = StyleCategory.FAIL_BOLD
            counts[Status.FAIL].stylize(STYLES[style])

        ended = tally.ended_at or datetime.now().astimezone()
        sep = Text.assemble(" ", colorize(style, "|"), " ")

        line = Text.assemble(
            colorize(style, FOOTER_RULE), " ",
            colorize(style, ended.astimezone().strftime("%H:%M:%S")),
        )
        for text in counts.values():
            line.append_text(sep)
            line.append_text(text)
        line.append_text(sep)
        line.append_text(colorize(style, format_duration(tally.duration_s)))
        line.append("  ")
        line.append_text(colorize(style, FOOTER_RULE))
        return line

    def print_footer(self, tally: RunTally) -> None:
        self._print()
        self._print(self.footer_line(tally))

    def _print(self, text: Text | None = None) -> None:
        if text is None:
            self.console.print()
        else:
            self.console.print(text, soft_wrap=True)


def _format_clock(time: datetime) -> str:
    """Wall clock with milliseconds, trailing zeros trimmed: 15:04:05.12"""
    if time.year > 1:
        time = time.astimezone()
    clock = time.strftime("%H:%M:%S")
    millis = f"{time.microsecond // 1000:03d}".rstrip("0")
    return f"{clock}.{millis}" if millis else clock
