"""
Operations over an event history.

An event history is the ordered sequence of Events that share a Key, in
arrival order. Every function here is pure: histories are never modified,
reduced histories are returned as new tuples.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import (
    COMPACT_THRESHOLD,
    STRUCTURAL_ACTIONS,
    TERMINAL_ACTIONS,
    Action,
    Event,
    Status,
    Verbosity,
)

EventHistory = Sequence[Event]

COVERAGE_PREFIX = "coverage: "
COVERAGE_SUFFIX = " of statements"
NO_TEST_FILES = "[no test files]"


# ─────────────────────────────────────────────────────────────────────────────
# Lookup
# ─────────────────────────────────────────────────────────────────────────────

def first_by_action(history: EventHistory, *actions: Action) -> Event | None:
    """Return the first event whose action is one of `actions`."""
    for event in history:
        if event.action in actions:
            return event
    return None


def has_action(history: EventHistory, *actions: Action) -> bool:
    return first_by_action(history, *actions) is not None


def resolve_status(history: EventHistory) -> Status:
    """
    Derive the terminal status of a history.

    The first terminal action in recorded order decides, whatever comes
    after it. Histories without any terminal action are NONE.
    """
    event = first_by_action(history, *TERMINAL_ACTIONS)
    if event is None:
        return Status.NONE
    return event.action.status


def has_multiple_results(history: EventHistory) -> bool:
    """More than one terminal event was reported for the same identity."""
    return sum(1 for event in history if event.action.is_terminal) > 1


def representative_event(history: EventHistory) -> Event | None:
    """The event that decided the status, or the first event when there is none."""
    event = first_by_action(history, *TERMINAL_ACTIONS)
    if event is None and history:
        return history[0]
    return event


def sort_by_time(history: EventHistory) -> tuple[Event, ...]:
    """Stable sort by timestamp; equal timestamps keep their arrival order."""
    return tuple(sorted(history, key=lambda e: e.time))


# ─────────────────────────────────────────────────────────────────────────────
# Noise predicates
# ─────────────────────────────────────────────────────────────────────────────

def is_structural(event: Event) -> bool:
    """run/cont/pause/start never carry anything to display."""
    return event.action in STRUCTURAL_ACTIONS


def runner_boilerplate_lines(
    test: str,
    passed_at: float | None = None,
    failed_at: float | None = None,
    skipped_at: float | None = None,
) -> frozenset[str]:
    """
    The runner's own framing lines for a test.

    Result lines are only included when the matching terminal event is
    known, and only with its elapsed value; a result line that disagrees
    with the terminal event is kept in the output.
    """
    lines = {
        f"=== RUN   {test}\n",
        f"=== CONT  {test}\n",
        f"=== PAUSE {test}\n",
        f"=== NAME  {test}\n",
    }
    if failed_at is not None:
        lines.add(f"--- FAIL: {test} ({failed_at:.2f}s)\n")
    if skipped_at is not None:
        lines.add(f"--- SKIP: {test} ({skipped_at:.2f}s)\n")
    if passed_at is not None:
        lines.add(f"--- PASS: {test} ({passed_at:.2f}s)\n")
    return frozenset(lines)


def is_test_boilerplate(event: Event, boilerplate: frozenset[str]) -> bool:
    if event.action != Action.OUTPUT or event.test == "":
        return False
    return event.output.lstrip(" ") in boilerplate


def is_package_boilerplate(event: Event) -> bool:
    """Result, no-test-files and coverage lines the runner prints for a package."""
    if event.action != Action.OUTPUT or event.package == "" or event.test != "":
        return False
    output = event.output.lstrip(" ")
    line = output.rstrip("\n")
    stripped = event.output.strip()
    pkg = event.package
    return (
        line in ("PASS", "FAIL")
        or output.startswith(f"ok  \t{pkg}")
        or output.startswith(f"ok   {pkg}")
        or stripped.startswith(f"FAIL\t{pkg}\t")
        or line.endswith(NO_TEST_FILES)
        or (stripped.startswith("coverage:") and stripped.endswith("of statements"))
    )


def is_blank_output(event: Event) -> bool:
    return event.output.strip() == ""


# ─────────────────────────────────────────────────────────────────────────────
# Compaction
# ─────────────────────────────────────────────────────────────────────────────

def _elapsed_of(history: EventHistory, action: Action) -> float | None:
    event = first_by_action(history, action)
    return event.elapsed if event is not None else None


def compact(history: EventHistory, verbosity: int = Verbosity.V0) -> tuple[Event, ...]:
    """
    Remove events that are uninteresting for printing.

    Above the compact verbosity threshold the history is returned as is.
    Terminal events are never removed, so compacting twice gives the
    same result as compacting once.
    """
    if verbosity > COMPACT_THRESHOLD:
        return tuple(history)

    passed_at = _elapsed_of(history, Action.PASS)
    failed_at = _elapsed_of(history, Action.FAIL)
    skipped_at = _elapsed_of(history, Action.SKIP)
    boilerplate = {
        test: runner_boilerplate_lines(test, passed_at, failed_at, skipped_at)
        for test in {e.test for e in history if e.test}
    }

    kept = []
    for event in history:
        if is_structural(event):
            continue
        if event.test and is_test_boilerplate(event, boilerplate[event.test]):
            continue
        if is_package_boilerplate(event):
            continue
        kept.append(event)
    return tuple(kept)


# ─────────────────────────────────────────────────────────────────────────────
# Package annotations
# ─────────────────────────────────────────────────────────────────────────────

def find_coverage(history: EventHistory) -> str:
    """
    Extract the coverage percentage from a package's output, e.g. "87.5%".

    Returns an empty string for per-test histories or when no coverage
    line was printed.
    """
    if not history:
        return ""
    first = history[0]
    if first.package == "" or first.test != "":
        return ""
    for event in history:
        if event.action != Action.OUTPUT:
            continue
        output = event.output.strip()
        if output.startswith(COVERAGE_PREFIX) and output.endswith(COVERAGE_SUFFIX):
            return output[len(COVERAGE_PREFIX):-len(COVERAGE_SUFFIX)].strip()
    return ""


def is_package_without_tests(history: EventHistory) -> bool:
    for event in history:
        if (
            event.action == Action.OUTPUT
            and event.package != ""
            and event.test == ""
            and event.output.lstrip(" ").rstrip("\n").endswith(NO_TEST_FILES)
        ):
            return True
    return False
