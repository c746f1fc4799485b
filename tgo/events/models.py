"""
Typed data structures for go test events.

This module contains the enums and frozen dataclasses that describe one
reported occurrence from `go test -json` and the identity it belongs to.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, IntEnum
from types import MappingProxyType


# ─────────────────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────────────────

class Action(str, Enum):
    """
    Action reported by the test runner.

    run    - the test has started running
    pause  - the test has been paused
    cont   - the test has continued running
    pass   - the test passed
    bench  - the benchmark printed log output but did not fail
    fail   - the test or benchmark failed
    output - the test printed output
    skip   - the test was skipped or the package contained no tests
    start  - the package started (newer toolchains only)
    """
    RUN = "run"
    PAUSE = "pause"
    CONT = "cont"
    PASS = "pass"
    BENCH = "bench"
    FAIL = "fail"
    OUTPUT = "output"
    SKIP = "skip"
    START = "start"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_ACTIONS

    @property
    def status(self) -> Status | None:
        """Status this action ends a test with, None for non-terminal actions."""
        return _ACTION_STATUS.get(self)

    def __str__(self) -> str:
        return self.value


class Status(str, Enum):
    """
    Terminal outcome of a test or package.

    Mostly like the terminal actions, plus NONE which means the test never
    reported as finished.
    """
    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"
    BENCH = "bench"
    NONE = "none"

    @property
    def display_name(self) -> str:
        return STATUS_NAMES[self]

    @property
    def action(self) -> Action | None:
        """Terminal action for this status, None for NONE."""
        return _STATUS_ACTION.get(self)

    def matches_action(self, action: Action) -> bool:
        return _STATUS_ACTION.get(self) == action

    def __str__(self) -> str:
        return self.value


class Verbosity(IntEnum):
    """Report verbosity, 0 (lowest) to 5 (highest)."""
    V0 = 0  # default
    V1 = 1  # minor changes
    V2 = 2  # timestamps in detail output
    V3 = 3  # action names in detail output
    V4 = 4  # debug
    V5 = 5  # reserved


# Last verbosity at which detail output is compacted
COMPACT_THRESHOLD = Verbosity.V3

TERMINAL_ACTIONS: tuple[Action, ...] = (Action.FAIL, Action.SKIP, Action.PASS, Action.BENCH)

# Structural actions that never carry anything worth displaying
STRUCTURAL_ACTIONS: frozenset[Action] = frozenset(
    {Action.RUN, Action.CONT, Action.PAUSE, Action.START}
)

ALL_STATUSES: tuple[Status, ...] = (
    Status.BENCH,
    Status.PASS,
    Status.SKIP,
    Status.NONE,
    Status.FAIL,
)

DEFAULT_STATUSES: tuple[Status, ...] = (Status.FAIL, Status.NONE)

STATUS_NAMES = MappingProxyType({
    Status.FAIL: "FAIL",
    Status.PASS: "PASS",
    Status.NONE: "NONE",
    Status.SKIP: "SKIP",
    Status.BENCH: "BENCH",
})

_STATUS_ACTION = MappingProxyType({
    Status.PASS: Action.PASS,
    Status.FAIL: Action.FAIL,
    Status.SKIP: Action.SKIP,
    Status.BENCH: Action.BENCH,
})

_ACTION_STATUS = MappingProxyType({v: k for k, v in _STATUS_ACTION.items()})

# Go's zero time, used when an event carries no timestamp
ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)


# ─────────────────────────────────────────────────────────────────────────────
# Records
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Key:
    """Identifies a package and test together. An empty test is the package itself."""
    package: str
    test: str = ""

    @property
    def is_package(self) -> bool:
        return self.test == ""

    def __str__(self) -> str:
        if self.test == "":
            return self.package
        return f"{self.package}.{self.test}"


@dataclass(frozen=True)
class Event:
    """
    One observation from the test runner.

    Elapsed is only meaningful on terminal actions, output only on the
    output action (and usually ends with a newline).
    """
    action: Action
    package: str
    test: str = ""
    time: datetime = ZERO_TIME
    elapsed: float = 0.0
    output: str = ""

    @property
    def key(self) -> Key:
        return Key(package=self.package, test=self.test)
