"""
Run tally for the final report line.

This module defines the aggregate counts printed once the event stream
has ended, together with the run's wall-clock duration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from ..events.models import TERMINAL_ACTIONS, Action, Status

if TYPE_CHECKING:
    from ..storage import EventStore


@dataclass
class RunTally:
    """
    Aggregate counts for a finished run.

    Pass, fail, skip and bench count individual tests only; none counts
    every key (tests and packages) that never reported a terminal action.
    """
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    benched: int = 0
    unfinished: int = 0

    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    ended_at: datetime | None = None

    @classmethod
    def from_store(
        cls,
        store: EventStore,
        started_at: datetime,
        ended_at: datetime | None = None,
    ) -> RunTally:
        return cls(
            passed=store.with_action(Action.PASS).count_tests(),
            failed=store.with_action(Action.FAIL).count_tests(),
            skipped=store.with_action(Action.SKIP).count_tests(),
            benched=store.with_action(Action.BENCH).count_tests(),
            unfinished=len(store.without_actions(*TERMINAL_ACTIONS)),
            started_at=started_at,
            ended_at=ended_at or datetime.now(timezone.utc),
        )

    @property
    def duration_s(self) -> float:
        end = self.ended_at or datetime.now(timezone.utc)
        return (end - self.started_at).total_seconds()

    def count(self, status: Status) -> int:
        return {
            Status.PASS: self.passed,
            Status.FAIL: self.failed,
            Status.SKIP: self.skipped,
            Status.BENCH: self.benched,
            Status.NONE: self.unfinished,
        }[status]


def format_duration(seconds: float) -> str:
    """
    Format a duration rounded to the millisecond, e.g. "850ms", "1.5s", "2m3.25s".
    """
    ms = round(seconds * 1000)
    if ms <= 0:
        return "0s"
    if ms < 1000:
        return f"{ms}ms"

    minutes, ms = divmod(ms, 60_000)
    hours, minutes = divmod(minutes, 60)
    secs = f"{ms / 1000:.3f}".rstrip("0").rstrip(".")

    result = ""
    if hours:
        result += f"{hours}h"
    if hours or minutes:
        result += f"{minutes}m"
    return result + f"{secs}s"
