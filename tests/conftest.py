"""Shared fixtures for tgo tests."""

from __future__ import annotations

import asyncio
import io
import json
from collections.abc import AsyncIterator, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from rich.console import Console

from tgo.events import Action, Event
from tgo.reporting import Reporter
from tgo.sources import BaseSource

T0 = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------
def make_event(
    action: Action | str,
    package: str = "demo",
    test: str = "",
    output: str = "",
    elapsed: float = 0.0,
    at: float = 0.0,
) -> Event:
    """Event `at` seconds after T0."""
    return Event(
        action=Action(action),
        package=package,
        test=test,
        time=T0 + timedelta(seconds=at),
        elapsed=elapsed,
        output=output,
    )


def json_line(
    action: str,
    package: str = "demo",
    test: str = "",
    output: str | None = None,
    elapsed: float | None = None,
    time: str = "2024-01-02T03:04:05.123456789Z",
) -> str:
    """One line of `go test -json` output."""
    data: dict[str, Any] = {"Time": time, "Action": action, "Package": package}
    if test:
        data["Test"] = test
    if output is not None:
        data["Output"] = output
    if elapsed is not None:
        data["Elapsed"] = elapsed
    return json.dumps(data) + "\n"


def passing_test(test: str, package: str = "demo", elapsed: float = 0.0) -> list[Event]:
    return [
        make_event("run", package, test),
        make_event("output", package, test, output=f"=== RUN   {test}\n"),
        make_event("output", package, test, output=f"--- PASS: {test} ({elapsed:.2f}s)\n", at=0.5),
        make_event("pass", package, test, elapsed=elapsed, at=0.5),
    ]


def failing_test(test: str, package: str = "demo", message: str = "boom", elapsed: float = 0.0) -> list[Event]:
    return [
        make_event("run", package, test),
        make_event("output", package, test, output=f"=== RUN   {test}\n"),
        make_event("output", package, test, output=f"    {test.lower()}_test.go:12: {message}\n", at=0.1),
        make_event("output", package, test, output=f"--- FAIL: {test} ({elapsed:.2f}s)\n", at=0.5),
        make_event("fail", package, test, elapsed=elapsed, at=0.5),
    ]


# ---------------------------------------------------------------------------
# Console capture
# ---------------------------------------------------------------------------
class CapturedConsole:
    """Plain-text console whose output can be read back."""

    def __init__(self, width: int = 200) -> None:
        self.buffer = io.StringIO()
        self.console = Console(
            file=self.buffer,
            width=width,
            color_system=None,
            force_terminal=False,
            highlight=False,
        )

    @property
    def text(self) -> str:
        return self.buffer.getvalue()

    @property
    def lines(self) -> list[str]:
        return self.text.splitlines()


@pytest.fixture
def captured() -> CapturedConsole:
    return CapturedConsole()


@pytest.fixture
def reporter(captured: CapturedConsole) -> Reporter:
    return Reporter(captured.console)


# ---------------------------------------------------------------------------
# Fake source
# ---------------------------------------------------------------------------
class FakeSource(BaseSource):
    """In-memory source; optionally keeps its output open after the producer exited."""

    def __init__(
        self,
        lines: Sequence[str],
        exit_code: int | None = 0,
        hang: bool = False,
    ) -> None:
        self._lines = list(lines)
        self.exit_code = exit_code
        self.hang = hang
        self.started = False
        self.stopped = False
        self._eof = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self.started and not self.stopped

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True

    async def lines(self) -> AsyncIterator[str]:
        try:
            for line in self._lines:
                await asyncio.sleep(0)
                yield line
            if self.hang:
                await asyncio.Event().wait()
        finally:
            self._eof.set()

    async def wait(self) -> int | None:
        if not self.hang:
            await self._eof.wait()
        return self.exit_code
