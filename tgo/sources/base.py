"""
Base interface for event line sources.

This module defines the abstract base class that every source of
`go test -json` lines follows, and the errors sources raise.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator


class SourceError(RuntimeError):
    """Raised when a source cannot be started."""


class ProducerExit(Exception):
    """The wrapped test process exited normally with a non-zero code."""

    def __init__(self, code: int):
        super().__init__(f"test process exited with code {code}")
        self.code = code


class BaseSource(ABC):
    """
    Abstract base class for line sources.

    A source produces the raw output lines of the test runner, in the
    order they arrive, and reports how the producer ended.
    """

    @abstractmethod
    async def start(self) -> None:
        """
        Start producing lines.

        For a subprocess this spawns the test runner.
        """
        pass

    @abstractmethod
    async def stop(self) -> None:
        """
        Stop producing lines and release resources.

        For a subprocess this terminates the test runner if still alive.
        """
        pass

    @abstractmethod
    def lines(self) -> AsyncIterator[str]:
        """Yield raw lines until the producer's output ends."""
        pass

    @abstractmethod
    async def wait(self) -> int | None:
        """
        Wait for the producer to finish.

        Returns:
            The producer's exit code, or None when there is no process
        """
        pass

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """Return True while the producer may still emit lines."""
        pass

    async def __aenter__(self) -> BaseSource:
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.stop()
