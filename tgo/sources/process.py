"""
Subprocess source running `go test -json`.

This module spawns the test runner with its JSON output enabled and reads
its stdout line by line. The runner's stderr is inherited, so its own
diagnostics interleave with the report in real time.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence

from .base import BaseSource, SourceError

logger = logging.getLogger(__name__)

# test2json lines can be long (large log output on one line)
LINE_LIMIT = 16 * 1024 * 1024


class SubprocessSource(BaseSource):
    """
    Line source backed by a `go test -json` subprocess.

    Example:
        async with SubprocessSource(["./..."]) as source:
            async for line in source.lines():
                ...
            code = await source.wait()
    """

    def __init__(
        self,
        args: Sequence[str] = (),
        bin: str = "go",
        env: dict[str, str] | None = None,
        terminate_timeout: float = 5.0,
    ):
        """
        Initialize the source.

        Args:
            args: Arguments passed through to `go test`
            bin: The go binary to run
            env: Optional environment for the subprocess
            terminate_timeout: Seconds to wait after terminate before killing
        """
        self.bin = bin
        self.args = list(args)
        self.env = env
        self.terminate_timeout = terminate_timeout
        self._process: asyncio.subprocess.Process | None = None

    @property
    def command(self) -> list[str]:
        return [self.bin, "test", "-json", *self.args]

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    @property
    def returncode(self) -> int | None:
        return self._process.returncode if self._process else None

    async def start(self) -> None:
        """Spawn the test runner."""
        if self._process is not None:
            return

        logger.debug("Starting %s", " ".join(self.command))
        try:
            self._process = await asyncio.create_subprocess_exec(
                *self.command,
                stdout=asyncio.subprocess.PIPE,
                stderr=None,
                env=self.env,
                limit=LINE_LIMIT,
            )
        except FileNotFoundError:
            raise SourceError(f"Command not found: {self.bin}") from None
        except PermissionError:
            raise SourceError(f"Permission denied: {self.bin}") from None
        except OSError as e:
            raise SourceError(f"Failed to start process: {e}") from e

    async def lines(self) -> AsyncIterator[str]:
        if not self._process or not self._process.stdout:
            return

        while True:
            line = await self._process.stdout.readline()
            if not line:
                break  # EOF
            yield line.decode("utf-8", errors="replace")

    async def wait(self) -> int | None:
        if self._process is None:
            return None
        return await self._process.wait()

    async def stop(self) -> None:
        """Terminate the test runner if it is still alive."""
        proc = self._process
        if proc is None or proc.returncode is not None:
            return

        logger.info("Stopping test process (pid %s)", proc.pid)
        try:
            proc.terminate()
            await asyncio.wait_for(proc.wait(), timeout=self.terminate_timeout)
        except asyncio.TimeoutError:
            logger.warning("Test process did not exit, killing it")
            try:
                proc.kill()
                await asyncio.wait_for(proc.wait(), timeout=2.0)
            except (asyncio.TimeoutError, ProcessLookupError) as e:
                logger.warning("Giving up on test process: %s", e)
        except ProcessLookupError:
            pass  # Already dead

    def __repr__(self) -> str:
        status = "running" if self.is_running else "stopped"
        return f"SubprocessSource(command={' '.join(self.command)!r}, status={status})"
