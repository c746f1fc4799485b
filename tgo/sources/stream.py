"""
Stream source replaying captured `go test -json` output.

Reads lines from a file, from stdin ("-") or from any text stream, so a
report can be produced for output captured earlier.

Pipes and terminals are read through the event loop, so a run waiting on
them can be interrupted at any time. Regular files and in-memory streams
are read in a worker thread; those reads always return.
"""

from __future__ import annotations

import asyncio
import logging
import os
import stat
import sys
from collections.abc import AsyncIterator
from pathlib import Path
from typing import TextIO

from .base import BaseSource, SourceError
from .process import LINE_LIMIT

logger = logging.getLogger(__name__)


class StreamSource(BaseSource):
    """Line source backed by a text stream. There is no process, so no exit code."""

    def __init__(self, source: str | Path | TextIO):
        """
        Initialize the source.

        Args:
            source: A path, "-" for stdin, or an open text stream
        """
        self.source = source
        self._stream: TextIO | None = None
        self._owned = False
        self._reader: asyncio.StreamReader | None = None
        self._transport: asyncio.ReadTransport | None = None
        self._finished = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._stream is not None and not self._finished.is_set()

    async def start(self) -> None:
        if self._stream is not None:
            return
        if isinstance(self.source, (str, Path)):
            if str(self.source) == "-":
                self._stream = sys.stdin
            else:
                try:
                    self._stream = open(self.source, encoding="utf-8", errors="replace")
                except OSError as e:
                    raise SourceError(f"Cannot open {self.source}: {e}") from e
                self._owned = True
        else:
            self._stream = self.source

        if _is_pollable(self._stream):
            await self._connect_pipe()

    async def _connect_pipe(self) -> None:
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader(limit=LINE_LIMIT)
        try:
            transport, _ = await loop.connect_read_pipe(
                lambda: asyncio.StreamReaderProtocol(reader), self._stream
            )
        except (NotImplementedError, ValueError, OSError) as e:
            logger.debug("Reading %r in a worker thread: %s", self.source, e)
            return
        self._reader = reader
        self._transport = transport

    async def lines(self) -> AsyncIterator[str]:
        if self._stream is None:
            return
        try:
            while True:
                line = await self._readline()
                if not line:
                    break  # EOF
                yield line
        finally:
            self._finished.set()

    async def _readline(self) -> str:
        if self._reader is not None:
            data = await self._reader.readline()
            return data.decode("utf-8", errors="replace")
        return await asyncio.to_thread(self._stream.readline)

    async def wait(self) -> int | None:
        """Wait until the stream has been read to the end."""
        await self._finished.wait()
        return None

    async def stop(self) -> None:
        self._finished.set()
        if self._transport is not None:
            # Closing the transport also closes the underlying stream
            self._transport.close()
            self._transport = None
            self._reader = None
        elif self._owned and self._stream is not None:
            self._stream.close()
        self._stream = None

    def __repr__(self) -> str:
        return f"StreamSource(source={self.source!r})"


def _is_pollable(stream: TextIO) -> bool:
    """Pipes, sockets and terminals can block forever and are read through the loop."""
    try:
        fd = stream.fileno()
        mode = os.fstat(fd).st_mode
    except (AttributeError, OSError, ValueError):
        return False
    return stat.S_ISFIFO(mode) or stat.S_ISSOCK(mode) or os.isatty(fd)
