"""
Source factory for creating line sources from configuration.

This module provides a factory function that picks the right source for a
run: the test runner itself, or a replay of captured output.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from .base import BaseSource
from .process import SubprocessSource
from .stream import StreamSource

if TYPE_CHECKING:
    from ..config import ReportConfig


def create_source(
    config: ReportConfig,
    args: Sequence[str] = (),
    replay: str | Path | TextIO | None = None,
) -> BaseSource:
    """
    Create a line source for a run.

    Args:
        config: The effective report config (provides the go binary)
        args: Arguments passed through to `go test`
        replay: Captured output to replay instead of running tests

    Returns:
        StreamSource when replaying, SubprocessSource otherwise

    Example:
        source = create_source(config, ["-cover", "./..."])
        async with source:
            ...
    """
    if replay is not None:
        if args:
            raise ValueError("Test arguments cannot be combined with a replay")
        return StreamSource(replay)
    return SubprocessSource(args=args, bin=config.bin)
