"""
Line sources for go test output

This package provides the sources the report is built from: a
`go test -json` subprocess, or a replay of captured output.

Usage:
    from tgo.sources import create_source

    source = create_source(config, ["./..."])
    async with source:
        async for line in source.lines():
            ...
        code = await source.wait()
"""

# Factory
from .factory import create_source

# Base
from .base import BaseSource, ProducerExit, SourceError

# Implementations
from .process import SubprocessSource
from .stream import StreamSource

__all__ = [
    # Factory
    "create_source",
    # Base
    "BaseSource",
    "ProducerExit",
    "SourceError",
    # Implementations
    "SubprocessSource",
    "StreamSource",
]
