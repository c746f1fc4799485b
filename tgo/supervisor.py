"""
Supervision of a reporting run.

Runs the ingestion loop against a source while watching for operator
interrupts and for the producer's exit, then always drains the report
with whatever was collected.
"""

from __future__ import annotations

import asyncio
import logging
import signal

from .controller import StreamController
from .sources import BaseSource, ProducerExit

logger = logging.getLogger(__name__)

# Time allowed for buffered output to be read after the producer exits
GRACE_PERIOD = 2.0


def install_signal_handlers(cancel: asyncio.Event) -> list[signal.Signals]:
    """
    Set `cancel` on SIGINT/SIGTERM.

    Returns:
        The signals a handler was installed for
    """
    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _on_signal, sig, cancel)
        except (NotImplementedError, RuntimeError):
            logger.debug("Cannot handle %s on this platform", sig.name)
            continue
        installed.append(sig)
    return installed


def remove_signal_handlers(signals: list[signal.Signals]) -> None:
    loop = asyncio.get_running_loop()
    for sig in signals:
        loop.remove_signal_handler(sig)


def _on_signal(sig: signal.Signals, cancel: asyncio.Event) -> None:
    logger.info("Received %s, stopping input", sig.name)
    cancel.set()


async def supervise(
    controller: StreamController,
    source: BaseSource,
    cancel: asyncio.Event | None = None,
    grace_period: float = GRACE_PERIOD,
) -> int | None:
    """
    Run a full report over `source`.

    Ingestion stops at end of input, when `cancel` is set, or
    `grace_period` seconds after the producer exited. The report is
    drained in every case.

    Args:
        controller: The controller collecting and printing results
        source: Where the lines come from
        cancel: Cancellation token, e.g. set by a signal handler
        grace_period: Seconds to keep reading after the producer exits

    Returns:
        The producer's exit code (None when there is no process or it
        was stopped before exiting)

    Raises:
        ProducerExit: If the producer exited normally with a non-zero code
        SourceError: If the source cannot be started
    """
    if cancel is None:
        cancel = asyncio.Event()

    exit_code: int | None = None
    try:
        async with source:
            ingest = asyncio.create_task(controller.consume(source.lines(), cancel))
            exited = asyncio.create_task(source.wait())

            done, _ = await asyncio.wait({ingest, exited}, return_when=asyncio.FIRST_COMPLETED)
            if ingest not in done:
                logger.debug("Producer exited, reading remaining output")
                try:
                    await asyncio.wait_for(asyncio.shield(ingest), timeout=grace_period)
                except asyncio.TimeoutError:
                    logger.info("Output still open %.1fs after producer exit, stopping", grace_period)
                    cancel.set()
                    await ingest
            else:
                await ingest

            if cancel.is_set() and not exited.done():
                # Interrupted while the producer is still running: stop() takes it down
                exited.cancel()
                await asyncio.wait({exited})
            else:
                try:
                    exit_code = await asyncio.wait_for(asyncio.shield(exited), timeout=grace_period)
                except asyncio.TimeoutError:
                    logger.info("Producer still running %.1fs after end of output, stopping", grace_period)
                    exited.cancel()
                    await asyncio.wait({exited})
    finally:
        if controller.cancelled:
            logger.info("Run cancelled, draining collected results")
        controller.drain()

    logger.debug("Producer exit code: %s", exit_code)
    if exit_code is not None and exit_code > 0:
        raise ProducerExit(exit_code)
    return exit_code
