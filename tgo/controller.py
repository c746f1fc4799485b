"""
Stream controller for a reporting run.

The controller ingests decoded events one at a time, prints a detail line
as soon as an identity's outcome is known and wanted, and once the input
has ended (or was cancelled) prints everything that was deferred: the
remaining detail lines in sorted order, the grouped summaries, the
coverage listing and the final tally.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, AsyncIterator
from datetime import datetime, timezone
from enum import Enum

from .config import ReportConfig
from .events import Action, Event, EventDecodeError, Key, Status, Verbosity, decode_event
from .events.models import TERMINAL_ACTIONS
from .reporting import Reporter, RunTally
from .storage import EventStore

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    """Lifecycle of a reporting run."""
    INGESTING = "ingesting"
    DRAINING = "draining"
    DONE = "done"


class StreamController:
    """
    Drives one reporting run.

    Example:
        controller = StreamController(config, Reporter(console, config.verbosity))
        for line in lines:
            controller.feed_line(line)
        tally = controller.drain()
    """

    def __init__(self, config: ReportConfig, reporter: Reporter | None = None):
        self.config = config
        self.reporter = reporter or Reporter(verbosity=config.verbosity)
        self.store = EventStore()
        self.rendered: set[Key] = set()
        self.state = RunState.INGESTING
        self.cancelled = False
        self.decode_errors = 0
        self.started_at = datetime.now(timezone.utc)
        self.tally: RunTally | None = None

    # ─────────────────────────────────────────────────────────────────────────
    # Ingesting
    # ─────────────────────────────────────────────────────────────────────────

    def feed_line(self, line: str | bytes) -> Event | None:
        """
        Decode and ingest one raw line. Lines that are not events are
        logged and skipped.

        Returns:
            The ingested Event, or None if the line was skipped
        """
        logger.debug("line: %r", line)
        try:
            event = decode_event(line)
        except EventDecodeError as e:
            self.decode_errors += 1
            logger.warning("Skipping undecodable line: %s", e)
            return None
        self.feed(event)
        return event

    def feed(self, event: Event) -> bool:
        """
        Ingest one event, printing its identity's detail line if its
        outcome just became reportable.

        Returns:
            True if a detail line was printed
        """
        if self.state != RunState.INGESTING:
            raise RuntimeError(f"Cannot ingest events while {self.state.value}")

        key = self.store.append(event)
        status = event.action.status
        if key in self.rendered or status is None or not self.config.renders(status):
            return False

        self.reporter.print_detail(self.store.get(key))
        self.rendered.add(key)
        return True

    async def consume(self, lines: AsyncIterable[str], cancel: asyncio.Event | None = None) -> None:
        """
        Ingest lines until the input ends or `cancel` is set.

        Whatever was ingested before cancellation stays in the store and
        is reported by drain().
        """
        if cancel is None:
            cancel = asyncio.Event()
        iterator = lines.__aiter__()
        cancelled = asyncio.ensure_future(cancel.wait())
        try:
            while not cancel.is_set():
                next_line = asyncio.ensure_future(_next_line(iterator))
                done, _ = await asyncio.wait(
                    {next_line, cancelled}, return_when=asyncio.FIRST_COMPLETED
                )
                if next_line not in done:
                    next_line.cancel()
                    await asyncio.wait({next_line})
                    break
                line = next_line.result()
                if line is None:
                    break
                self.feed_line(line)
        finally:
            cancelled.cancel()

        if cancel.is_set():
            self.cancelled = True
            logger.info("Input cancelled after %d identities, reporting what was collected", len(self.store))
        else:
            logger.debug("End of input after %d identities", len(self.store))

    # ─────────────────────────────────────────────────────────────────────────
    # Draining
    # ─────────────────────────────────────────────────────────────────────────

    def pending_keys(self) -> list[Key]:
        """Keys not yet printed whose status is wanted, in report order."""
        return [
            key
            for key in self.store.exclude_keys(self.rendered).ordered_keys()
            if self.config.renders(self.store.status(key))
        ]

    def summary_group(self, status: Status) -> EventStore:
        """The identities listed under `status` in the grouped summaries."""
        if status == Status.NONE:
            return self.store.without_actions(*TERMINAL_ACTIONS)

        group = self.store.with_action(status.action)
        if status == Status.SKIP and self.config.verbosity <= Verbosity.V3:
            group = group.without_no_test_packages()
        return group

    def drain(self) -> RunTally:
        """
        Print everything deferred until the end of the input.

        Returns:
            The final RunTally
        """
        if self.state == RunState.DONE:
            raise RuntimeError("Run already drained")
        self.state = RunState.DRAINING

        for key in self.pending_keys():
            self.reporter.print_detail(self.store.get(key))
            self.rendered.add(key)

        tally = RunTally.from_store(self.store, started_at=self.started_at)
        if len(self.store) > 0:
            for status in self.config.summary:
                group = self.summary_group(status)
                if len(group) > 0:
                    self.reporter.print_summary(group, status, self.store)

            if self.config.coverage:
                covered = self.store.with_coverage()
                if len(covered) > 0:
                    self.reporter.print_coverage(covered)

            self.reporter.print_footer(tally)

        if self.decode_errors:
            logger.info("Skipped %d undecodable lines", self.decode_errors)

        self.tally = tally
        self.state = RunState.DONE
        return tally

    @property
    def has_failures(self) -> bool:
        return len(self.store.with_action(Action.FAIL)) > 0


async def _next_line(iterator: AsyncIterator[str]) -> str | None:
    """Next line from `iterator`, None at end of input."""
    try:
        return await iterator.__anext__()
    except StopAsyncIteration:
        return None
