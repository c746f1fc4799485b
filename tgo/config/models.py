"""
Report configuration.

The reporting core consumes these as plain values; parsing of flags, env
vars and config files happens in the CLI and loader layers.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from ..events.models import ALL_STATUSES, DEFAULT_STATUSES, Status, Verbosity

# Statuses shown when the runner's own -v flag is passed
VERBOSE_RESULTS: tuple[Status, ...] = (Status.BENCH, Status.PASS, Status.NONE, Status.FAIL)
VERBOSE_SUMMARY: tuple[Status, ...] = (Status.NONE, Status.FAIL)


def parse_statuses(value: str | Iterable[str]) -> tuple[Status, ...]:
    """
    Parse a status list such as "fail,none".

    "-" selects nothing and "all" selects every status. Names are case
    insensitive.

    Raises:
        ValueError: If a name is not a valid status
    """
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "-":
            return ()
        if text == "all":
            return ALL_STATUSES
        names = [part.strip() for part in text.split(",") if part.strip()]
    else:
        names = [str(part).strip().lower() for part in value]

    statuses = []
    for name in names:
        try:
            status = Status(name)
        except ValueError:
            raise ValueError(f"{name} is not a valid status") from None
        if status not in statuses:
            statuses.append(status)
    return tuple(statuses)


def format_statuses(statuses: Sequence[Status]) -> str:
    if not statuses:
        return "-"
    return ",".join(s.value for s in statuses)


@dataclass(frozen=True)
class ReportConfig:
    """
    Settings for one reporting run.

    results: statuses whose detail lines are printed
    summary: statuses that get a grouped summary at the end
    coverage: print the coverage listing
    bin: go binary used to run the tests
    """
    verbosity: Verbosity = Verbosity.V0
    results: tuple[Status, ...] = DEFAULT_STATUSES
    summary: tuple[Status, ...] = DEFAULT_STATUSES
    coverage: bool = False
    bin: str = "go"

    def show_all(self) -> ReportConfig:
        """Show every status in results and summaries."""
        return replace(self, results=ALL_STATUSES, summary=ALL_STATUSES)

    def with_runner_args(self, args: Sequence[str]) -> ReportConfig:
        """
        Derive settings from the arguments passed through to `go test`.

        -cover (or any coverage profile flag) turns the coverage listing on,
        -v raises verbosity and shows passing tests as they finish.
        """
        config = self
        if any(_is_cover_flag(arg) for arg in args):
            config = replace(config, coverage=True)
        if any(arg in ("-v", "--v", "-v=true") for arg in args):
            config = replace(
                config,
                verbosity=max(config.verbosity, Verbosity.V2),
                results=VERBOSE_RESULTS,
                summary=VERBOSE_SUMMARY,
            )
        return config

    def renders(self, status: Status) -> bool:
        return status in self.results


def _is_cover_flag(arg: str) -> bool:
    name = arg.lstrip("-").split("=", 1)[0]
    if not arg.startswith("-"):
        return False
    return name in ("cover", "coverprofile", "coverpkg", "covermode")
