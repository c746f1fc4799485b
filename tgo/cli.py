#!/usr/bin/env python3
"""
tgo CLI - readable go test reports

Usage:
    tgo run [OPTIONS] [GO TEST ARGS...]
    tgo replay [OPTIONS] <file | ->
    tgo info
    tgo --version
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

from . import __version__
from .config import ConfigError, ReportConfig, resolve_config
from .controller import StreamController
from .events import Verbosity
from .reporting import Reporter
from .sources import BaseSource, ProducerExit, SourceError, create_source
from .supervisor import install_signal_handlers, remove_signal_handlers, supervise

app = typer.Typer(
    name="tgo",
    help="tgo - colorized, incremental reports for go test",
    add_completion=False,
)
console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

PASSTHROUGH = {"allow_extra_args": True, "ignore_unknown_options": True}

RESULTS_HELP = "Statuses whose details are printed (comma separated: fail,none,pass,skip,bench; all; -)"
SUMMARY_HELP = "Statuses that get a summary at the end (same format as --results)"


def version_callback(value: bool):
    if value:
        console.print(f"tgo v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", callback=version_callback, is_eager=True,
        help="Show version and exit"
    ),
):
    """
    tgo - colorized, incremental reports for go test

    Wraps `go test -json` and prints one line per test as soon as it
    finishes, followed by summaries and a final tally.
    """
    pass


def setup_logging(verbosity: int) -> None:
    """Diagnostics go to stderr; they are only chatty at debug verbosity."""
    if verbosity >= Verbosity.V4:
        level = logging.DEBUG
        fmt = "%(filename)s:%(lineno)d %(message)s"
    else:
        level = logging.WARNING
        fmt = "%(levelname)s: %(message)s"
    logging.basicConfig(level=level, format=fmt, stream=sys.stderr, force=True)


def load_report_config(
    config_file: Optional[Path],
    overrides: dict[str, Any],
) -> ReportConfig:
    """Resolve the config, exiting with a readable message when it is invalid."""
    try:
        return resolve_config(config_file, overrides)
    except ConfigError as e:
        err_console.print("[red]✗ Invalid configuration[/red]")
        err_console.print(str(e.result), markup=False)
        raise typer.Exit(code=2)


async def _supervise_with_signals(controller: StreamController, source: BaseSource) -> Optional[int]:
    cancel = asyncio.Event()
    signals = install_signal_handlers(cancel)
    try:
        return await supervise(controller, source, cancel)
    finally:
        remove_signal_handlers(signals)


def execute(config: ReportConfig, source: BaseSource) -> None:
    """Run the report for `source` and exit with the producer's exit code."""
    logging.getLogger(__name__).debug("config: %s", config)
    reporter = Reporter(console, verbosity=config.verbosity)
    controller = StreamController(config, reporter)

    try:
        asyncio.run(_supervise_with_signals(controller, source))
    except SourceError as e:
        err_console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)
    except ProducerExit as e:
        raise typer.Exit(code=e.code)


def _overrides(
    results: Optional[str],
    summary: Optional[str],
    verbosity: Optional[int],
    bin: Optional[str],
    show_all: bool,
) -> dict[str, Any]:
    return {
        "results": results,
        "summary": summary,
        "verbosity": verbosity,
        "bin": bin,
        "all": True if show_all else None,
    }


@app.command(context_settings=PASSTHROUGH)
def run(
    ctx: typer.Context,
    results: Optional[str] = typer.Option(
        None, "--results", envvar="TGO_RESULTS", help=RESULTS_HELP
    ),
    summary: Optional[str] = typer.Option(
        None, "--summary", envvar="TGO_SUMMARY", help=SUMMARY_HELP
    ),
    verbosity: Optional[int] = typer.Option(
        None, "--verbosity", envvar="TGO_V", min=0, max=5,
        help="0 (lowest) to 5 (highest)"
    ),
    bin: Optional[str] = typer.Option(
        None, "--bin", envvar="TGO_BIN", help="go binary name"
    ),
    show_all: bool = typer.Option(
        False, "--all", envvar="TGO_ALL", help="Show mostly everything"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", envvar="TGO_CONFIG", help="YAML config file"
    ),
):
    """
    Run `go test -json` with the given arguments and report the results.

    Arguments tgo does not know are passed through to go test, e.g.
    `tgo run -cover -run TestFoo ./...`.
    """
    args = list(ctx.args)
    config = load_report_config(
        config_file, _overrides(results, summary, verbosity, bin, show_all)
    ).with_runner_args(args)
    setup_logging(config.verbosity)
    logging.getLogger(__name__).debug("args: %s", args)

    execute(config, create_source(config, args))


@app.command()
def replay(
    file: str = typer.Argument(
        ..., help="Captured `go test -json` output, - for stdin"
    ),
    cover: bool = typer.Option(
        False, "--cover", help="Print the coverage listing"
    ),
    results: Optional[str] = typer.Option(
        None, "--results", envvar="TGO_RESULTS", help=RESULTS_HELP
    ),
    summary: Optional[str] = typer.Option(
        None, "--summary", envvar="TGO_SUMMARY", help=SUMMARY_HELP
    ),
    verbosity: Optional[int] = typer.Option(
        None, "--verbosity", envvar="TGO_V", min=0, max=5,
        help="0 (lowest) to 5 (highest)"
    ),
    show_all: bool = typer.Option(
        False, "--all", envvar="TGO_ALL", help="Show mostly everything"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", envvar="TGO_CONFIG", help="YAML config file"
    ),
):
    """
    Report on previously captured `go test -json` output.
    """
    config = load_report_config(
        config_file, _overrides(results, summary, verbosity, None, show_all)
    )
    if cover:
        config = config.with_runner_args(["-cover"])
    setup_logging(config.verbosity)

    execute(config, create_source(config, replay=file))


@app.command()
def info():
    """
    Show information about tgo.
    """
    console.print(f"""
[bold]tgo[/bold] v{__version__}

Colorized, incremental reports for go test

[bold]Features:[/bold]
  • Results printed as soon as each test finishes
  • Failing test output without the runner's boilerplate
  • Summaries per status, coverage listing and final tally
  • Tests that never finished are reported as NONE

[bold]Quick Start:[/bold]
  tgo run ./...
  tgo run -cover ./...
  go test -json ./... > out.json && tgo replay out.json

[bold]Environment:[/bold]
  TGO_RESULTS, TGO_SUMMARY, TGO_V, TGO_BIN, TGO_ALL, TGO_CONFIG
""")


if __name__ == "__main__":
    app()
