"""CLI output formatting.

Everything is written to stderr so that stdout stays free for the
outbound client once the process is replaced.
"""

from __future__ import annotations

import shlex

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from .config import ConfigError
from .errors import FleetConnectError


class Reporter:
    """Operator-facing messages with an explicit verbosity setting."""

    def __init__(
        self,
        *,
        verbose: bool = False,
        console: Console | None = None,
    ) -> None:
        self.verbose = verbose
        self.console = console or Console(stderr=True, highlight=False)

    def info(self, message: str) -> None:
        self.console.print(message)

    def debug(self, message: str) -> None:
        if self.verbose:
            self.console.print(Text(f"debug: {message}", style="dim"))

    def error(self, message: str) -> None:
        self.console.print(Text(message, style="bold red"))


def bold(value: object) -> str:
    """Wrap *value* in bold markup, escaping any markup inside it."""
    return f"[bold]{escape(str(value))}[/bold]"


def print_error(e: FleetConnectError, reporter: Reporter) -> None:
    """Print the error line followed by its remediation, if any."""
    reporter.error(f"error: {e.message}")
    if e.heading is not None or e.items:
        reporter.info("")
    if e.heading is not None:
        reporter.console.print(Text(e.heading))
    for item in e.items:
        reporter.console.print(Text(f" - {item}"))


def print_running_command(argv: list[str], reporter: Reporter) -> None:
    reporter.info("")
    reporter.console.print(
        Text.assemble(("Running command:", "bold"), " ", shlex.join(argv))
    )
    reporter.info("")


def _validation_lines(error: ValidationError) -> list[str]:
    """One line per failing field, as `path.to.field: message`."""
    lines: list[str] = []
    for detail in error.errors():
        message = detail["msg"].removeprefix("Value error, ")
        path = ".".join(str(part) for part in detail["loc"])
        lines.append(f"{path}: {message}" if path else message)
    return lines


def print_config_error(
    e: ConfigError,
    *,
    console: Console | None = None,
) -> None:
    """Show a configuration problem in a red panel on stderr."""
    console = console or Console(stderr=True)
    if isinstance(e.__cause__, ValidationError):
        body = "\n".join(_validation_lines(e.__cause__))
    else:
        body = str(e)
    console.print(
        Panel(Text(body), title="Config error", border_style="red")
    )
