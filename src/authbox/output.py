"""Output formatting for the ``authbox`` command line.

Data goes to stdout, diagnostics to stderr:

* **stdout** -- state trees, render props and tables.
* **stderr** -- info, warnings, errors and debug messages.

:class:`OutputManager` holds the format and verbosity flags plus two Rich
consoles. It is created in :func:`~authbox.app.main_callback` and installed
with :func:`set_output`; the module-level helpers (:func:`info`,
:func:`error`, ...) delegate to the installed manager.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Supported output formats; ``AUTO`` picks ``RICH`` on a colour TTY."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes data and diagnostics to the right stream in the right format.

    Args:
        format: Desired output format.
        no_color: Disable colour and Rich markup.
        quiet: Suppress informational messages on stderr.
        verbose: Show debug messages on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _color_disabled_by_env()
        self._quiet = quiet
        self._verbose = verbose
        if format == OutputFormat.AUTO:
            use_rich = sys.stdout.isatty() and not self._no_color
            self._format = OutputFormat.RICH if use_rich else OutputFormat.PLAIN
        else:
            self._format = format
        self._stdout = Console(file=sys.stdout, no_color=self._no_color)
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, data: Any) -> None:
        """Write structured *data* to stdout in the resolved format."""
        if self._format == OutputFormat.RICH:
            text = json.dumps(data, indent=2, default=str)
            self._stdout.print(Syntax(text, "json", theme="ansi_dark"))
        elif self._format == OutputFormat.JSON:
            sys.stdout.write(json.dumps(data, indent=2, default=str) + "\n")
        else:
            sys.stdout.write(_plain(data) + "\n")
        sys.stdout.flush()

    def print_table(
        self, headers: list[str], rows: list[list[str]], title: Optional[str] = None
    ) -> None:
        """Write a table; JSON format emits a list of objects instead."""
        if self._format == OutputFormat.JSON:
            self.print_data([dict(zip(headers, row)) for row in rows])
            return
        if self._format == OutputFormat.PLAIN:
            sys.stdout.write("\t".join(headers) + "\n")
            for row in rows:
                sys.stdout.write("\t".join(row) + "\n")
            sys.stdout.flush()
            return
        table = Table(title=title)
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        if not self._quiet:
            self._stderr.print(message, markup=False)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._stderr.print(f"[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        self._stderr.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        self._stderr.print(f"[red]Error:[/red] {escape(message)}")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._stderr.print(f"[dim]{escape(message)}[/dim]")


def _plain(data: Any, indent: int = 0) -> str:
    pad = "  " * indent
    if isinstance(data, dict):
        lines = []
        for key, value in data.items():
            if isinstance(value, (dict, list)) and value:
                lines.append(f"{pad}{key}:")
                lines.append(_plain(value, indent + 1))
            else:
                lines.append(f"{pad}{key}: {value}")
        return "\n".join(lines)
    if isinstance(data, list):
        return "\n".join(f"{pad}- {item}" for item in data)
    return f"{pad}{data}"


def _color_disabled_by_env() -> bool:
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# ---------------------------------------------------------------------- #
# Installed manager
# ---------------------------------------------------------------------- #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (tests call this between runs)."""
    global _output
    _output = None


def print_data(data: Any) -> None:
    get_output().print_data(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
