"""Typer application and console entry point for ``authbox``.

The command line is a headless companion to the library: it lists captcha
providers and builds widgets from configuration files to inspect their state
and render props without a UI.
"""

from __future__ import annotations

import sys

import typer

from authbox import __version__
from authbox.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="authbox",
    help="Inspect embeddable authentication widgets.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"authbox {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Install the output manager and logging before every sub-command."""
    from authbox.config import configure_logging
    from authbox.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    configure_logging(verbose)


def _register_commands() -> None:
    from authbox.commands.preview import preview_command, state_command
    from authbox.commands.providers import providers_command

    app.command("providers")(providers_command)
    app.command("state")(state_command)
    app.command("preview")(preview_command)


_register_commands()


def main() -> None:
    """Console-script entry point.

    :class:`~authbox.exceptions.AuthboxError` exits with the error's
    ``exit_code``; anything else exits with a generic failure.
    """
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from authbox.exceptions import AuthboxError
        from authbox.output import error

        error(str(exc))
        if isinstance(exc, AuthboxError):
            sys.exit(exc.exit_code)
        sys.exit(EXIT_GENERIC_FAILURE)
