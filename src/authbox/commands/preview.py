"""``authbox state`` and ``authbox preview`` -- headless widget inspection.

Both commands build a widget from a configuration file (see
:func:`~authbox.config.resolve_widget_config`) with a static preview engine
that always resolves the requested screen. ``state`` prints the initial
state tree; ``preview`` shows the widget and prints the mounted render props
together with the host events emitted along the way.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer

from authbox.config import resolve_widget_config
from authbox.exceptions import AuthboxError
from authbox.models import StateTree
from authbox.output import debug, error, print_data
from authbox.render import READY_EVENTS
from authbox.screens import Engine, Screen
from authbox.widget import Widget

_TRACKED_EVENTS = ("show", "hide", "render error", "captcha reload", *READY_EVENTS.values())


class PreviewScreen(Screen):
    """Screen with a name, a submit handler and nothing else."""

    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def submit_handler(self, tree: StateTree) -> Any:
        return lambda instance_id, *args: None


class PreviewEngine(Engine):
    """Engine resolving every state to the same :class:`PreviewScreen`."""

    def __init__(self, screen_name: str) -> None:
        self._screen = PreviewScreen(screen_name)

    def render(self, tree: StateTree) -> Screen:
        return self._screen


def _build_widget(
    config_path: Optional[Path],
    client_id: Optional[str],
    domain: Optional[str],
    screen: str,
) -> Widget:
    config = resolve_widget_config(config_path, cli_client_id=client_id, cli_domain=domain)
    debug(f"Creating widget for {config.client_id}@{config.domain}")
    return Widget(config.client_id, config.domain, config.options, engine=PreviewEngine(screen))


def state_command(
    config_path: Optional[Path] = typer.Argument(
        None, help="Widget configuration JSON file."
    ),
    client_id: Optional[str] = typer.Option(None, "--client-id", help="Client id override."),
    domain: Optional[str] = typer.Option(None, "--domain", help="Domain override."),
) -> None:
    """Print the initial state tree built from a configuration file."""
    try:
        widget = _build_widget(config_path, client_id, domain, "login")
    except AuthboxError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    print_data(widget.state.model_dump(mode="json"))


def preview_command(
    config_path: Optional[Path] = typer.Argument(
        None, help="Widget configuration JSON file."
    ),
    screen: str = typer.Option("login", "--screen", "-s", help="Screen name to render."),
    client_id: Optional[str] = typer.Option(None, "--client-id", help="Client id override."),
    domain: Optional[str] = typer.Option(None, "--domain", help="Domain override."),
) -> None:
    """Show a widget headlessly and print its render props."""
    try:
        widget = _build_widget(config_path, client_id, domain, screen)
    except AuthboxError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    emitted: list[str] = []
    for event in _TRACKED_EVENTS:
        widget.on(event, lambda *args, _event=event: emitted.append(_event))

    widget.show()
    if widget.props is None:
        error(f"Screen '{screen}' could not be rendered")
        raise typer.Exit(code=1)
    print_data({"props": widget.props.describe(), "events": emitted})
