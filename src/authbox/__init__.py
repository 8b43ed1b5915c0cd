"""authbox -- reactive state and render engine for embeddable authentication widgets.

A host creates :class:`~authbox.widget.Widget` instances, each with isolated
configuration and runtime state. Every change goes through the action
dispatcher, is published on the ``"render"`` channel, and is turned into
render props by the render pipeline using a host-supplied engine.

Typical use::

    from authbox import Widget

    widget = Widget("my-client", "example.auth0.com", {"closable": True}, engine=MyEngine())
    widget.on("signin ready", on_ready)
    widget.show()

Modules:
    widget: Widget instances and the runtime arena.
    actions: The action dispatcher, sole writer of the state store.
    store: Per-instance state storage.
    bus: Named-channel observation of state changes.
    render: Render pipeline and render props.
    hooks: Host hook runner.
    providers: Closed-set provider selection.
    captcha: Captcha variants and provider table.
    models: Pydantic option and state models.
    exceptions: Exception hierarchy with exit-code mapping.
"""

__version__ = "0.1.0"

from authbox.exceptions import (  # noqa: E402
    AuthboxError,
    InvalidArgumentError,
    NotFoundError,
    RenderError,
)
from authbox.widget import Runtime, Widget  # noqa: E402

__all__ = [
    "AuthboxError",
    "InvalidArgumentError",
    "NotFoundError",
    "RenderError",
    "Runtime",
    "Widget",
]
