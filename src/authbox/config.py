"""Widget configuration files, precedence resolution and logging setup.

The command line creates widgets from a JSON configuration file (see
:class:`~authbox.models.WidgetConfig`). Values are resolved with this
precedence, high to low:

1. CLI flags (``--client-id``, ``--domain``)
2. Environment variables (``AUTHBOX_CLIENT_ID``, ``AUTHBOX_DOMAIN``)
3. The configuration file
4. Defaults
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from authbox.exceptions import ConfigError
from authbox.models import WidgetConfig

ENV_CLIENT_ID = "AUTHBOX_CLIENT_ID"
ENV_DOMAIN = "AUTHBOX_DOMAIN"

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def load_config_file(path: Path) -> WidgetConfig:
    """Load and validate a widget configuration file.

    Raises:
        ConfigError: If the file is missing, is not valid JSON, or does not
            match :class:`~authbox.models.WidgetConfig`.
    """
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return WidgetConfig.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ConfigError(f"Invalid configuration at {path}: {exc}") from exc


def resolve_widget_config(
    path: Optional[Path] = None,
    cli_client_id: Optional[str] = None,
    cli_domain: Optional[str] = None,
) -> WidgetConfig:
    """Resolve the effective widget configuration.

    Returns:
        The merged :class:`~authbox.models.WidgetConfig`.

    Raises:
        ConfigError: If the file is invalid, or no client id or domain is
            available from any source.
    """
    config = load_config_file(path) if path is not None else WidgetConfig()

    client_id = config.client_id
    domain = config.domain
    if os.environ.get(ENV_CLIENT_ID):
        client_id = os.environ[ENV_CLIENT_ID]
    if os.environ.get(ENV_DOMAIN):
        domain = os.environ[ENV_DOMAIN]
    if cli_client_id is not None:
        client_id = cli_client_id
    if cli_domain is not None:
        domain = cli_domain

    if not client_id:
        raise ConfigError(f"No client id: pass --client-id or set {ENV_CLIENT_ID}")
    if not domain:
        raise ConfigError(f"No domain: pass --domain or set {ENV_DOMAIN}")
    return config.model_copy(update={"client_id": client_id, "domain": domain})


def configure_logging(verbose: bool = False) -> None:
    """Send ``authbox`` log records to stderr; DEBUG when *verbose*, else WARNING."""
    logger = logging.getLogger("authbox")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    # sys.stderr may have been swapped since the last call
    for existing in [h for h in logger.handlers if getattr(h, "_authbox", False)]:
        logger.removeHandler(existing)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    handler._authbox = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
