"""Exception hierarchy for authbox.

All exceptions inherit from :class:`AuthboxError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`authbox.exit_codes`.
Library callers catch the specific subclasses; the CLI entry point in
:func:`authbox.app.main` catches ``AuthboxError`` and exits with its code.

Subclass hierarchy::

    AuthboxError (exit 1)
    +-- InvalidArgumentError  (exit 2)
    +-- NotFoundError         (exit 4)
    +-- RenderError           (exit 5)
    +-- WebAPIError           (exit 6)
    +-- ConfigError           (exit 1)
"""

from authbox.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_ARGUMENT,
    EXIT_NOT_FOUND,
    EXIT_RENDER_FAILURE,
    EXIT_WEB_API_ERROR,
)


class AuthboxError(Exception):
    """Base exception for all authbox errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidArgumentError(AuthboxError):
    """Raised when construction or dispatch arguments are malformed."""

    exit_code = EXIT_INVALID_ARGUMENT


class NotFoundError(AuthboxError):
    """Raised when an operation targets an unknown or removed instance id."""

    exit_code = EXIT_NOT_FOUND


class RenderError(AuthboxError):
    """Raised (and emitted to the host) when a screen cannot be resolved."""

    exit_code = EXIT_RENDER_FAILURE


class WebAPIError(AuthboxError):
    """Raised when the authentication server returns an error or is unreachable.

    Args:
        message: Human-readable error description.
        code: Server-side error code (e.g. ``"access_denied"``) when known.
        status_code: HTTP status code when the error came from a response.
    """

    exit_code = EXIT_WEB_API_ERROR

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class ConfigError(AuthboxError):
    """Raised for unreadable or invalid widget configuration files."""

    exit_code = EXIT_GENERIC_FAILURE
