"""Numeric process exit codes used by the ``authbox`` command line.

Each constant maps to an error category and is referenced by the matching
:class:`~authbox.exceptions.AuthboxError` subclass, so shell wrappers can
tell failures apart without parsing stderr.
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_ARGUMENT = 2
"""A widget was constructed or dispatched with invalid arguments."""

EXIT_NOT_FOUND = 4
"""An operation referenced a widget instance that does not exist."""

EXIT_RENDER_FAILURE = 5
"""The host engine failed to resolve a screen for the current state."""

EXIT_WEB_API_ERROR = 6
"""The authentication server rejected a request or could not be reached."""
