"""Process-wide instance identifier allocation.

Identifiers are opaque strings. They are unique for the lifetime of the
process regardless of how many :class:`~authbox.widget.Runtime` arenas
exist, so ids never collide when hosts mix runtimes.
"""

from __future__ import annotations

import itertools
import threading
from typing import Optional

ID_PREFIX = "authbox-"

_counter = itertools.count(1)
_lock = threading.Lock()
_last: Optional[str] = None


def incremental() -> str:
    """Issue the next instance id (``"authbox-1"``, ``"authbox-2"``, ...)."""
    global _last
    with _lock:
        _last = f"{ID_PREFIX}{next(_counter)}"
        return _last


def last_issued() -> Optional[str]:
    """Return the most recently issued id, or ``None`` if none was issued yet."""
    with _lock:
        return _last
