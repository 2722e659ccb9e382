"""Thread-safe history store shared by the REPL and its helpers.

Wraps a ``HybridStore`` behind one lock, and adds ``fast_forward`` to pick
up commands other shell sessions have written to the same backend.
"""

from __future__ import annotations

import logging
import threading

from .histutil import Cursor, HybridStore
from .store import Cmd, Store

logger = logging.getLogger(__name__)


class HistStore:
    """Concurrency-safe history with resynchronization.

    Usage::

        hist = HistStore(SQLiteStore(path))
        hist.add_cmd(Cmd("ls"))
        hist.fast_forward()   # see what other sessions added
        cursor = hist.cursor("git ")

    Every method holds the same lock for its whole duration, including the
    backend I/O it does. Backend failures are raised as StoreError and never
    retried here.
    """

    def __init__(self, backend: Store) -> None:
        """Build the initial view over ``backend``.

        Raises:
            StoreError: If the backend cannot be read.
        """
        self._lock = threading.Lock()
        self._backend = backend
        self._hybrid = HybridStore.create(backend)

    def add_cmd(self, cmd: Cmd) -> int:
        """Append a command; return the sequence number the backend assigned."""
        with self._lock:
            return self._hybrid.add_cmd(cmd)

    def all_cmds(self) -> list[Cmd]:
        """Every command in the current view, oldest first."""
        with self._lock:
            return self._hybrid.all_cmds()

    def cursor(self, prefix: str = "") -> Cursor:
        """A cursor over the commands starting with ``prefix``.

        The cursor works on a copy; later writes do not affect it.
        """
        with self._lock:
            return self._hybrid.cursor(prefix)

    def fast_forward(self) -> None:
        """Rebuild the view from the backend.

        Commands added through this store were written to the backend before
        ``add_cmd`` returned, so the new view still contains them. On failure
        the previous view stays in place.

        Raises:
            StoreError: If the backend cannot be read.
        """
        with self._lock:
            hybrid = HybridStore.create(self._backend)
            self._hybrid = hybrid
            logger.debug("History fast-forwarded to %d commands", len(hybrid.all_cmds()))
