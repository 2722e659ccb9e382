"""Cached history view over a backend, and prefix cursors.

A ``HybridStore`` is built from a snapshot of the backend taken when it is
created, plus the commands this session adds afterwards. Commands other
sessions write later are not visible until a new view is built; see
``HistStore.fast_forward``.
"""

from __future__ import annotations

import logging

from .store import Cmd, Store

logger = logging.getLogger(__name__)


class CursorError(IndexError):
    """Raised when a cursor is moved past either end of its records."""


class Cursor:
    """Bidirectional iterator over the records matching a prefix.

    A new cursor sits just past the newest record; ``prev()`` steps towards
    older records and ``next()`` back towards newer ones. Moving past either
    end raises CursorError and leaves the position unchanged.
    """

    def __init__(self, cmds: list[Cmd], prefix: str = "") -> None:
        self.prefix = prefix
        self._cmds = [c for c in cmds if c.text.startswith(prefix)]
        self._index = len(self._cmds)

    def __len__(self) -> int:
        return len(self._cmds)

    def get(self) -> Cmd:
        """The record under the cursor."""
        if not 0 <= self._index < len(self._cmds):
            raise CursorError("Cursor is not on a record")
        return self._cmds[self._index]

    def prev(self) -> Cmd:
        """Move to the next older match and return it."""
        if self._index <= 0:
            raise CursorError("No older matching command")
        self._index -= 1
        return self._cmds[self._index]

    def next(self) -> Cmd:
        """Move to the next newer match and return it."""
        if self._index >= len(self._cmds) - 1:
            raise CursorError("No newer matching command")
        self._index += 1
        return self._cmds[self._index]


class HybridStore:
    """Backend snapshot plus session-local additions.

    Use ``HybridStore.create(backend)``; the constructor takes an already
    fetched snapshot.
    """

    def __init__(self, backend: Store, snapshot: list[Cmd]) -> None:
        self._backend = backend
        self._snapshot = snapshot
        self._session: list[Cmd] = []

    @classmethod
    def create(cls, backend: Store) -> HybridStore:
        """Snapshot every record the backend holds right now."""
        upto = backend.next_cmd_seq()
        snapshot = backend.cmds(0, upto)
        logger.debug("Loaded %d history records (upto seq %d)", len(snapshot), upto)
        return cls(backend, snapshot)

    def add_cmd(self, cmd: Cmd) -> int:
        """Write through to the backend, then remember the record locally."""
        seq = self._backend.add_cmd(cmd)
        self._session.append(Cmd(text=cmd.text, seq=seq, time=cmd.time, dir=cmd.dir))
        return seq

    def all_cmds(self) -> list[Cmd]:
        return self._snapshot + self._session

    def cursor(self, prefix: str) -> Cursor:
        return Cursor(self.all_cmds(), prefix)
