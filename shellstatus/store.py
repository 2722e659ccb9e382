"""Command history backends.

A backend is the persistent side of the history: it assigns sequence
numbers and hands back ranges of records. ``MemoryStore`` lives for one
process; ``SQLiteStore`` is a file shared by every running shell, so that
one session can pick up commands another session has written.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when a history backend fails to read or write."""


@dataclass(frozen=True, slots=True)
class Cmd:
    """One history record.

    Attributes:
        text: The command line as entered.
        seq: Sequence number assigned by the backend; -1 until stored.
        time: Unix timestamp of entry.
        dir: Working directory the command was entered in.
    """

    text: str
    seq: int = -1
    time: float = 0.0
    dir: str = ""


class Store(ABC):
    """Interface every history backend implements."""

    @abstractmethod
    def next_cmd_seq(self) -> int:
        """The sequence number the next added command will get."""

    @abstractmethod
    def add_cmd(self, cmd: Cmd) -> int:
        """Store ``cmd`` and return its assigned sequence number."""

    @abstractmethod
    def cmds(self, from_seq: int, upto_seq: int) -> list[Cmd]:
        """Records with ``from_seq <= seq < upto_seq``, oldest first."""


class MemoryStore(Store):
    """Process-local backend, used for ``--no-db`` and in tests."""

    def __init__(self, cmds: list[str] | None = None) -> None:
        self._lock = threading.Lock()
        self._cmds: list[Cmd] = []
        for text in cmds or []:
            self.add_cmd(Cmd(text))

    def next_cmd_seq(self) -> int:
        with self._lock:
            return len(self._cmds)

    def add_cmd(self, cmd: Cmd) -> int:
        with self._lock:
            seq = len(self._cmds)
            self._cmds.append(replace(cmd, seq=seq))
            return seq

    def cmds(self, from_seq: int, upto_seq: int) -> list[Cmd]:
        with self._lock:
            return [c for c in self._cmds if from_seq <= c.seq < upto_seq]


_SCHEMA = """
CREATE TABLE IF NOT EXISTS cmd (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    text TEXT NOT NULL,
    time REAL NOT NULL,
    dir TEXT NOT NULL
)
"""


class SQLiteStore(Store):
    """History backend in a SQLite database file.

    Each call opens its own connection, so a commit made by another process
    is visible to the next call without any cache invalidation here.

    Args:
        path: Database file. Created, with its table, if missing.
        timeout: Seconds to wait on a database locked by another process.
    """

    def __init__(self, path: str, timeout: float = 5.0) -> None:
        self.path = path
        self.timeout = timeout
        with self._connect() as conn:
            conn.execute(_SCHEMA)

    def next_cmd_seq(self) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT seq FROM sqlite_sequence WHERE name = 'cmd'"
            ).fetchone()
        # AUTOINCREMENT starts at 1; the sequence row appears on first insert.
        return (row[0] if row else 0) + 1

    def add_cmd(self, cmd: Cmd) -> int:
        stamp = cmd.time or time.time()
        with self._connect() as conn:
            cur = conn.execute(
                "INSERT INTO cmd (text, time, dir) VALUES (?, ?, ?)",
                (cmd.text, stamp, cmd.dir),
            )
            seq = cur.lastrowid
        logger.debug("Stored command %d in %s", seq, self.path)
        return seq

    def cmds(self, from_seq: int, upto_seq: int) -> list[Cmd]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT seq, text, time, dir FROM cmd "
                "WHERE seq >= ? AND seq < ? ORDER BY seq",
                (from_seq, upto_seq),
            ).fetchall()
        return [Cmd(text=text, seq=seq, time=t, dir=d) for seq, text, t, d in rows]

    def _connect(self) -> _Connection:
        return _Connection(self.path, self.timeout)


class _Connection:
    """Context manager: one committed transaction on a fresh connection.

    Any sqlite3.Error raised inside the block, or while opening and
    committing, surfaces as StoreError.
    """

    def __init__(self, path: str, timeout: float) -> None:
        self._path = path
        self._timeout = timeout
        self._conn: sqlite3.Connection | None = None

    def __enter__(self) -> sqlite3.Connection:
        try:
            self._conn = sqlite3.connect(self._path, timeout=self._timeout)
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open history database {self._path}: {exc}") from exc
        return self._conn

    def __exit__(self, exc_type, exc, tb) -> None:
        conn = self._conn
        self._conn = None
        try:
            if exc_type is None:
                conn.commit()
            else:
                conn.rollback()
        except sqlite3.Error as err:
            raise StoreError(f"History database error: {err}") from err
        finally:
            conn.close()
        if isinstance(exc, sqlite3.Error):
            raise StoreError(f"History database error: {exc}") from exc
