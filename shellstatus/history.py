"""prompt_toolkit history backed by the shared history store.

Up-arrow navigation in the REPL reads from ``HistStore``; accepted lines are
written back through it. The SQLite backend is shared by every running
session, but each session only sees other sessions' commands after
``HistStore.fast_forward`` and a fresh ``StoreHistory``.
"""

import logging
import time
from collections.abc import Iterable

from prompt_toolkit.history import History

from .hist_store import HistStore
from .prompt import current_dir
from .store import Cmd, StoreError

logger = logging.getLogger(__name__)


class StoreHistory(History):
    """History adapter over a HistStore.

    prompt_toolkit calls ``store_string`` from inside the running
    application, where an exception would tear down the prompt. A failed
    write is therefore kept in ``last_error`` for the REPL to report once
    the line has been read.
    """

    def __init__(self, store: HistStore) -> None:
        super().__init__()
        self.store = store
        self.last_error: StoreError | None = None

    def load_history_strings(self) -> Iterable[str]:
        # prompt_toolkit wants the newest entry first.
        for cmd in reversed(self.store.all_cmds()):
            yield cmd.text

    def store_string(self, string: str) -> None:
        try:
            self.store.add_cmd(Cmd(string, time=time.time(), dir=current_dir()))
        except StoreError as exc:
            logger.warning("Failed to save command to history: %s", exc)
            self.last_error = exc

    def pop_error(self) -> StoreError | None:
        """Return and clear the last write failure."""
        err, self.last_error = self.last_error, None
        return err
