"""Shared test fixtures for the shellstatus test suite."""

import queue
import threading

import pytest

from shellstatus.hist_store import HistStore
from shellstatus.store import MemoryStore, StoreError
from shellstatus.styled import Text, plain

# How long to wait for an update that should arrive, and for one that
# should not.
UPDATE_TIMEOUT = 1.0
NO_UPDATE_WAIT = 0.05


class FailingStore(MemoryStore):
    """Memory backend whose calls can be made to fail.

    While ``fail_with`` holds an exception, every call raises it wrapped in
    StoreError, the way a real backend reports I/O failures.
    """

    def __init__(self, cmds=None):
        self.fail_with = None
        super().__init__(cmds)

    def _check(self):
        if self.fail_with is not None:
            raise StoreError(str(self.fail_with)) from self.fail_with

    def next_cmd_seq(self):
        self._check()
        return super().next_cmd_seq()

    def add_cmd(self, cmd):
        self._check()
        return super().add_cmd(cmd)

    def cmds(self, from_seq, upto_seq):
        self._check()
        return super().cmds(from_seq, upto_seq)


@pytest.fixture
def backend():
    """A memory backend holding two commands."""
    return FailingStore(["echo hello", "ls -l"])


@pytest.fixture
def hist(backend):
    """A HistStore over the memory backend."""
    return HistStore(backend)


class AutoIncPrompt:
    """Compute callback returning "1> ", "2> ", ... on successive calls."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> Text:
        self.calls += 1
        return plain(f"{self.calls}> ")


class BlockedAutoIncPrompt(AutoIncPrompt):
    """Like AutoIncPrompt, but each call waits for one ``unblock()``.

    ``started`` is set whenever a call begins waiting.
    """

    def __init__(self) -> None:
        super().__init__()
        self._gate = threading.Semaphore(0)
        self.started = threading.Event()

    def __call__(self) -> Text:
        self.started.set()
        self._gate.acquire()
        return super().__call__()

    def unblock(self) -> None:
        self._gate.release()


@pytest.fixture
def autoinc():
    return AutoIncPrompt()


@pytest.fixture
def blocked():
    compute = BlockedAutoIncPrompt()
    yield compute
    # Let any computation still waiting finish so its thread exits.
    for _ in range(4):
        compute.unblock()


def next_update(prompt, timeout=UPDATE_TIMEOUT):
    """The next published content; fails the test if none arrives."""
    try:
        return prompt.late_updates().get(timeout=timeout)
    except queue.Empty:
        pytest.fail(f"no late update after {timeout} seconds")


def assert_update(prompt, want: Text):
    """The next update, and the current content, display as ``want``."""
    update = next_update(prompt)
    assert update.styled() == want
    assert prompt.get().styled() == want


def assert_no_update(prompt, wait=NO_UPDATE_WAIT):
    try:
        update = prompt.late_updates().get(timeout=wait)
    except queue.Empty:
        return
    pytest.fail(f"unexpected update {update!r}")
