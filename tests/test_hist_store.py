"""Tests for the concurrency-safe history store."""

import threading

import pytest

from conftest import FailingStore
from shellstatus.hist_store import HistStore
from shellstatus.store import Cmd, MemoryStore, SQLiteStore, StoreError


class TestOperations:
    def test_all_cmds(self, hist):
        assert [c.text for c in hist.all_cmds()] == ["echo hello", "ls -l"]

    def test_add_cmd_returns_seq(self, hist):
        assert hist.add_cmd(Cmd("pwd")) == 2
        assert hist.all_cmds()[-1] == Cmd("pwd", seq=2)

    def test_cursor_prefix(self, hist):
        hist.add_cmd(Cmd("echo bye"))
        cursor = hist.cursor("echo")
        assert cursor.prev().text == "echo bye"
        assert cursor.prev().text == "echo hello"

    def test_cursor_ignores_later_writes(self, hist):
        cursor = hist.cursor("")
        hist.add_cmd(Cmd("later"))
        assert cursor.prev().text == "ls -l"

    def test_add_cmd_error_propagates(self, hist, backend):
        backend.fail_with = OSError("disk full")
        with pytest.raises(StoreError, match="disk full"):
            hist.add_cmd(Cmd("x"))

    def test_construction_error_propagates(self):
        backend = FailingStore()
        backend.fail_with = OSError("no db")
        with pytest.raises(StoreError):
            HistStore(backend)


class TestFastForward:
    def test_picks_up_other_writers(self, hist, backend):
        backend.add_cmd(Cmd("from another session"))
        assert len(hist.all_cmds()) == 2
        hist.fast_forward()
        assert hist.all_cmds()[-1].text == "from another session"

    def test_keeps_own_commands(self, hist, backend):
        hist.add_cmd(Cmd("mine"))
        backend.add_cmd(Cmd("theirs"))
        hist.fast_forward()
        assert [c.text for c in hist.all_cmds()] == [
            "echo hello", "ls -l", "mine", "theirs",
        ]

    def test_failure_keeps_previous_view(self, hist, backend):
        hist.add_cmd(Cmd("mine"))
        before = hist.all_cmds()
        backend.fail_with = OSError("locked")
        with pytest.raises(StoreError, match="locked"):
            hist.fast_forward()
        assert hist.all_cmds() == before

        # A later retry succeeds.
        backend.fail_with = None
        hist.fast_forward()
        assert hist.all_cmds() == before

    def test_between_sqlite_sessions(self, tmp_path):
        path = str(tmp_path / "hist.db")
        first = HistStore(SQLiteStore(path))
        second = HistStore(SQLiteStore(path))

        first.add_cmd(Cmd("make"))
        second.add_cmd(Cmd("make test"))
        assert [c.text for c in first.all_cmds()] == ["make"]

        first.fast_forward()
        assert [c.text for c in first.all_cmds()] == ["make", "make test"]
        assert [c.seq for c in first.all_cmds()] == [1, 2]


class TestConcurrency:
    def test_parallel_adds_and_fast_forwards(self):
        hist = HistStore(MemoryStore())
        errors = []

        def writer(n):
            try:
                for i in range(50):
                    hist.add_cmd(Cmd(f"w{n}-{i}"))
            except Exception as exc:  # pragma: no cover - reported below
                errors.append(exc)

        def syncer():
            try:
                for _ in range(50):
                    hist.fast_forward()
                    hist.cursor("w")
            except Exception as exc:  # pragma: no cover - reported below
                errors.append(exc)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        threads.append(threading.Thread(target=syncer))
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        hist.fast_forward()
        cmds = hist.all_cmds()
        assert len(cmds) == 200
        assert [c.seq for c in cmds] == list(range(200))
        assert len({c.text for c in cmds}) == 200

    def test_own_adds_survive_concurrent_fast_forward(self):
        hist = HistStore(MemoryStore())
        done = threading.Event()

        def syncer():
            while not done.is_set():
                hist.fast_forward()

        thread = threading.Thread(target=syncer)
        thread.start()
        try:
            for i in range(100):
                hist.add_cmd(Cmd(f"cmd {i}"))
                assert hist.all_cmds()[-1].text == f"cmd {i}"
        finally:
            done.set()
            thread.join()
