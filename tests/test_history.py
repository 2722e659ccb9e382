"""Tests for the prompt_toolkit history adapter."""

import os

from shellstatus.history import StoreHistory
from shellstatus.store import Cmd, StoreError


class TestStoreHistory:
    def test_loads_newest_first(self, hist):
        history = StoreHistory(hist)
        assert list(history.load_history_strings()) == ["ls -l", "echo hello"]

    def test_store_string_writes_through(self, hist, backend, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        history = StoreHistory(hist)
        history.store_string("make")
        cmd = hist.all_cmds()[-1]
        assert cmd.text == "make"
        assert cmd.time > 0
        assert backend.cmds(2, 3)[0].dir == os.getcwd()

    def test_append_string_updates_loaded_strings(self, hist):
        history = StoreHistory(hist)
        history.append_string("pwd")
        assert history.get_strings()[-1] == "pwd"
        assert hist.all_cmds()[-1].text == "pwd"

    def test_write_failure_is_kept(self, hist, backend):
        history = StoreHistory(hist)
        backend.fail_with = OSError("disk full")
        history.store_string("make")
        err = history.pop_error()
        assert isinstance(err, StoreError)
        assert "disk full" in str(err)
        assert history.pop_error() is None

    def test_sees_sync_only_with_new_adapter(self, hist, backend):
        backend.add_cmd(Cmd("elsewhere"))
        hist.fast_forward()
        assert list(StoreHistory(hist).load_history_strings())[0] == "elsewhere"
