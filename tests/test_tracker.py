"""Tests for tracker.FileTracker event handling."""

import os
import sys

import pytest

from c_function_counter.config import CounterConfig
from c_function_counter.exceptions import InvalidConfigError
from c_function_counter.table import Decoration, FileCountTable, file_identity
from c_function_counter.tracker import FileTracker


class TestUpdateFile:
    """Change / create / open events."""

    def test_counts_and_stores(self, tracker, table, tmp_path, stale_events):
        path = tmp_path / "a.c"
        path.write_text("int a(void) {}\nint b(void) {}\n")

        assert tracker.update_file(path) == 2
        assert table.get(path) == 2
        assert stale_events == [file_identity(path)]

    def test_badge_matches_count(self, tracker, table, tmp_path):
        path = tmp_path / "a.c"
        path.write_text("void x(void) {}\n" * 5)
        tracker.update_file(path)
        assert table.decoration_for(path) == Decoration("5", "5 function(s)")

    def test_recount_on_change(self, tracker, table, tmp_path):
        path = tmp_path / "a.c"
        path.write_text("int a(void) {}\n")
        tracker.update_file(path)
        path.write_text("int a(void) {}\nint b(void) {}\nint c(void) {}\n")
        tracker.update_file(path)
        assert table.get(path) == 3
        assert len(table) == 1

    def test_zero_count_is_stored(self, tracker, table, tmp_path):
        path = tmp_path / "empty.c"
        path.write_text("")
        assert tracker.update_file(path) == 0
        assert table.get(path) == 0

    def test_untracked_extension_evicts(self, tracker, table, tmp_path, stale_events):
        path = tmp_path / "a.h"
        path.write_text("int a(void) {}\n")
        assert tracker.update_file(path) is None
        assert len(table) == 0
        assert stale_events == [file_identity(path)]

    def test_missing_file_evicts(self, tracker, table, tmp_path, stale_events):
        path = tmp_path / "a.c"
        path.write_text("int a(void) {}\n")
        tracker.update_file(path)
        path.unlink()

        assert tracker.update_file(path) is None
        assert path not in table
        assert stale_events == [file_identity(path)] * 2

    def test_undecodable_bytes_still_counted(self, tracker, table, tmp_path, caplog):
        path = tmp_path / "a.c"
        path.write_bytes(b"/* caf\xe9 */\nint f(void) {}\n")
        with caplog.at_level("WARNING", logger="c_function_counter"):
            assert tracker.update_file(path) == 1
        assert table.get(path) == 1
        assert "Error updating decoration" not in caplog.text

    @pytest.mark.skipif(
        sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
        reason="permission bits are not enforced",
    )
    def test_permission_denied_evicts(self, tracker, table, tmp_path):
        path = tmp_path / "a.c"
        path.write_text("int a(void) {}\n")
        tracker.update_file(path)
        path.chmod(0)
        try:
            assert tracker.update_file(path) is None
            assert path not in table
        finally:
            path.chmod(0o644)


class TestRemoveFile:
    def test_delete_removes_entry(self, tracker, table, tmp_path, stale_events):
        path = tmp_path / "a.c"
        path.write_text("int a(void) {}\n")
        tracker.update_file(path)
        path.unlink()
        tracker.remove_file(path)
        assert len(table) == 0
        assert stale_events[-1] == file_identity(path)

    def test_delete_unknown_file_still_signals(self, tracker, tmp_path, stale_events):
        tracker.remove_file(tmp_path / "ghost.c")
        assert stale_events == [file_identity(tmp_path / "ghost.c")]

    def test_deleting_symlink_keeps_target(self, tracker, table, tmp_path):
        real = tmp_path / "real.c"
        real.write_text("int a(void) {}\nint b(void) {}\n")
        link = tmp_path / "link.c"
        try:
            link.symlink_to(real)
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")
        tracker.update_file(real)
        tracker.update_file(link)
        link.unlink()
        tracker.remove_file(link)
        assert link not in table
        assert table.get(real) == 2


class TestActiveFile:
    def test_switch_to_c_file_recounts(self, tracker, table, tmp_path):
        path = tmp_path / "a.c"
        path.write_text("int a(void) {}\n")
        assert tracker.switch_active(path) == 1
        assert tracker.active_file == file_identity(path)
        assert table.get(path) == 1

    def test_switch_to_non_c_file_is_ignored(self, tracker, tmp_path, stale_events):
        path = tmp_path / "notes.txt"
        path.write_text("int a(void) {}\n")
        assert tracker.switch_active(path) is None
        assert tracker.active_file == file_identity(path)
        assert stale_events == []

    def test_switch_to_header_evicts(self, tracker, table, tmp_path, stale_events):
        path = tmp_path / "a.h"
        path.write_text("int a(void) {}\n")
        assert tracker.switch_active(path) is None
        assert len(table) == 0
        assert stale_events == [file_identity(path)]

    def test_switch_to_none(self, tracker):
        assert tracker.switch_active(None) is None
        assert tracker.active_file is None

    def test_refresh_active_matches_change_event(self, tracker, table, tmp_path):
        path = tmp_path / "a.c"
        path.write_text("int a(void) {}\n")
        tracker.switch_active(path)
        path.write_text("int a(void) {}\nint b(void) {}\n")
        assert tracker.refresh_active() == 2
        assert table.get(path) == 2

    def test_refresh_without_active_file(self, tracker, table):
        assert tracker.refresh_active() is None
        assert len(table) == 0


class TestScheduling:
    def test_submit_runs_update(self, tracker, table, tmp_path):
        path = tmp_path / "a.c"
        path.write_text("int a(void) {}\n")
        assert tracker.submit(path).result(timeout=5) == 1
        assert table.get(path) == 1

    def test_submit_removal(self, tracker, table, tmp_path):
        path = tmp_path / "a.c"
        path.write_text("int a(void) {}\n")
        tracker.update_file(path)
        tracker.submit_removal(path).result(timeout=5)
        assert len(table) == 0

    def test_scan_workspace(self, tracker, table, workspace):
        queued = tracker.scan_workspace([workspace], wait=True)
        assert queued == 2
        assert table.snapshot() == {
            file_identity(workspace / "src" / "main.c"): 3,
            file_identity(workspace / "src" / "util.c"): 2,
        }

    def test_scan_missing_folder(self, tracker, table, tmp_path):
        assert tracker.scan_workspace([tmp_path / "nope"], wait=True) == 0
        assert len(table) == 0

    def test_scan_many_files(self, tmp_path):
        for i in range(25):
            (tmp_path / f"f{i}.c").write_text("int f(void) {}\n" * i)
        table = FileCountTable(".c")
        tracker = FileTracker(table, CounterConfig(workers=4))
        try:
            assert tracker.scan_workspace([tmp_path], wait=True) == 25
        finally:
            tracker.close()
        assert len(table) == 25
        assert table.get(tmp_path / "f7.c") == 7

    def test_default_config_follows_table_extension(self, tmp_path):
        table = FileCountTable(".cc")
        tracker = FileTracker(table)
        try:
            path = tmp_path / "a.cc"
            path.write_text("int a() {}\n")
            assert tracker.update_file(path) == 1
        finally:
            tracker.close()

    def test_config_extension_must_match_table(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            FileTracker(FileCountTable(".c"), CounterConfig(tracked_extension=".cc"))
        assert exc_info.value.key == "tracked_extension"
        assert exc_info.value.details["reason"] == "table tracks .c"
