"""
Tests for the FileOperations primitives.
"""

import errno
import os
import shutil
import stat
import pytest
from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import ExplorerConfig
from core.logger import AuditLogger, ActionType, ActionStatus
from modules.file_explorer import ErrorKind, FileOperations


IS_ROOT = hasattr(os, "geteuid") and os.geteuid() == 0


@pytest.fixture
def logger(tmp_path):
    return AuditLogger(log_path=str(tmp_path / "audit.jsonl"))


@pytest.fixture
def work(tmp_path):
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def ops(logger):
    return FileOperations(logger, ExplorerConfig())


def mode_of(path) -> int:
    return stat.S_IMODE(os.stat(path).st_mode)


class TestCreateDirectory:
    """Test directory creation."""

    def test_creates_directory(self, ops, work):
        result = ops.create_directory(str(work / "docs"))

        assert result.success
        assert result.data == str(work / "docs")
        assert (work / "docs").is_dir()

    def test_existing_directory_fails(self, ops, work):
        (work / "docs").mkdir()

        result = ops.create_directory(str(work / "docs"))

        assert not result.success
        assert result.error == ErrorKind.ALREADY_EXISTS

    def test_missing_parent_fails(self, ops, work):
        result = ops.create_directory(str(work / "a" / "b"))

        assert not result.success
        assert result.error == ErrorKind.NOT_FOUND


class TestCreateFile:
    """Test file creation and the existing-file policies."""

    def test_creates_empty_file(self, ops, work):
        result = ops.create_file(str(work / "x.txt"))

        assert result.success
        assert (work / "x.txt").read_bytes() == b""

    def test_truncates_existing_by_default(self, ops, work):
        (work / "x.txt").write_text("content")

        result = ops.create_file(str(work / "x.txt"))

        assert result.success
        assert (work / "x.txt").read_text() == ""

    def test_keep_policy_leaves_content(self, logger, work):
        ops = FileOperations(logger, ExplorerConfig(on_existing_file="keep"))
        (work / "x.txt").write_text("content")

        result = ops.create_file(str(work / "x.txt"))

        assert result.success
        assert (work / "x.txt").read_text() == "content"

    def test_fail_policy_reports_existing(self, logger, work):
        ops = FileOperations(logger, ExplorerConfig(on_existing_file="fail"))
        (work / "x.txt").write_text("content")

        result = ops.create_file(str(work / "x.txt"))

        assert not result.success
        assert result.error == ErrorKind.ALREADY_EXISTS
        assert (work / "x.txt").read_text() == "content"

    def test_missing_parent_fails(self, ops, work):
        result = ops.create_file(str(work / "nope" / "x.txt"))

        assert not result.success
        assert result.error == ErrorKind.NOT_FOUND


class TestDeleteItem:
    """Test deletion."""

    def test_deletes_file(self, ops, work):
        (work / "x.txt").write_text("x")

        result = ops.delete_item(str(work / "x.txt"))

        assert result.success
        assert not (work / "x.txt").exists()

    def test_deletes_empty_directory(self, ops, work):
        (work / "empty").mkdir()

        result = ops.delete_item(str(work / "empty"))

        assert result.success
        assert not (work / "empty").exists()

    def test_non_empty_directory_fails(self, ops, work):
        (work / "full").mkdir()
        (work / "full" / "f").write_text("f")

        result = ops.delete_item(str(work / "full"))

        assert not result.success
        assert result.error == ErrorKind.DIRECTORY_NOT_EMPTY
        assert (work / "full" / "f").exists()

    def test_missing_item_fails(self, ops, work):
        result = ops.delete_item(str(work / "ghost"))

        assert not result.success
        assert result.error == ErrorKind.NOT_FOUND

    def test_symlink_to_directory_removes_link_only(self, ops, work):
        (work / "target").mkdir()
        (work / "target" / "keep").write_text("k")
        os.symlink(str(work / "target"), str(work / "link"))

        result = ops.delete_item(str(work / "link"))

        assert result.success
        assert not os.path.lexists(str(work / "link"))
        assert (work / "target" / "keep").exists()


class TestCopyFile:
    """Test file copies."""

    def test_copies_content_and_mode(self, ops, work):
        payload = os.urandom(10000)
        (work / "a.bin").write_bytes(payload)
        os.chmod(str(work / "a.bin"), 0o640)

        result = ops.copy_file(str(work / "a.bin"), str(work / "b.bin"))

        assert result.success
        assert result.data == (str(work / "a.bin"), str(work / "b.bin"))
        assert (work / "b.bin").read_bytes() == payload
        assert mode_of(work / "b.bin") == 0o640
        assert (work / "a.bin").read_bytes() == payload

    def test_small_buffer(self, logger, work):
        ops = FileOperations(logger, ExplorerConfig(copy_buffer_size=7))
        (work / "a.txt").write_text("the quick brown fox jumps over the lazy dog")

        result = ops.copy_file(str(work / "a.txt"), str(work / "b.txt"))

        assert result.success
        assert (work / "b.txt").read_text() == "the quick brown fox jumps over the lazy dog"

    def test_overwrites_existing_destination(self, ops, work):
        (work / "a.txt").write_text("new")
        (work / "b.txt").write_text("old and longer")

        result = ops.copy_file(str(work / "a.txt"), str(work / "b.txt"))

        assert result.success
        assert (work / "b.txt").read_text() == "new"

    def test_directory_source_fails(self, ops, work):
        (work / "dir").mkdir()

        result = ops.copy_file(str(work / "dir"), str(work / "copy"))

        assert not result.success
        assert result.error == ErrorKind.NOT_A_FILE
        assert not (work / "copy").exists()

    def test_missing_source_fails(self, ops, work):
        result = ops.copy_file(str(work / "ghost"), str(work / "copy"))

        assert not result.success
        assert result.error == ErrorKind.NOT_A_FILE

    def test_same_file_is_left_intact(self, ops, work):
        (work / "a.txt").write_text("keep me")

        result = ops.copy_file(str(work / "a.txt"), str(work / "a.txt"))

        assert not result.success
        assert result.error == ErrorKind.IO_ERROR
        assert (work / "a.txt").read_text() == "keep me"

    def test_destination_in_missing_directory_fails(self, ops, work):
        (work / "a.txt").write_text("a")

        result = ops.copy_file(str(work / "a.txt"), str(work / "nope" / "b.txt"))

        assert not result.success
        assert result.error == ErrorKind.IO_ERROR

    def test_atomic_copy(self, logger, work):
        ops = FileOperations(logger, ExplorerConfig(atomic_copy=True))
        (work / "a.txt").write_text("atomic")
        os.chmod(str(work / "a.txt"), 0o600)

        result = ops.copy_file(str(work / "a.txt"), str(work / "b.txt"))

        assert result.success
        assert (work / "b.txt").read_text() == "atomic"
        assert mode_of(work / "b.txt") == 0o600
        assert sorted(p.name for p in work.iterdir()) == ["a.txt", "b.txt"]

    def test_atomic_copy_failure_leaves_no_temp_file(self, logger, work):
        ops = FileOperations(logger, ExplorerConfig(atomic_copy=True))
        (work / "a.txt").write_text("atomic")
        (work / "b.txt").mkdir()
        (work / "b.txt" / "inside").write_text("x")

        result = ops.copy_file(str(work / "a.txt"), str(work / "b.txt"))

        assert not result.success
        assert result.error == ErrorKind.IO_ERROR
        assert sorted(p.name for p in work.iterdir()) == ["a.txt", "b.txt"]

    def test_write_error_leaves_partial_destination(self, ops, work, monkeypatch):
        def failing_copy(fsrc, fdst, length=0):
            fdst.write(fsrc.read(3))
            raise OSError(errno.EIO, "Input/output error")

        monkeypatch.setattr(shutil, "copyfileobj", failing_copy)
        (work / "a.txt").write_text("payload")

        result = ops.copy_file(str(work / "a.txt"), str(work / "b.txt"))

        assert result.error == ErrorKind.IO_ERROR
        assert (work / "b.txt").read_text() == "pay"
        assert (work / "a.txt").read_text() == "payload"

    def test_atomic_write_error_keeps_old_destination(self, logger, work, monkeypatch):
        def failing_copy(fsrc, fdst, length=0):
            fdst.write(fsrc.read(3))
            raise OSError(errno.EIO, "Input/output error")

        monkeypatch.setattr(shutil, "copyfileobj", failing_copy)
        ops = FileOperations(logger, ExplorerConfig(atomic_copy=True))
        (work / "a.txt").write_text("payload")
        (work / "b.txt").write_text("old")

        result = ops.copy_file(str(work / "a.txt"), str(work / "b.txt"))

        assert result.error == ErrorKind.IO_ERROR
        assert (work / "b.txt").read_text() == "old"
        assert sorted(p.name for p in work.iterdir()) == ["a.txt", "b.txt"]


class TestMoveItem:
    """Test rename-based moves."""

    def test_moves_file(self, ops, work):
        (work / "a.txt").write_text("payload")

        result = ops.move_item(str(work / "a.txt"), str(work / "b.txt"))

        assert result.success
        assert not (work / "a.txt").exists()
        assert (work / "b.txt").read_text() == "payload"

    def test_moves_directory(self, ops, work):
        (work / "src").mkdir()
        (work / "src" / "f").write_text("f")
        (work / "dest").mkdir()

        result = ops.move_item(str(work / "src"), str(work / "dest" / "src"))

        assert result.success
        assert (work / "dest" / "src" / "f").read_text() == "f"

    def test_missing_source_fails(self, ops, work):
        result = ops.move_item(str(work / "ghost"), str(work / "b.txt"))

        assert not result.success
        assert result.error == ErrorKind.CROSS_DEVICE_OR_NOT_FOUND

    def test_cross_device_fails(self, ops, work, monkeypatch):
        def cross_device(src, dest):
            raise OSError(errno.EXDEV, "Invalid cross-device link", src)

        monkeypatch.setattr(os, "rename", cross_device)
        (work / "a.txt").write_text("payload")

        result = ops.move_item(str(work / "a.txt"), "/elsewhere/a.txt")

        assert result.error == ErrorKind.CROSS_DEVICE_OR_NOT_FOUND
        assert "cross-device" in result.message
        assert (work / "a.txt").read_text() == "payload"


class TestChangePermissions:
    """Test chmod with three octal digits."""

    def test_sets_mode(self, ops, work):
        (work / "script.sh").write_text("#!/bin/sh\n")

        result = ops.change_permissions(str(work / "script.sh"), "755")

        assert result.success
        assert mode_of(work / "script.sh") == 0o755

    @pytest.mark.parametrize("digits", ["75", "7555", "abc", "789", "", "-755", " 755"])
    def test_invalid_format_leaves_mode(self, ops, work, digits):
        (work / "f").write_text("f")
        os.chmod(str(work / "f"), 0o644)

        result = ops.change_permissions(str(work / "f"), digits)

        assert not result.success
        assert result.error == ErrorKind.INVALID_FORMAT
        assert mode_of(work / "f") == 0o644

    def test_missing_target_fails(self, ops, work):
        result = ops.change_permissions(str(work / "ghost"), "644")

        assert not result.success
        assert result.error == ErrorKind.NOT_FOUND


class TestStatEntry:
    """Test single-path metadata."""

    def test_file_entry(self, ops, work):
        (work / "a.txt").write_text("12345")

        result = ops.stat_entry(str(work / "a.txt"))

        assert result.success
        assert result.data.name == "a.txt"
        assert result.data.size == 5
        assert result.data.type_label == "File"

    def test_missing_entry(self, ops, work):
        result = ops.stat_entry(str(work / "ghost"))

        assert not result.success
        assert result.error == ErrorKind.NOT_FOUND


class TestAuditTrail:
    """Test that operations are recorded."""

    def test_success_and_failure_logged(self, ops, logger, work):
        ops.create_directory(str(work / "docs"))
        ops.create_directory(str(work / "docs"))

        recent = logger.get_recent()
        failed = logger.get_failed_actions()

        assert len(recent) == 2
        assert recent[0].status == ActionStatus.FAILED.value
        assert recent[1].status == ActionStatus.EXECUTED.value
        assert len(failed) == 1
        assert failed[0].result.startswith("already_exists")

    def test_action_types(self, ops, logger, work):
        (work / "f").write_text("f")
        ops.change_permissions(str(work / "f"), "600")
        ops.delete_item(str(work / "f"))

        assert len(logger.get_by_action_type(ActionType.PERMISSION)) == 1
        assert len(logger.get_by_action_type(ActionType.DELETE)) == 1
