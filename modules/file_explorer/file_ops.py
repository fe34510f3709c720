"""
File operations module for the fexplorer core.

Create, delete, copy, move and chmod primitives working on already
resolved paths. Expected failures are returned as OperationResult values
rather than raised.
"""

import os
import re
import shutil
import stat
import tempfile
from typing import Optional

from core.config import ExplorerConfig
from core.logger import AuditLogger, ActionType, ActionStatus

from .types import DirectoryEntry, ErrorKind, OperationResult, classify_os_error

DIRECTORY_MODE = 0o755
FILE_MODE = 0o644
PERMISSION_DIGITS = re.compile(r"[0-7]{3}")


class FileOperations:
    """Filesystem mutations with audit logging."""

    def __init__(self, logger: AuditLogger, config: Optional[ExplorerConfig] = None):
        """
        Initialize FileOperations.

        Args:
            logger: Audit logger instance
            config: Explorer settings (defaults when omitted)
        """
        self.logger = logger
        self.config = config or ExplorerConfig()

    def _succeeded(self, action_type: ActionType, description: str, target: str,
                   data=None, **metadata) -> OperationResult:
        self.logger.log_action(
            action_type=action_type,
            description=description,
            target=target,
            status=ActionStatus.EXECUTED,
            metadata=metadata or None
        )
        return OperationResult.ok(description, data=data)

    def _failed(self, action_type: ActionType, description: str, target: str,
                error: ErrorKind, detail: str) -> OperationResult:
        message = f"{description}: {detail}"
        self.logger.log_action(
            action_type=action_type,
            description=description,
            target=target,
            status=ActionStatus.FAILED,
            result=f"{error.value}: {detail}"
        )
        return OperationResult.fail(error, message)

    def create_directory(self, path: str) -> OperationResult:
        """
        Create a directory with mode 0755 (before umask).

        Args:
            path: Resolved path of the new directory

        Returns:
            OperationResult with the path as data
        """
        description = f"Create directory {path}"
        try:
            os.mkdir(path, DIRECTORY_MODE)
        except OSError as e:
            return self._failed(ActionType.WRITE, description, path,
                                classify_os_error(e), e.strerror or str(e))
        return self._succeeded(ActionType.WRITE, f"Directory created: {path}", path, data=path)

    def create_file(self, path: str) -> OperationResult:
        """
        Create an empty file with mode 0644 (before umask).

        What happens to an existing file depends on ``on_existing_file``:
        ``truncate`` empties it, ``keep`` leaves it untouched and ``fail``
        reports ALREADY_EXISTS.

        Args:
            path: Resolved path of the new file

        Returns:
            OperationResult with the path as data
        """
        description = f"Create file {path}"
        flags = os.O_CREAT | os.O_WRONLY
        policy = self.config.on_existing_file
        if policy == "truncate":
            flags |= os.O_TRUNC
        elif policy == "fail":
            flags |= os.O_EXCL

        try:
            fd = os.open(path, flags, FILE_MODE)
        except OSError as e:
            return self._failed(ActionType.WRITE, description, path,
                                classify_os_error(e), e.strerror or str(e))
        os.close(fd)
        return self._succeeded(ActionType.WRITE, f"File created: {path}", path,
                               data=path, policy=policy)

    def delete_item(self, path: str) -> OperationResult:
        """
        Delete a file or an empty directory.

        Args:
            path: Resolved path to delete

        Returns:
            OperationResult with the path as data
        """
        description = f"Delete {path}"
        try:
            st = os.lstat(path)
        except OSError as e:
            return self._failed(ActionType.DELETE, description, path,
                                classify_os_error(e, ErrorKind.NOT_FOUND), e.strerror or "item not found")

        is_dir = stat.S_ISDIR(st.st_mode)
        try:
            if is_dir:
                os.rmdir(path)
            else:
                os.unlink(path)
        except OSError as e:
            kind = classify_os_error(e)
            if is_dir and kind == ErrorKind.ALREADY_EXISTS:
                # some platforms report a non-empty directory as EEXIST
                kind = ErrorKind.DIRECTORY_NOT_EMPTY
            return self._failed(ActionType.DELETE, description, path, kind, e.strerror or str(e))

        label = "Directory" if is_dir else "File"
        return self._succeeded(ActionType.DELETE, f"{label} deleted: {path}", path, data=path)

    def copy_file(self, src: str, dest: str) -> OperationResult:
        """
        Copy a regular file byte for byte and apply its permission bits.

        The copy is not atomic unless ``atomic_copy`` is enabled: a failure
        part way through leaves whatever was written at the destination.

        Args:
            src: Resolved source path
            dest: Resolved destination path

        Returns:
            OperationResult with ``(src, dest)`` as data
        """
        description = f"Copy {src} to {dest}"
        try:
            src_stat = os.stat(src)
        except OSError:
            return self._failed(ActionType.WRITE, description, dest,
                                ErrorKind.NOT_A_FILE, "source is not a file or doesn't exist")
        if stat.S_ISDIR(src_stat.st_mode):
            return self._failed(ActionType.WRITE, description, dest,
                                ErrorKind.NOT_A_FILE, "source is not a file or doesn't exist")

        try:
            if os.path.exists(dest) and os.path.samefile(src, dest):
                return self._failed(ActionType.WRITE, description, dest,
                                    ErrorKind.IO_ERROR, "source and destination are the same file")
        except OSError as e:
            return self._failed(ActionType.WRITE, description, dest,
                                ErrorKind.IO_ERROR, e.strerror or str(e))

        try:
            if self.config.atomic_copy:
                self._copy_atomic(src, dest)
            else:
                self._copy_contents(src, dest)
            os.chmod(dest, stat.S_IMODE(src_stat.st_mode))
        except OSError as e:
            kind = ErrorKind.PERMISSION_DENIED if isinstance(e, PermissionError) else ErrorKind.IO_ERROR
            return self._failed(ActionType.WRITE, description, dest, kind, e.strerror or str(e))

        return self._succeeded(ActionType.WRITE, f"File copied: {src} -> {dest}", dest,
                               data=(src, dest), source=src, size=src_stat.st_size)

    def _copy_contents(self, src: str, dest: str) -> None:
        with open(src, "rb") as fsrc:
            fd = os.open(dest, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
            with open(fd, "wb") as fdst:
                shutil.copyfileobj(fsrc, fdst, self.config.copy_buffer_size)

    def _copy_atomic(self, src: str, dest: str) -> None:
        dest_dir = os.path.dirname(dest) or "."
        fd, tmp_path = tempfile.mkstemp(prefix=".fexplorer-", dir=dest_dir)
        try:
            with open(fd, "wb") as fdst, open(src, "rb") as fsrc:
                shutil.copyfileobj(fsrc, fdst, self.config.copy_buffer_size)
            os.replace(tmp_path, dest)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise

    def move_item(self, src: str, dest: str) -> OperationResult:
        """
        Move or rename with a single rename call.

        There is no copy-and-delete fallback, so moves across filesystems
        fail with CROSS_DEVICE_OR_NOT_FOUND.

        Args:
            src: Resolved source path
            dest: Resolved destination path

        Returns:
            OperationResult with ``(src, dest)`` as data
        """
        description = f"Move {src} to {dest}"
        try:
            os.rename(src, dest)
        except OSError as e:
            kind = classify_os_error(e, ErrorKind.CROSS_DEVICE_OR_NOT_FOUND)
            if kind == ErrorKind.NOT_FOUND:
                kind = ErrorKind.CROSS_DEVICE_OR_NOT_FOUND
            return self._failed(ActionType.WRITE, description, dest, kind, e.strerror or str(e))
        return self._succeeded(ActionType.WRITE, f"Moved/Renamed: {src} -> {dest}", dest,
                               data=(src, dest), source=src)

    def change_permissions(self, path: str, digits: str) -> OperationResult:
        """
        Set permission bits from three octal digits such as ``755``.

        Args:
            path: Resolved path
            digits: Exactly three characters, each 0-7

        Returns:
            OperationResult with the path as data
        """
        description = f"Change permissions of {path} to {digits}"
        if not PERMISSION_DIGITS.fullmatch(digits or ""):
            return self._failed(ActionType.PERMISSION, description, path, ErrorKind.INVALID_FORMAT,
                                "use 3 octal digits, e.g. 755")
        try:
            os.chmod(path, int(digits, 8))
        except OSError as e:
            return self._failed(ActionType.PERMISSION, description, path,
                                classify_os_error(e), e.strerror or str(e))
        return self._succeeded(ActionType.PERMISSION, f"Permissions changed: {path} -> {digits}",
                               path, data=path, mode=digits)

    def stat_entry(self, path: str) -> OperationResult:
        """
        Get metadata for a single path.

        Args:
            path: Resolved path

        Returns:
            OperationResult with a DirectoryEntry as data
        """
        try:
            st = os.stat(path)
        except OSError as e:
            kind = classify_os_error(e, ErrorKind.NOT_FOUND)
            return OperationResult.fail(kind, f"Cannot read {path}: {e.strerror or e}")
        name = os.path.basename(path.rstrip("/")) or path
        return OperationResult.ok(f"Information for {path}", data=DirectoryEntry.from_stat(name, path, st))
