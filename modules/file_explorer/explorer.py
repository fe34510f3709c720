"""
Explorer - the cursor-owning facade over the file explorer primitives.
"""

import os
import posixpath
import stat
from typing import Optional, Tuple

from core.config import ExplorerConfig
from core.logger import AuditLogger, ActionType, ActionStatus

from . import scanner
from .file_ops import FileOperations
from .resolver import ROOT, resolve
from .types import ErrorKind, OperationResult, classify_os_error


def initial_path() -> str:
    """Process working directory, or root when it cannot be determined."""
    try:
        return os.getcwd()
    except OSError:
        return ROOT


def check_directory(path: str) -> Optional[Tuple[ErrorKind, str]]:
    """
    Check that a path can become the cursor.

    Returns:
        None when the path is an existing, enterable directory, otherwise
        the error kind and a short detail
    """
    try:
        st = os.stat(path)
    except OSError as e:
        return classify_os_error(e, ErrorKind.NOT_FOUND), e.strerror or str(e)
    if not stat.S_ISDIR(st.st_mode):
        return ErrorKind.NOT_A_DIRECTORY, "not a directory"
    if not os.access(path, os.X_OK):
        return ErrorKind.PERMISSION_DENIED, "permission denied"
    return None


class Explorer:
    """
    Browse and manipulate a filesystem subtree from a single cursor.

    The cursor is the explorer's own notion of the current directory. It is
    never synced with the process working directory after construction,
    and only ``change_directory`` moves it.
    """

    def __init__(
        self,
        start_path: Optional[str] = None,
        config: Optional[ExplorerConfig] = None,
        logger: Optional[AuditLogger] = None
    ):
        """
        Initialize the explorer.

        Args:
            start_path: Initial cursor; falls back to config, then the
                process working directory. A start path that is not an
                enterable directory is reported in ``start_error`` and the
                process working directory is used instead
            config: Explorer settings
            logger: Audit logger; built from the config when omitted
        """
        self.config = config or ExplorerConfig()
        if logger is None:
            logger = AuditLogger(self.config.audit.log_path if self.config.audit.enabled else None)
        self.logger = logger
        self.ops = FileOperations(logger, self.config)

        self.start_error: Optional[OperationResult] = None
        self._cursor = initial_path()

        start = start_path or self.config.start_path
        if start:
            target = posixpath.normpath(os.path.abspath(os.path.expanduser(start)))
            error = check_directory(target)
            if error is None:
                self._cursor = target
            else:
                kind, detail = error
                self.start_error = OperationResult.fail(kind, f"Cannot start in {target}: {detail}")

    def get_current_path(self) -> str:
        return self._cursor

    def resolve(self, name: str) -> str:
        return resolve(self._cursor, name)

    # Listing

    def _scan_cursor(self) -> OperationResult:
        try:
            entries = scanner.list_directory(self._cursor, placeholders=self.config.show_unreadable)
        except OSError as e:
            return OperationResult.fail(
                classify_os_error(e),
                f"Cannot open directory {self._cursor}: {e.strerror or e}"
            )
        return OperationResult.ok(f"Contents of {self._cursor}", data=entries)

    def list_simple(self) -> OperationResult:
        """
        List the cursor directory: directories first, then files.

        Each group is sorted by name.
        """
        result = self._scan_cursor()
        if not result.success:
            return result
        directories = sorted((e for e in result.data if e.is_dir), key=lambda e: e.name)
        files = sorted((e for e in result.data if not e.is_dir), key=lambda e: e.name)
        result.data = directories + files
        return result

    def list_detailed(self) -> OperationResult:
        """List the cursor directory with full metadata, in filesystem order."""
        return self._scan_cursor()

    def list_files(self, detailed: bool = False) -> OperationResult:
        return self.list_detailed() if detailed else self.list_simple()

    # Navigation

    def change_directory(self, name: str) -> OperationResult:
        """
        Move the cursor.

        The target must exist, be a directory and be enterable. The cursor
        is left unchanged on failure.

        Args:
            name: Directory name, absolute path or ``..``

        Returns:
            OperationResult with the new cursor as data
        """
        target = posixpath.normpath(self.resolve(name))
        description = f"Change directory to {target}"

        error = check_directory(target)
        if error is not None:
            kind, detail = error
            self.logger.log_action(
                action_type=ActionType.NAVIGATE,
                description=description,
                target=target,
                status=ActionStatus.FAILED,
                result=f"{kind.value}: {detail}"
            )
            return OperationResult.fail(kind, f"Cannot change to directory {target}: {detail}")

        previous = self._cursor
        self._cursor = target
        self.logger.log_action(
            action_type=ActionType.NAVIGATE,
            description=description,
            target=target,
            metadata={"previous": previous}
        )
        return OperationResult.ok(f"Changed to: {target}", data=target)

    # Mutations

    def create_directory(self, name: str) -> OperationResult:
        return self.ops.create_directory(self.resolve(name))

    def create_file(self, name: str) -> OperationResult:
        return self.ops.create_file(self.resolve(name))

    def delete_item(self, name: str) -> OperationResult:
        return self.ops.delete_item(self.resolve(name))

    def copy_file(self, src: str, dest: str) -> OperationResult:
        return self.ops.copy_file(self.resolve(src), self.resolve(dest))

    def move_item(self, src: str, dest: str) -> OperationResult:
        return self.ops.move_item(self.resolve(src), self.resolve(dest))

    def change_permissions(self, name: str, mode: str) -> OperationResult:
        return self.ops.change_permissions(self.resolve(name), mode)

    # Search and information

    def search_files(self, pattern: str) -> OperationResult:
        """
        Search below the cursor for names containing ``pattern``.

        Returns:
            OperationResult with the matching full paths as data
        """
        matches = scanner.search(self._cursor, pattern)
        return OperationResult.ok(
            f"Found {len(matches)} result(s) for '{pattern}' in {self._cursor}",
            data=matches
        )

    def view_info(self, name: str) -> OperationResult:
        return self.ops.stat_entry(self.resolve(name))
