"""
Shared result and entry types for the file explorer.
"""

import errno
import os
import stat
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .metadata import (
    format_permissions,
    format_size,
    lookup_group,
    lookup_owner,
    octal_mode,
)


class ErrorKind(Enum):
    """Failure categories reported by explorer operations."""
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    PERMISSION_DENIED = "permission_denied"
    NOT_A_FILE = "not_a_file"
    NOT_A_DIRECTORY = "not_a_directory"
    DIRECTORY_NOT_EMPTY = "directory_not_empty"
    INVALID_FORMAT = "invalid_format"
    CROSS_DEVICE_OR_NOT_FOUND = "cross_device_or_not_found"
    IO_ERROR = "io_error"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()


_ERRNO_KINDS = {
    errno.ENOENT: ErrorKind.NOT_FOUND,
    errno.EEXIST: ErrorKind.ALREADY_EXISTS,
    errno.EACCES: ErrorKind.PERMISSION_DENIED,
    errno.EPERM: ErrorKind.PERMISSION_DENIED,
    errno.EISDIR: ErrorKind.NOT_A_FILE,
    errno.ENOTDIR: ErrorKind.NOT_A_DIRECTORY,
    errno.ENOTEMPTY: ErrorKind.DIRECTORY_NOT_EMPTY,
    errno.EXDEV: ErrorKind.CROSS_DEVICE_OR_NOT_FOUND,
}


def classify_os_error(exc: OSError, default: ErrorKind = ErrorKind.IO_ERROR) -> ErrorKind:
    """Map an OSError to the ErrorKind it represents."""
    return _ERRNO_KINDS.get(exc.errno, default)


@dataclass
class OperationResult:
    """Outcome of an explorer operation."""
    success: bool
    message: str
    error: Optional[ErrorKind] = None
    data: Optional[Any] = None

    @classmethod
    def ok(cls, message: str, data: Any = None) -> "OperationResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, error: ErrorKind, message: str) -> "OperationResult":
        return cls(success=False, message=message, error=error)


@dataclass
class DirectoryEntry:
    """Metadata snapshot for one file or directory."""
    name: str
    path: str
    is_dir: bool
    size: int = 0
    mode: int = 0
    uid: int = -1
    gid: int = -1
    owner: str = "?"
    group: str = "?"
    modified: float = 0.0
    accessed: float = 0.0
    changed: float = 0.0
    error: Optional[str] = None

    @classmethod
    def from_stat(cls, name: str, path: str, st: os.stat_result) -> "DirectoryEntry":
        """Build an entry from a stat result, resolving owner and group names."""
        return cls(
            name=name,
            path=path,
            is_dir=stat.S_ISDIR(st.st_mode),
            size=st.st_size,
            mode=st.st_mode,
            uid=st.st_uid,
            gid=st.st_gid,
            owner=lookup_owner(st.st_uid),
            group=lookup_group(st.st_gid),
            modified=st.st_mtime,
            accessed=st.st_atime,
            changed=st.st_ctime,
        )

    @classmethod
    def unreadable(cls, name: str, path: str, reason: str) -> "DirectoryEntry":
        """Placeholder for a child whose metadata could not be read."""
        return cls(name=name, path=path, is_dir=False, error=reason)

    @property
    def permissions(self) -> str:
        """``ls``-style permission string, e.g. ``drwxr-xr-x``."""
        if self.error:
            return "?" * 10
        return format_permissions(self.mode)

    @property
    def octal(self) -> str:
        return octal_mode(self.mode)

    @property
    def size_display(self) -> str:
        if self.is_dir:
            return "<DIR>"
        if self.error:
            return "?"
        return format_size(self.size)

    @property
    def type_label(self) -> str:
        return "Directory" if self.is_dir else "File"

    @property
    def is_executable(self) -> bool:
        return not self.is_dir and bool(self.mode & 0o100)
