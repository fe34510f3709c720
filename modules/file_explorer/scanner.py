"""
Directory listing and recursive substring search.
"""

import os
import stat
from typing import List

from .types import DirectoryEntry


def list_directory(path: str, placeholders: bool = False) -> List[DirectoryEntry]:
    """
    List the direct children of a directory.

    Entries come back in the order the filesystem reports them. ``.`` and
    ``..`` are never included.

    Args:
        path: Directory to list
        placeholders: If True, children whose metadata cannot be read are
            returned as placeholder entries instead of being skipped

    Returns:
        List of DirectoryEntry objects

    Raises:
        OSError: If the directory itself cannot be opened
    """
    entries = []
    with os.scandir(path) as it:
        for child in it:
            try:
                st = child.stat()
            except OSError as e:
                if placeholders:
                    entries.append(DirectoryEntry.unreadable(child.name, child.path, e.strerror or str(e)))
                continue
            entries.append(DirectoryEntry.from_stat(child.name, child.path, st))
    return entries


def _is_directory(child: os.DirEntry) -> bool:
    # DirEntry.is_dir uses the d_type hint when present and lstat otherwise
    try:
        return child.is_dir(follow_symlinks=False)
    except OSError:
        try:
            return stat.S_ISDIR(os.lstat(child.path).st_mode)
        except OSError:
            return False


def search(root: str, pattern: str) -> List[str]:
    """
    Recursively collect paths whose final component contains ``pattern``.

    The walk is depth-first and pre-order: a matching child is recorded,
    then, if it is a directory, its subtree is searched before the next
    sibling. Directories that cannot be opened are skipped. Symbolic links
    to directories are not followed.

    Args:
        root: Directory to start from
        pattern: Literal, case-sensitive substring

    Returns:
        Matching full paths in traversal order
    """
    results: List[str] = []
    _search_into(root, pattern, results)
    return results


def _search_into(path: str, pattern: str, results: List[str]) -> None:
    try:
        with os.scandir(path) as it:
            children = [(child.name, _is_directory(child)) for child in it]
    except OSError:
        return

    base = path.rstrip("/")
    for name, is_dir in children:
        full_path = f"{base}/{name}"
        if pattern in name:
            results.append(full_path)
        if is_dir:
            _search_into(full_path, pattern, results)
