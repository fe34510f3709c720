"""
File explorer module for fexplorer.

Provides cursor-based directory navigation, listing, search and file
operations that report failures as values.
"""

from .explorer import Explorer
from .file_ops import FileOperations
from .types import DirectoryEntry, ErrorKind, OperationResult

__all__ = ['Explorer', 'FileOperations', 'DirectoryEntry', 'ErrorKind', 'OperationResult']
