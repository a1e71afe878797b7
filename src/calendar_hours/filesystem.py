"""
FileSystem abstraction for Calendar Hours.

PURPOSE: Injectable file system interface for testability.
AI CONTEXT: Lets storage tests run against an in-memory file system.

DESIGN:
- Protocol defines the interface
- RealFileSystem uses actual os operations
- MockFileSystem in tests/conftest.py stores data in memory for tests

USAGE:
    # Production
    storage = StorageManager(filesystem=RealFileSystem())

    # Tests (MockFileSystem from conftest.py)
    storage = StorageManager(storage_dir="/test", filesystem=mock_fs)
"""

from __future__ import annotations

import os
from typing import Protocol

__all__ = ["FileSystem", "RealFileSystem"]


class FileSystem(Protocol):
    """
    Protocol for the file operations used by StorageManager.

    All paths are strings. Implementations include RealFileSystem for
    production and MockFileSystem for tests.
    """

    def exists(self, path: str) -> bool:
        """
        Check if path exists (file or directory).

        Business context: Storage checks for an existing config file before
        writing defaults, so a user's settings are never overwritten.
        """
        ...

    def is_file(self, path: str) -> bool:
        """Check if path is a regular file."""
        ...

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        """
        Create directory and all parent directories.

        Raises:
            OSError: If directory exists and exist_ok is False.
        """
        ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """
        Read file contents as text.

        Raises:
            FileNotFoundError: If file doesn't exist.
        """
        ...

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """
        Write text to file, replacing existing content.

        Raises:
            PermissionError: If file is read-only.
        """
        ...


class RealFileSystem:
    """
    Real file system implementation using the os module.

    Business context: Used in production to keep config and event
    snapshots on disk. Each method delegates directly to os or open().
    """

    def exists(self, path: str) -> bool:  # pragma: no cover
        return os.path.exists(path)

    def is_file(self, path: str) -> bool:  # pragma: no cover
        return os.path.isfile(path)

    def makedirs(self, path: str, exist_ok: bool = False) -> None:  # pragma: no cover
        os.makedirs(path, exist_ok=exist_ok)

    def read_text(self, path: str, encoding: str = "utf-8") -> str:  # pragma: no cover
        with open(path, encoding=encoding) as f:
            return f.read()

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:  # pragma: no cover
        """Write text, creating the parent directory if needed."""
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, "w", encoding=encoding) as f:
            f.write(content)
