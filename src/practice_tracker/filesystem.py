"""
File access seam for the JSON data files.

PURPOSE: Keep StorageManager free of direct disk access.
AI CONTEXT: Storage tests swap in tests/conftest.py::MockFileSystem.

DESIGN:
- FileSystem is a structural Protocol: anything with these six methods works
- RealFileSystem writes through a temporary sibling file and os.replace, so
  sessions.json is either the old list or the new one, never half written

USAGE:
    storage = StorageManager(filesystem=RealFileSystem())
    storage = StorageManager(storage_dir="/data", filesystem=mock_fs)
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Protocol

__all__ = ["FileSystem", "RealFileSystem"]


class FileSystem(Protocol):
    """
    Operations StorageManager performs on its data directory.

    Paths are plain strings. Query methods never raise; read and write
    methods raise the usual OSError subclasses, which StorageManager logs
    and absorbs.
    """

    def exists(self, path: str) -> bool: ...

    def is_file(self, path: str) -> bool: ...

    def is_dir(self, path: str) -> bool: ...

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        """
        Create a directory and its parents.

        Raises:
            FileExistsError: If the directory exists and exist_ok is False.
        """
        ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """
        Return the whole file as text.

        Raises:
            FileNotFoundError: If the data file has not been created yet.
        """
        ...

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """
        Replace the file's content.

        Business context: Called after every logged session, import and
        timer change, so a failure here must leave the previous content
        readable.

        Raises:
            PermissionError: If the file or its directory is read-only.
        """
        ...


class RealFileSystem:
    """Disk-backed FileSystem built on pathlib."""

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def is_file(self, path: str) -> bool:
        return Path(path).is_file()

    def is_dir(self, path: str) -> bool:
        return Path(path).is_dir()

    def makedirs(self, path: str, exist_ok: bool = False) -> None:
        Path(path).mkdir(parents=True, exist_ok=exist_ok)

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        return Path(path).read_text(encoding=encoding)

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """
        Write content atomically.

        The text goes to a temporary file in the target's directory, which
        then replaces the target in a single rename.

        Raises:
            PermissionError: If the directory is not writable.
            FileNotFoundError: If the parent directory does not exist.
        """
        target = Path(path)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=encoding,
            dir=target.parent,
            prefix=f".{target.name}.",
            suffix=".tmp",
            delete=False,
        ) as temp_file:
            temp_file.write(content)
        try:
            os.replace(temp_file.name, target)
        except OSError:
            Path(temp_file.name).unlink(missing_ok=True)
            raise
