"""Filesystem accessor rooted at the storage directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from .errors import StorageIOError

logger = logging.getLogger(__name__)

DIARY_DIRECTORY = "log"
NOTES_DIRECTORY = "notes"

# Upper bound on a single read; content files are small text documents
MAXIMUM_BYTES_READ = 16384 * 64


class FileSystem:
    """Reads and writes files by path relative to a root directory."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).expanduser()

    def abs_path(self, rel_path: str) -> Path:
        """Turn a path relative to the root into an absolute path."""
        return self.root / rel_path

    def read_file(self, rel_path: str) -> bytes:
        """Read the full contents of a file.

        Raises:
            StorageIOError: If the file is missing, unreadable or too large.
        """
        path = self.abs_path(rel_path)
        try:
            with open(path, "rb") as f:
                data = f.read(MAXIMUM_BYTES_READ + 1)
        except OSError as e:
            raise StorageIOError(f"Cannot read {rel_path}: {e.strerror or e}", rel_path) from e

        if len(data) > MAXIMUM_BYTES_READ:
            raise StorageIOError(
                f"File too large: {rel_path} exceeds {MAXIMUM_BYTES_READ} bytes",
                rel_path,
            )
        logger.debug("Read %d bytes from %s", len(data), rel_path)
        return data

    def file_exists(self, rel_path: str) -> bool:
        return self.abs_path(rel_path).is_file()

    def overwrite(self, rel_path: str, data: bytes) -> None:
        """Replace the file's contents, creating it (and parents) if needed.

        Raises:
            StorageIOError: If the write fails.
        """
        path = self.abs_path(rel_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageIOError(f"Cannot write {rel_path}: {e.strerror or e}", rel_path) from e
        logger.debug("Wrote %d bytes to %s", len(data), rel_path)

    def setup_default_directory(self) -> None:
        """Create the root with its notes and diary sub directories."""
        for name in (DIARY_DIRECTORY, NOTES_DIRECTORY):
            try:
                (self.root / name).mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageIOError(f"Cannot create {name}: {e.strerror or e}", name) from e
