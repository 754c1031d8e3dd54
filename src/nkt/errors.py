"""Exceptions raised by the topology cache and index layer."""

from __future__ import annotations

from typing import Optional


class NktError(Exception):
    """Base exception for nkt operations."""
    pass


class NotFound(NktError):
    """Raised when a key is absent from a collection's index."""

    def __init__(self, key: str, collection: Optional[str] = None):
        self.key = key
        self.collection = collection
        where = f" in '{collection}'" if collection else ""
        super().__init__(f"No such item{where}: {key}")


class DuplicateKey(NktError):
    """Raised when appending a record whose key already exists."""

    def __init__(self, key: str, collection: Optional[str] = None):
        self.key = key
        self.collection = collection
        where = f" in '{collection}'" if collection else ""
        super().__init__(f"Duplicate key{where}: {key}")


class StorageIOError(NktError):
    """Raised when the underlying filesystem read or write fails.

    The originating ``OSError`` (if any) is chained as ``__cause__``.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class ParseError(NktError):
    """Raised when persisted metadata or journal data is malformed."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class UnknownCollection(NktError):
    """Raised when a directory or journal name is not in the topology."""
    pass
