"""Content cache for lazily loaded note and journal content.

The cache behaves like an arena: every value that is stored stays owned by
the cache until ``teardown`` releases all of them at once. Replacing a key
only changes which value the key resolves to.
"""

from __future__ import annotations

import copy
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ContentCache(Generic[T]):
    """Append-only, key addressed store of loaded content."""

    def __init__(self) -> None:
        self._map: dict[str, T] = {}
        self._arena: list[T] = []
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Content cache used after teardown")

    def put(self, key: str, content: T) -> None:
        """Store an owned copy of ``content`` under ``key``."""
        self.put_move(key, _owned_copy(content))

    def put_move(self, key: str, content: T) -> None:
        """Store ``content`` under ``key`` without copying it.

        The caller hands ownership to the cache and must not mutate the value
        afterwards.
        """
        self._check_open()
        self._arena.append(content)
        self._map[key] = content

    def get(self, key: str) -> Optional[T]:
        """Return cached content for ``key``, or None if not loaded."""
        self._check_open()
        return self._map.get(key)

    def teardown(self) -> None:
        """Release all cached content in one step."""
        self._map.clear()
        self._arena.clear()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __contains__(self, key: object) -> bool:
        return key in self._map

    def __len__(self) -> int:
        return len(self._map)


def _owned_copy(content):
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return list(content)
    return copy.copy(content)
