"""Key to position index over a collection's backing sequence.

The backing sequence (the ``infos`` list of a directory or journal) remains
the source of truth; the index only answers "where is this key".
"""

from __future__ import annotations

from typing import Iterable, Optional

from .errors import DuplicateKey


class CollectionIndex:
    """Maps record names to their position in the backing sequence."""

    def __init__(self, keys: Iterable[str] = (), collection: Optional[str] = None):
        """Build the index from a backing sequence snapshot.

        Args:
            keys: Record keys in backing-sequence order
            collection: Collection name, used in error messages

        Raises:
            DuplicateKey: If the snapshot contains the same key twice
        """
        self.collection = collection
        self._positions: dict[str, int] = {}
        for position, key in enumerate(keys):
            if key in self._positions:
                raise DuplicateKey(key, collection)
            self._positions[key] = position

    def lookup(self, key: str) -> Optional[int]:
        """Return the position of ``key``, or None if not indexed."""
        return self._positions.get(key)

    def on_append(self, key: str, position: int) -> None:
        """Record a key appended at the end of the backing sequence.

        Only the owning collection's append path calls this, in the same
        call that grows the backing sequence.
        """
        if key in self._positions:
            raise DuplicateKey(key, self.collection)
        if position != len(self._positions):
            raise ValueError(
                f"Index out of step: appended at {position}, "
                f"expected {len(self._positions)}"
            )
        self._positions[key] = position

    def keys(self) -> list[str]:
        return list(self._positions)

    def __contains__(self, key: object) -> bool:
        return key in self._positions

    def __len__(self) -> int:
        return len(self._positions)
