"""Sortable, read-only views over catalog snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Iterable, Iterator, Optional, Protocol, TypeVar, overload

from .models import Ordering


class Dated(Protocol):
    created: int
    modified: int


T = TypeVar("T", bound=Dated)


@dataclass(frozen=True)
class DatedItem:
    """One catalog entry captured in a view.

    ``source`` references the live record (not a copy); ``content`` is
    whatever was cached for it when the view was taken, or None.
    """
    created: int
    modified: int
    source: Any
    content: Optional[Any] = None

    @property
    def name(self) -> str:
        return self.source.name


def _sort_key(ordering: Ordering):
    if ordering is Ordering.CREATED:
        return lambda item: item.created
    if ordering is Ordering.MODIFIED:
        return lambda item: item.modified
    raise ValueError(f"Unknown ordering: {ordering!r}")


class SortableView(Generic[T]):
    """An ordered, re-orderable snapshot of dated items.

    Sorting is stable: items with equal timestamps keep the relative order
    they had before the sort, so insertion order survives for entries logged
    within the same millisecond.
    """

    def __init__(self, items: Iterable[T]):
        self._items: list[T] = list(items)

    def sort_by(self, ordering: Ordering) -> "SortableView[T]":
        """Sort in place by creation or modification time."""
        # list.sort is guaranteed stable
        self._items.sort(key=_sort_key(ordering))
        return self

    def reverse(self) -> "SortableView[T]":
        """Flip the current order without re-sorting."""
        self._items.reverse()
        return self

    def head(self, n: int) -> list[T]:
        """First ``n`` items of the current arrangement."""
        return self._items[:max(n, 0)]

    @property
    def items(self) -> tuple[T, ...]:
        return tuple(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(tuple(self._items))

    def __len__(self) -> int:
        return len(self._items)

    @overload
    def __getitem__(self, i: int) -> T: ...

    @overload
    def __getitem__(self, i: slice) -> tuple[T, ...]: ...

    def __getitem__(self, i):
        if isinstance(i, slice):
            return tuple(self._items[i])
        return self._items[i]

    def __repr__(self) -> str:
        return f"SortableView({len(self._items)} items)"
