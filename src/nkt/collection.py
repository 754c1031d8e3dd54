"""Collection handles: notes directories and tracked journals.

A handle composes a collection's backing sequence (the ``infos`` list of
its persisted directory or journal), a content cache and a key index. All
lookups go through the index, and ``append`` is the only way the backing
sequence grows, so the two cannot drift apart.
"""

from __future__ import annotations

import logging
import posixpath
from typing import Generic, Optional, TypeVar, Union

from .content import ContentCache
from .errors import DuplicateKey, NotFound
from .filesystem import FileSystem
from .index import CollectionIndex
from .models import Entry, Info, Item, Note, date_key, utc_now_ms
from .topology import Directory, Journal, dumps_items, loads_items
from .views import DatedItem, SortableView

logger = logging.getLogger(__name__)

DEFAULT_FILE_EXTENSION = ".md"
JOURNAL_FILE_EXTENSION = ".json"

C = TypeVar("C")


class _TrackedCollection(Generic[C]):
    """Shared backing sequence, cache and index handling."""

    def __init__(self, parent: Union[Directory, Journal], fs: FileSystem):
        self._parent = parent
        self.fs = fs
        self.content: ContentCache[C] = ContentCache()
        self.index = CollectionIndex((i.name for i in parent.infos), parent.name)

    @property
    def name(self) -> str:
        return self._parent.name

    @property
    def path(self) -> str:
        return self._parent.path

    @property
    def infos(self) -> tuple[Info, ...]:
        """Read-only snapshot of the backing sequence."""
        return tuple(self._parent.infos)

    def __len__(self) -> int:
        return len(self._parent.infos)

    def __contains__(self, key: object) -> bool:
        return key in self.index

    def _info(self, key: str) -> Optional[Info]:
        position = self.index.lookup(key)
        if position is None:
            return None
        return self._parent.infos[position]

    def _require(self, key: str) -> Info:
        info = self._info(key)
        if info is None:
            raise NotFound(key, self.name)
        return info

    def catalog(self) -> SortableView[DatedItem]:
        """Snapshot of every record paired with its cached content.

        Does not perform any I/O.
        """
        return SortableView(
            DatedItem(
                created=info.created,
                modified=info.modified,
                source=info,
                content=self.content.get(info.name),
            )
            for info in self._parent.infos
        )

    def append(self, info: Info, content: Optional[C] = None) -> Info:
        """Append a record to the backing sequence and index it.

        If ``content`` is given it seeds the cache, so reading it back is a
        cache hit.

        Raises:
            DuplicateKey: If a record with the same name exists. Nothing is
                modified in that case.
            RuntimeError: If the handle has been closed. Nothing is modified.
        """
        if self.content.closed:
            raise RuntimeError(f"Collection '{self.name}' used after close")
        if info.name in self.index:
            raise DuplicateKey(info.name, self.name)

        position = len(self._parent.infos)
        self.index.on_append(info.name, position)
        self._parent.infos.append(info)
        if content is not None:
            self.content.put(info.name, content)

        logger.debug("Appended %s to %s at position %d", info.name, self.name, position)
        return info

    def add_tag(self, key: str, tag_name: str, now: Optional[int] = None) -> bool:
        """Tag a record; returns False if it already has the tag.

        Raises:
            NotFound: If ``key`` is not in the collection.
        """
        info = self._require(key)
        return info.add_tag(tag_name, utc_now_ms() if now is None else now)

    def close(self) -> None:
        """Tear down the content cache."""
        self.content.teardown()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {len(self)} records)"


class NotesDirectory(_TrackedCollection[bytes]):
    """Handle over a directory of named notes."""

    def __init__(self, directory: Directory, fs: FileSystem):
        super().__init__(directory, fs)
        self.directory = directory

    def get(self, name: str) -> Optional[Note]:
        """The note called ``name`` with its content if already loaded.

        Never reads from disk; returns None for unknown names.
        """
        info = self._info(name)
        if info is None:
            return None
        return Note(info=info, content=self.content.get(name))

    def read_content(self, name: str) -> bytes:
        """Return the note's content, reading it from disk on first access.

        Raises:
            NotFound: If no note is called ``name``. No I/O is attempted.
            StorageIOError: If the backing file is missing or unreadable.
        """
        info = self._require(name)
        cached = self.content.get(name)
        if cached is not None:
            return cached

        logger.debug("Cache miss for %s/%s, reading %s", self.name, name, info.path)
        data = self.fs.read_file(info.path)
        self.content.put_move(name, data)
        return data

    def read_note(self, name: str) -> Note:
        """Like ``get`` but guarantees the content is loaded."""
        content = self.read_content(name)
        return Note(info=self._require(name), content=content)

    def child_path(self, name: str) -> str:
        return posixpath.join(self.path, name + DEFAULT_FILE_EXTENSION)

    def new_note(self, name: str, now: Optional[int] = None) -> Note:
        """Create a new, empty note in the directory.

        The file itself is not written until ``write_content`` is called.

        Raises:
            DuplicateKey: If a note called ``name`` exists.
        """
        now = utc_now_ms() if now is None else now
        info = Info(name=name, path=self.child_path(name), created=now, modified=now)
        self.append(info, b"")
        return Note(info=info, content=self.content.get(name))

    def write_content(self, name: str, content: bytes, now: Optional[int] = None) -> Note:
        """Overwrite the note's file and refresh its cached content.

        Raises:
            NotFound: If no note is called ``name``.
            StorageIOError: If the write fails. Cache and metadata are left
                untouched in that case.
        """
        info = self._require(name)
        self.fs.overwrite(info.path, content)
        self.content.put(name, content)
        info.touch(utc_now_ms() if now is None else now)
        return Note(info=info, content=self.content.get(name))


class TrackedJournal(_TrackedCollection[list]):
    """Handle over a journal of dated entries.

    Entry items are kept resident once created or loaded; a day file is only
    read when an entry persisted by an earlier session is first accessed.
    """

    def __init__(self, journal: Journal, fs: FileSystem):
        super().__init__(journal, fs)
        self.journal = journal
        self._dirty: list[str] = []

    def get(self, name: str) -> Optional[Entry]:
        """The entry called ``name`` with its resident items, or None.

        Never reads from disk: items not yet loaded are reported as None.
        """
        info = self._info(name)
        if info is None:
            return None
        return Entry(info=info, items=self.content.get(name))

    def entry_for_date(self, ms: int) -> Optional[Entry]:
        """The entry for the UTC day containing ``ms``, if any."""
        return self.get(date_key(ms))

    def read_items(self, name: str) -> list[Item]:
        """Return the entry's resident items, loading them on first access.

        Raises:
            NotFound: If no entry is called ``name``. No I/O is attempted.
            StorageIOError: If the day file is missing or unreadable.
            ParseError: If the day file is malformed.
        """
        info = self._require(name)
        cached = self.content.get(name)
        if cached is not None:
            return cached

        logger.debug("Loading journal entry %s/%s from %s", self.name, name, info.path)
        items = loads_items(self.fs.read_file(info.path), info.path)
        self.content.put_move(name, items)
        return items

    def items_view(self, name: str) -> SortableView[Item]:
        """Sortable snapshot of an entry's items."""
        return SortableView(self.read_items(name))

    def child_path(self, name: str) -> str:
        return posixpath.join(self.path, name + JOURNAL_FILE_EXTENSION)

    def new_entry(self, name: Optional[str] = None, now: Optional[int] = None) -> Info:
        """Create an entry with no items, named after today's date by default.

        Raises:
            DuplicateKey: If an entry called ``name`` exists.
        """
        now = utc_now_ms() if now is None else now
        name = name or date_key(now)
        info = Info(name=name, path=self.child_path(name), created=now, modified=now)
        return self.append(info, [])

    def append(self, info: Info, content: Optional[list] = None) -> Info:
        """Append an entry record; supplied items are staged for writing."""
        super().append(info, content)
        if content is not None:
            self._mark_dirty(info.name)
        return info

    def add_item(self, name: str, text: str, now: Optional[int] = None) -> Item:
        """Append a log item to the entry called ``name``.

        Raises:
            NotFound: If no entry is called ``name``.
        """
        info = self._require(name)
        now = utc_now_ms() if now is None else now
        items = self.read_items(name)
        item = Item(text=text, created=now, modified=now)
        items.append(item)
        info.touch(now)
        self._mark_dirty(name)
        return item

    def _mark_dirty(self, name: str) -> None:
        if name not in self._dirty:
            self._dirty.append(name)

    def dirty_entries(self) -> list[str]:
        """Names of entries whose items changed during this session."""
        return list(self._dirty)

    def write_changes(self) -> int:
        """Write every changed entry's items to its day file.

        Returns:
            Number of day files written.
        """
        written = 0
        for name in self._dirty:
            info = self._require(name)
            items = self.content.get(name)
            if items is None:
                continue
            self.fs.overwrite(info.path, dumps_items(items).encode("utf-8"))
            written += 1
        self._dirty.clear()
        return written
