"""Store - loads the topology and hands out one handle per collection."""

from __future__ import annotations

import logging
import posixpath
from typing import Optional

from .collection import NotesDirectory, TrackedJournal
from .config import StoreConfig
from .errors import DuplicateKey, UnknownCollection
from .filesystem import FileSystem
from .topology import Directory, Journal, Topology

logger = logging.getLogger(__name__)


class Store:
    """Owns the topology, the filesystem accessor and the collection handles.

    Each directory and journal in the topology gets exactly one handle for
    the lifetime of the store, and that handle is the only mutator of the
    collection's records.
    """

    def __init__(self, config: StoreConfig, fs: FileSystem, topology: Topology):
        self.config = config
        self.fs = fs
        self.topology = topology
        self._directories: dict[str, NotesDirectory] = {}
        self._journals: dict[str, TrackedJournal] = {}
        for directory in topology.directories:
            self._directories[directory.name] = NotesDirectory(directory, fs)
        for journal in topology.journals:
            self._journals[journal.name] = TrackedJournal(journal, fs)

    @classmethod
    def open(cls, config: StoreConfig) -> "Store":
        """Open the store at ``config.root``, creating an empty topology if none.

        Raises:
            ParseError: If the persisted topology is malformed.
            StorageIOError: If it cannot be read.
        """
        fs = FileSystem(config.root)
        name = config.topology_filename
        if fs.file_exists(name):
            topology = Topology.loads(fs.read_file(name), name)
        else:
            logger.debug("No topology at %s, starting empty", fs.abs_path(name))
            topology = Topology.new(editor=config.editor, pager=config.pager)
        return cls(config, fs, topology)

    def initialize(self) -> None:
        """Create the storage layout and write the current topology."""
        self.fs.setup_default_directory()
        self.write_changes()

    @property
    def editor(self) -> str:
        return self.config.editor or self.topology.editor

    @property
    def pager(self) -> str:
        return self.config.pager or self.topology.pager

    def directory(self, name: str) -> NotesDirectory:
        try:
            return self._directories[name]
        except KeyError:
            raise UnknownCollection(f"No such directory: {name}") from None

    def journal(self, name: str) -> TrackedJournal:
        try:
            return self._journals[name]
        except KeyError:
            raise UnknownCollection(f"No such journal: {name}") from None

    def directories(self) -> list[NotesDirectory]:
        return list(self._directories.values())

    def journals(self) -> list[TrackedJournal]:
        return list(self._journals.values())

    def add_directory(self, name: str, path: Optional[str] = None) -> NotesDirectory:
        """Register a new, empty notes directory.

        Raises:
            DuplicateKey: If a directory called ``name`` exists.
        """
        if name in self._directories:
            raise DuplicateKey(name, "directories")
        directory = Directory(name=name, path=path or posixpath.join(self.config.notes_dir, name))
        self.topology.directories.append(directory)
        handle = NotesDirectory(directory, self.fs)
        self._directories[name] = handle
        logger.debug("Added directory %s at %s", name, directory.path)
        return handle

    def add_journal(self, name: str, path: Optional[str] = None) -> TrackedJournal:
        """Register a new, empty journal.

        Raises:
            DuplicateKey: If a journal called ``name`` exists.
        """
        if name in self._journals:
            raise DuplicateKey(name, "journals")
        journal = Journal(name=name, path=path or posixpath.join(self.config.diary_dir, name))
        self.topology.journals.append(journal)
        handle = TrackedJournal(journal, self.fs)
        self._journals[name] = handle
        logger.debug("Added journal %s at %s", name, journal.path)
        return handle

    def write_changes(self) -> None:
        """Persist changed journal entries, then the topology itself."""
        for journal in self._journals.values():
            written = journal.write_changes()
            if written:
                logger.debug("Wrote %d entries for journal %s", written, journal.name)
        self.fs.overwrite(self.config.topology_filename, self.topology.dumps().encode("utf-8"))

    def close(self) -> None:
        """Tear down every collection's content cache."""
        for handle in self._directories.values():
            handle.close()
        for handle in self._journals.values():
            handle.close()

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
