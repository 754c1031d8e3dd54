"""Shared pytest fixtures for nkt tests."""

import tempfile
from pathlib import Path

import pytest

from nkt.collection import NotesDirectory, TrackedJournal
from nkt.config import StoreConfig
from nkt.filesystem import FileSystem
from nkt.models import Info
from nkt.store import Store
from nkt.topology import Directory, Journal


class CountingFileSystem(FileSystem):
    """FileSystem that records every path it reads."""

    def __init__(self, root):
        super().__init__(root)
        self.reads = []

    def read_file(self, rel_path):
        self.reads.append(rel_path)
        return super().read_file(rel_path)


def make_info(name, created=0, modified=None, path=None):
    """Build a metadata record with sensible defaults."""
    return Info(
        name=name,
        path=path or f"notes/main/{name}.md",
        created=created,
        modified=created if modified is None else modified,
    )


@pytest.fixture
def temp_root():
    """Create a temporary storage root."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config(temp_root):
    """Create a test configuration."""
    return StoreConfig(root=temp_root)


@pytest.fixture
def fs(temp_root):
    """Filesystem accessor that counts reads."""
    return CountingFileSystem(temp_root)


@pytest.fixture
def notes(fs):
    """An empty notes directory handle with proper cleanup."""
    handle = NotesDirectory(Directory(name="main", path="notes/main"), fs)
    yield handle
    handle.close()


@pytest.fixture
def journal(fs):
    """An empty journal handle with proper cleanup."""
    handle = TrackedJournal(Journal(name="diary", path="log/diary"), fs)
    yield handle
    handle.close()


@pytest.fixture
def store(config):
    """A store opened on the temporary root."""
    s = Store.open(config)
    yield s
    s.close()
