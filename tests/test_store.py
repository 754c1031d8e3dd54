"""Tests for the store: loading, collection lookup and persistence."""

import json

import pytest

from nkt.config import StoreConfig
from nkt.errors import DuplicateKey, ParseError, UnknownCollection
from nkt.models import Ordering
from nkt.store import Store


NOON = 1709640000000


class TestOpen:
    """Tests for Store.open."""

    def test_open_empty_root(self, store):
        """A root without topology starts empty."""
        assert store.directories() == []
        assert store.journals() == []
        assert store.editor == "vim"

    def test_config_tools_override_topology(self, temp_root):
        """Configured editor and pager take precedence."""
        with Store.open(StoreConfig(root=temp_root, editor="nano")) as s:
            assert s.editor == "nano"
            assert s.pager == "less"

    def test_malformed_topology(self, temp_root):
        """A corrupt topology.json raises ParseError."""
        (temp_root / "topology.json").write_text("not json")
        with pytest.raises(ParseError):
            Store.open(StoreConfig(root=temp_root))

    def test_duplicate_records_in_topology(self, temp_root):
        """A topology.json listing one note twice raises ParseError."""
        record = {"name": "a", "path": "notes/main/a.md", "created": 1, "modified": 1}
        (temp_root / "topology.json").write_text(json.dumps({
            "directories": [{"name": "main", "path": "notes/main", "infos": [record, record]}],
        }))
        with pytest.raises(ParseError) as exc_info:
            Store.open(StoreConfig(root=temp_root))
        assert exc_info.value.path == "topology.json"

    def test_duplicate_collections_in_topology(self, temp_root):
        """A topology.json listing one directory name twice raises ParseError."""
        (temp_root / "topology.json").write_text(json.dumps({
            "directories": [
                {"name": "main", "path": "notes/main"},
                {"name": "main", "path": "notes/copy"},
            ],
        }))
        with pytest.raises(ParseError):
            Store.open(StoreConfig(root=temp_root))

    def test_initialize(self, store, temp_root):
        """initialize creates the layout and writes the topology."""
        store.initialize()
        assert (temp_root / "notes").is_dir()
        assert (temp_root / "log").is_dir()
        data = json.loads((temp_root / "topology.json").read_text())
        assert data["directories"] == []


class TestCollections:
    """Tests for adding and looking up collections."""

    def test_add_and_get_directory(self, store):
        """Added directories are returned by name."""
        handle = store.add_directory("main")
        assert store.directory("main") is handle
        assert handle.path == "notes/main"

    def test_add_and_get_journal(self, store):
        """Added journals are returned by name."""
        handle = store.add_journal("diary")
        assert store.journal("diary") is handle
        assert handle.path == "log/diary"

    def test_unknown_collection(self, store):
        """Unknown names raise UnknownCollection."""
        with pytest.raises(UnknownCollection):
            store.directory("nope")
        with pytest.raises(UnknownCollection):
            store.journal("nope")

    def test_duplicate_collection(self, store):
        """Collection names are unique per kind."""
        store.add_directory("main")
        with pytest.raises(DuplicateKey):
            store.add_directory("main")
        store.add_journal("main")
        with pytest.raises(DuplicateKey):
            store.add_journal("main")


class TestPersistence:
    """Tests for write_changes and reopening."""

    def test_notes_survive_reopen(self, config):
        """Notes written in one session are readable in the next."""
        with Store.open(config) as s:
            notes = s.add_directory("main")
            notes.new_note("ideas", now=1000)
            notes.write_content("ideas", b"# Ideas\n", now=2000)
            notes.add_tag("ideas", "work", now=2000)
            s.write_changes()

        with Store.open(config) as s:
            notes = s.directory("main")
            note = notes.get("ideas")
            assert note.content is None
            assert note.info.modified == 2000
            assert [t.name for t in note.info.tags] == ["work"]
            assert notes.read_content("ideas") == b"# Ideas\n"

    def test_journal_survives_reopen(self, config):
        """Journal entries and items persist across sessions."""
        with Store.open(config) as s:
            diary = s.add_journal("diary")
            diary.new_entry(now=NOON)
            diary.add_item("2024-03-05", "woke up", now=NOON + 1)
            diary.add_item("2024-03-05", "coffee", now=NOON + 1)
            s.write_changes()

        with Store.open(config) as s:
            diary = s.journal("diary")
            view = diary.items_view("2024-03-05").sort_by(Ordering.CREATED)
            assert [i.text for i in view] == ["woke up", "coffee"]
            diary.add_item("2024-03-05", "lunch", now=NOON + 2)
            s.write_changes()

        with Store.open(config) as s:
            texts = [i.text for i in s.journal("diary").read_items("2024-03-05")]
            assert texts == ["woke up", "coffee", "lunch"]

    def test_tasklists_carried_through(self, config, temp_root):
        """Unmanaged topology sections are saved back unchanged."""
        (temp_root / "topology.json").write_text(json.dumps({
            "_schema_version": "0.1.0",
            "editor": "vim",
            "pager": "less",
            "tasklists": [{"name": "todo", "tasks": []}],
            "directories": [],
            "journals": [],
        }))
        with Store.open(config) as s:
            s.write_changes()
        data = json.loads((temp_root / "topology.json").read_text())
        assert data["tasklists"] == [{"name": "todo", "tasks": []}]

    def test_close_tears_down_handles(self, config):
        """Closing the store releases every handle's cache."""
        s = Store.open(config)
        notes = s.add_directory("main")
        diary = s.add_journal("diary")
        s.close()
        assert notes.content.closed
        assert diary.content.closed
