"""Persisted topology: the catalog of every notes directory and journal.

Stored as ``topology.json`` in the storage root. The markdown and journal
day files remain the source of content; the topology only holds metadata.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .errors import ParseError
from .models import Info, Item, Tag

logger = logging.getLogger(__name__)

TOPOLOGY_FILENAME = "topology.json"
TOPOLOGY_SCHEMA_VERSION = "0.1.0"

DEFAULT_EDITOR = "vim"
DEFAULT_PAGER = "less"


@dataclass
class Directory:
    """A directory of named notes."""
    name: str
    path: str
    infos: list[Info] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "path": self.path,
            "infos": [i.to_dict() for i in self.infos],
            "tags": [t.to_dict() for t in self.tags],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Directory":
        return cls(
            name=data["name"],
            path=data["path"],
            infos=[Info.from_dict(i) for i in data.get("infos", [])],
            tags=[Tag.from_dict(t) for t in data.get("tags", [])],
        )


@dataclass
class Journal:
    """A journal of dated entries, each holding timestamped items."""
    name: str
    path: str
    infos: list[Info] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "path": self.path,
            "infos": [i.to_dict() for i in self.infos],
            "tags": [t.to_dict() for t in self.tags],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Journal":
        return cls(
            name=data["name"],
            path=data["path"],
            infos=[Info.from_dict(i) for i in data.get("infos", [])],
            tags=[Tag.from_dict(t) for t in data.get("tags", [])],
        )


@dataclass
class Topology:
    """Everything persisted in ``topology.json``."""
    directories: list[Directory] = field(default_factory=list)
    journals: list[Journal] = field(default_factory=list)
    # Task lists are not managed here; kept verbatim so saving is lossless
    tasklists: list[dict] = field(default_factory=list)
    editor: str = DEFAULT_EDITOR
    pager: str = DEFAULT_PAGER

    @classmethod
    def new(cls, editor: Optional[str] = None, pager: Optional[str] = None) -> "Topology":
        """Create an empty topology."""
        return cls(editor=editor or DEFAULT_EDITOR, pager=pager or DEFAULT_PAGER)

    @classmethod
    def loads(cls, data: Union[str, bytes], path: Optional[str] = None) -> "Topology":
        """Parse a serialized topology.

        Raises:
            ParseError: If the data is not valid JSON or does not match the
                topology schema.
        """
        try:
            raw = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Invalid topology JSON: {e}", path) from e

        if not isinstance(raw, dict):
            raise ParseError("Topology must be a JSON object", path)

        version = raw.get("_schema_version")
        if version is not None and version != TOPOLOGY_SCHEMA_VERSION:
            logger.warning(
                "Topology schema version %s differs from %s", version, TOPOLOGY_SCHEMA_VERSION
            )

        try:
            topology = cls(
                directories=[Directory.from_dict(d) for d in raw.get("directories", [])],
                journals=[Journal.from_dict(j) for j in raw.get("journals", [])],
                tasklists=list(raw.get("tasklists", [])),
                editor=raw.get("editor", DEFAULT_EDITOR),
                pager=raw.get("pager", DEFAULT_PAGER),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ParseError(f"Malformed topology: {e!r}", path) from e

        _check_unique((d.name for d in topology.directories), "directory", path)
        _check_unique((j.name for j in topology.journals), "journal", path)
        for collection in [*topology.directories, *topology.journals]:
            _check_unique((i.name for i in collection.infos), f"record in '{collection.name}'", path)

        logger.debug(
            "Loaded topology: %d directories, %d journals",
            len(topology.directories), len(topology.journals),
        )
        return topology

    def to_dict(self) -> dict:
        return {
            "_schema_version": TOPOLOGY_SCHEMA_VERSION,
            "editor": self.editor,
            "pager": self.pager,
            "tasklists": self.tasklists,
            "directories": [d.to_dict() for d in self.directories],
            "journals": [j.to_dict() for j in self.journals],
        }

    def dumps(self) -> str:
        """Serialize for writing to file."""
        return json.dumps(self.to_dict(), indent=4)

    def get_directory(self, name: str) -> Optional[Directory]:
        for d in self.directories:
            if d.name == name:
                return d
        return None

    def get_journal(self, name: str) -> Optional[Journal]:
        for j in self.journals:
            if j.name == name:
                return j
        return None


def _check_unique(names, what: str, path: Optional[str]) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise ParseError(f"Duplicate {what}: {name}", path)
        seen.add(name)


def loads_items(data: Union[str, bytes], path: Optional[str] = None) -> list[Item]:
    """Parse a journal day file into its items.

    Raises:
        ParseError: If the day file is malformed.
    """
    try:
        raw = json.loads(data)
        return [Item.from_dict(i) for i in raw["items"]]
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Invalid journal JSON: {e}", path) from e
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ParseError(f"Malformed journal entry: {e!r}", path) from e


def dumps_items(items: list[Item]) -> str:
    """Serialize a journal entry's items for writing to its day file."""
    return json.dumps({"items": [i.to_dict() for i in items]}, indent=4)
