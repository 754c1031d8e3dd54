"""Data models for notes, journal entries, items and tags."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class Ordering(Enum):
    """Ordering applied to a sortable view."""
    CREATED = "created"
    MODIFIED = "modified"


def utc_now_ms() -> int:
    """Get current UTC time as milliseconds since epoch."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def datetime_from_ms(ms: int) -> datetime:
    """Convert milliseconds since epoch to an aware UTC datetime."""
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def date_key(ms: int) -> str:
    """Day key in format YYYY-MM-DD for a UTC millisecond timestamp."""
    return datetime_from_ms(ms).strftime('%Y-%m-%d')


def normalise_tag_name(name: str) -> str:
    name = name.strip().lower()
    if not name or any(c.isspace() for c in name):
        raise ValueError(f"Invalid tag name: {name!r}")
    return name


@dataclass
class Tag:
    """A tag attached to a record or item."""
    name: str
    added: int

    def __post_init__(self) -> None:
        self.name = normalise_tag_name(self.name)

    def to_dict(self) -> dict:
        return {"name": self.name, "added": self.added}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Tag":
        return cls(name=data["name"], added=int(data["added"]))


def _check_times(created: int, modified: int) -> None:
    if created > modified:
        raise ValueError(
            f"created ({created}) must not be after modified ({modified})"
        )


def _add_tag(tags: list[Tag], name: str, now: int) -> bool:
    name = normalise_tag_name(name)
    if any(t.name == name for t in tags):
        return False
    tags.append(Tag(name=name, added=now))
    return True


@dataclass
class Info:
    """Metadata record for a single note or journal entry.

    ``name`` is the key of the record within its collection and ``path``
    the location of the backing file relative to the storage root.
    """
    name: str
    path: str
    created: int
    modified: int
    tags: list[Tag] = field(default_factory=list)

    def __post_init__(self) -> None:
        _check_times(self.created, self.modified)

    def touch(self, now: int) -> None:
        """Advance the modification time, never moving it backwards."""
        self.modified = max(self.modified, now)

    def add_tag(self, name: str, now: int) -> bool:
        """Add a tag; returns False if the record already carries it."""
        return _add_tag(self.tags, name, now)

    def to_dict(self) -> dict:
        """Convert record to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "path": self.path,
            "created": self.created,
            "modified": self.modified,
            "tags": [t.to_dict() for t in self.tags],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Info":
        return cls(
            name=data["name"],
            path=data["path"],
            created=int(data["created"]),
            modified=int(data["modified"]),
            tags=[Tag.from_dict(t) for t in data.get("tags", [])],
        )


@dataclass
class Item:
    """A single timestamped log line inside a journal entry."""
    text: str
    created: int
    modified: int
    tags: list[Tag] = field(default_factory=list)

    def __post_init__(self) -> None:
        _check_times(self.created, self.modified)

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "created": self.created,
            "modified": self.modified,
            "tags": [t.to_dict() for t in self.tags],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Item":
        return cls(
            text=data["text"],
            created=int(data["created"]),
            modified=int(data["modified"]),
            tags=[Tag.from_dict(t) for t in data.get("tags", [])],
        )


@dataclass
class Note:
    """A note record paired with its content, if loaded."""
    info: Info
    content: Optional[bytes] = None

    @property
    def name(self) -> str:
        return self.info.name

    @property
    def created(self) -> int:
        return self.info.created

    @property
    def modified(self) -> int:
        return self.info.modified

    @property
    def loaded(self) -> bool:
        return self.content is not None


@dataclass
class Entry:
    """A journal entry record paired with its resident items, if loaded."""
    info: Info
    items: Optional[list[Item]] = None

    @property
    def name(self) -> str:
        return self.info.name

    @property
    def created(self) -> int:
        return self.info.created

    @property
    def modified(self) -> int:
        return self.info.modified

    @property
    def loaded(self) -> bool:
        return self.items is not None
