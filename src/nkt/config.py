"""Configuration loading for nkt.

A storage root may carry a small config file (TOML or JSON) overriding the
default layout and the external tools used for editing and paging.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .filesystem import DIARY_DIRECTORY, NOTES_DIRECTORY
from .topology import DEFAULT_EDITOR, DEFAULT_PAGER, TOPOLOGY_FILENAME

# Python 3.11+ has tomllib in stdlib; fall back to tomli for older versions
try:
    import tomllib  # Python 3.11+
except ImportError:
    try:
        import tomli as tomllib  # Python <3.11
    except ImportError:  # pragma: no cover
        tomllib = None

logger = logging.getLogger(__name__)

ROOT_ENV_VAR = "NKT_ROOT"
DEFAULT_ROOT = Path.home() / ".nkt"


def default_root() -> Path:
    """Get the storage root.

    Uses ~/.nkt by default; can be overridden with the NKT_ROOT environment
    variable.
    """
    custom_root = os.environ.get(ROOT_ENV_VAR)
    if custom_root:
        return Path(custom_root).expanduser()
    return DEFAULT_ROOT


@dataclass
class StoreConfig:
    """Configuration for a storage root."""

    root: Path = field(default_factory=default_root)

    # Layout (relative to root)
    topology_filename: str = TOPOLOGY_FILENAME
    notes_dir: str = NOTES_DIRECTORY
    diary_dir: str = DIARY_DIRECTORY

    # External tools; None means "use whatever the topology records"
    editor: Optional[str] = None
    pager: Optional[str] = None

    def get_topology_path(self) -> Path:
        return self.root / self.topology_filename

    def get_notes_path(self) -> Path:
        return self.root / self.notes_dir

    def get_diary_path(self) -> Path:
        return self.root / self.diary_dir


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from TOML file."""
    if tomllib is None:
        raise ImportError("tomli required for TOML config: pip install tomli")
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def dict_to_config(data: dict[str, Any], root: Path) -> StoreConfig:
    """Convert dictionary to StoreConfig."""
    config = StoreConfig(root=root)

    if "storage" in data:
        storage = data["storage"]
        if "topology" in storage:
            config.topology_filename = storage["topology"]
        if "notes" in storage:
            config.notes_dir = storage["notes"]
        if "diary" in storage:
            config.diary_dir = storage["diary"]

    if "tools" in data:
        tools = data["tools"]
        if "editor" in tools:
            config.editor = tools["editor"]
        if "pager" in tools:
            config.pager = tools["pager"]

    return config


def find_config_file(root: Path) -> Optional[Path]:
    """Find configuration file in the storage root.

    Search order:
    1. nkt_config.toml
    2. nkt_config.json
    3. .nkt.toml
    4. .nkt.json
    """
    candidates = [
        "nkt_config.toml",
        "nkt_config.json",
        ".nkt.toml",
        ".nkt.json",
    ]

    for name in candidates:
        path = root / name
        if path.exists():
            return path

    return None


def load_config(root: Optional[Path] = None, config_path: Optional[Path] = None) -> StoreConfig:
    """Load storage configuration.

    Args:
        root: Storage root (default: NKT_ROOT or ~/.nkt)
        config_path: Optional explicit path to config file

    Returns:
        StoreConfig instance
    """
    root = Path(root).expanduser() if root is not None else default_root()

    if config_path is None:
        config_path = find_config_file(root)

    if config_path is None:
        # No config file - use defaults
        return StoreConfig(root=root)

    logger.debug("Loading config from %s", config_path)
    suffix = config_path.suffix.lower()

    if suffix == ".toml":
        config_dict = load_toml_config(config_path)
        return dict_to_config(config_dict, root)

    elif suffix == ".json":
        config_dict = load_json_config(config_path)
        return dict_to_config(config_dict, root)

    else:
        raise ValueError(f"Unsupported config file type: {suffix}")
