"""Local app configuration for gameshelf."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path

from gameshelf.store import DEFAULT_FOLDER

CONFIG_VERSION = 1
DEFAULT_CONFIG_PATH = ".gameshelf_config.json"


def is_valid_folder(folder: object) -> bool:
    """A playlists folder must be a non-empty path that stays inside the root."""
    if not isinstance(folder, str) or not folder.strip():
        return False
    p = Path(folder)
    return not p.is_absolute() and not p.drive and ".." not in p.parts


@dataclass
class AppConfig:
    root_path: str | None = None
    playlists_folder: str = DEFAULT_FOLDER
    last_set_at: str | None = None

    def __post_init__(self) -> None:
        # Values come straight from a hand-editable file.
        if not isinstance(self.root_path, str) or not self.root_path:
            self.root_path = None
        if not isinstance(self.last_set_at, str):
            self.last_set_at = None
        if not is_valid_folder(self.playlists_folder):
            self.playlists_folder = DEFAULT_FOLDER

    @classmethod
    def from_dict(cls, data: dict) -> AppConfig:
        return cls(
            root_path=data.get("root_path"),
            playlists_folder=data.get("playlists_folder", DEFAULT_FOLDER),
            last_set_at=data.get("last_set_at"),
        )


class ConfigManager:
    def __init__(self, path: str = DEFAULT_CONFIG_PATH):
        self.path = Path(path)
        self.config = AppConfig()

    def load(self) -> None:
        """Load config from disk. No-op if file doesn't exist or is invalid."""
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, OSError):
            return
        if not isinstance(data, dict) or data.get("version") != CONFIG_VERSION:
            return
        self.config = AppConfig.from_dict(data)

    def save(self) -> None:
        """Write config to disk."""
        data = {"version": CONFIG_VERSION, **asdict(self.config)}
        self.path.write_text(json.dumps(data, indent=2))

    def get_root_path(self) -> str | None:
        return self.config.root_path

    def set_root_path(self, path: str) -> None:
        self.config.root_path = str(Path(path).expanduser())
        self.config.last_set_at = datetime.now().isoformat()

    def get_playlists_folder(self) -> str:
        return self.config.playlists_folder

    def set_playlists_folder(self, folder: str) -> None:
        if not is_valid_folder(folder):
            raise ValueError(f"Playlists folder must be a relative path inside the root: {folder!r}")
        self.config.playlists_folder = folder


def validate_root(path: str | Path) -> tuple[bool, str | None]:
    """Check that a storage root exists and is a directory."""
    p = Path(path).expanduser()
    if not p.exists():
        return False, f"Folder not found: {p}"
    if not p.is_dir():
        return False, f"Not a folder: {p}"
    return True, None
