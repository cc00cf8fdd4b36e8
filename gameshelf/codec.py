"""Playlist documents: permissive JSON decoding and canonical encoding."""

from __future__ import annotations

import asyncio
import json
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

PLAYLIST_SUFFIX = ".json"

# Field -> default used when the key is missing or holds the wrong type.
PLAYLIST_FIELDS: dict[str, str] = {
    "id": "",
    "title": "",
    "author": "",
    "description": "",
    "icon": "",
}
ENTRY_FIELDS: dict[str, str] = {
    "id": "",
    "notes": "",
}


class MalformedDocument(ValueError):
    """Raised when a playlist document cannot be decoded at all."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        where = f" ({path})" if path is not None else ""
        super().__init__(f"Malformed playlist document{where}: {message}")


@dataclass
class PlaylistEntry:
    id: str
    notes: str = ""


@dataclass
class Playlist:
    id: str
    title: str = ""
    author: str = ""
    description: str = ""
    icon: str = ""  # data URL, empty when unset
    games: list[PlaylistEntry] = field(default_factory=list)


def coerce_field(data: dict[str, Any], name: str, default: Any) -> Any:
    """Return ``data[name]`` if it has the default's type, else the default."""
    value = data.get(name, default)
    if not isinstance(value, type(default)):
        return default
    return value


def _coerce_entry(raw: Any) -> PlaylistEntry:
    if not isinstance(raw, dict):
        raw = {}
    return PlaylistEntry(**{k: coerce_field(raw, k, d) for k, d in ENTRY_FIELDS.items()})


def decode(data: dict[str, Any]) -> Playlist:
    """Build a Playlist from an already-parsed JSON object."""
    values = {k: coerce_field(data, k, d) for k, d in PLAYLIST_FIELDS.items()}
    games = data.get("games")
    if not isinstance(games, list):
        games = []
    return Playlist(**values, games=[_coerce_entry(g) for g in games])


def parse(raw: str | bytes, path: Path | None = None) -> Playlist:
    """Parse a playlist document.

    Every field falls back to its default on its own; only text that is not
    a JSON object raises MalformedDocument. *path* is only used in the
    error message.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedDocument(str(e), path) from e
    if not isinstance(data, dict):
        raise MalformedDocument(f"expected an object, got {type(data).__name__}", path)
    return decode(data)


def encode(playlist: Playlist) -> dict[str, Any]:
    """Return the document as an ordered dict of plain values."""
    doc: dict[str, Any] = {k: getattr(playlist, k) for k in PLAYLIST_FIELDS}
    doc["games"] = [{k: getattr(g, k) for k in ENTRY_FIELDS} for g in playlist.games]
    return doc


def serialize(playlist: Playlist) -> str:
    return json.dumps(encode(playlist), indent=2, ensure_ascii=False) + "\n"


def create() -> Playlist:
    """Return an empty playlist with a freshly minted id."""
    return Playlist(id=str(uuid.uuid4()))


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


async def parse_file(path: str | Path) -> Playlist:
    """Read and parse a playlist file.

    OSErrors (including FileNotFoundError) propagate; undecodable content
    raises MalformedDocument.
    """
    path = Path(path)
    try:
        raw = await asyncio.to_thread(_read_text, path)
    except UnicodeDecodeError as e:
        raise MalformedDocument(str(e), path) from e
    return parse(raw, path)


async def write_file(path: str | Path, playlist: Playlist) -> None:
    """Overwrite *path* with the serialized playlist."""
    text = serialize(playlist)
    await asyncio.to_thread(Path(path).write_text, text, encoding="utf-8")
