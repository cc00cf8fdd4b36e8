"""Helpers for changing a playlist in memory before it is saved."""

from __future__ import annotations

import base64
import copy
import mimetypes
from pathlib import Path

from gameshelf.codec import Playlist, PlaylistEntry


def add_game(playlist: Playlist, game_id: str, notes: str = "") -> bool:
    """Append a game unless it is already in the playlist.

    Returns True if the game was added.
    """
    if any(entry.id == game_id for entry in playlist.games):
        return False
    playlist.games.append(PlaylistEntry(id=game_id, notes=notes))
    return True


def remove_game(playlist: Playlist, game_id: str) -> bool:
    for i, entry in enumerate(playlist.games):
        if entry.id == game_id:
            del playlist.games[i]
            return True
    return False


def start_edit(playlist: Playlist) -> Playlist:
    """Return a deep copy to collect edits in."""
    return copy.deepcopy(playlist)


def apply_edit(playlist: Playlist, edit: Playlist) -> None:
    """Copy the edited fields back onto *playlist*. The id is never changed."""
    playlist.title = edit.title
    playlist.author = edit.author
    playlist.description = edit.description
    playlist.icon = edit.icon
    playlist.games = copy.deepcopy(edit.games)


def icon_from_file(path: str | Path) -> str:
    """Read an image file and return it as a base64 data URL."""
    path = Path(path)
    mime, _ = mimetypes.guess_type(path.name)
    if mime is None or not mime.startswith("image/"):
        raise ValueError(f"Not an image file: {path}")
    data = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime};base64,{data}"
