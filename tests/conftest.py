"""Shared pytest fixtures."""

import asyncio
import json
from pathlib import Path

import pytest

from gameshelf.store import PlaylistStore


def write_playlist(path: Path, playlist_id: str, title: str = "", games=()) -> Path:
    """Write a minimal playlist document to *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({
        "id": playlist_id,
        "title": title,
        "games": [{"id": g, "notes": ""} for g in games],
    }))
    return path


@pytest.fixture
def root(tmp_path):
    """Empty storage root."""
    return tmp_path / "fp"


@pytest.fixture
def playlists_dir(root):
    d = root / "playlists"
    d.mkdir(parents=True)
    return d


@pytest.fixture
def store(root):
    root.mkdir(exist_ok=True)
    return PlaylistStore(root)


@pytest.fixture
def loaded_store(store):
    asyncio.run(store.load())
    return store
