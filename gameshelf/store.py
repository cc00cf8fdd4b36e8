"""Playlist store: in-memory working set backed by a folder of JSON files.

The store never assumes it owns the folder. Every cached path is re-checked
by content before it is used, and a stale cache entry falls through to a full
scan of the folder. ``save`` creates a new ``<id>.json`` file only when no
existing file holds the playlist, and picks ``<id> (1).json`` and upward
when that name is taken by anything else.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from enum import Enum
from pathlib import Path

from gameshelf import codec
from gameshelf.codec import PLAYLIST_SUFFIX, MalformedDocument, Playlist
from gameshelf.report import LoadedFile, LoadReport, SkippedFile
from gameshelf.resolver import Identity, identify
from gameshelf.walker import AbortToken, PathUnavailable, walk

logger = logging.getLogger(__name__)

DEFAULT_FOLDER = "playlists"

# Cached-path results that let an operation use the cached file directly.
# A missing file is a safe place to re-create a playlist, but not to delete one.
SAVE_CACHE_HITS = frozenset({Identity.MATCHES, Identity.NOT_FOUND})
DELETE_CACHE_HITS = frozenset({Identity.MATCHES})
# A new file may only go where nothing, or this same playlist, already is.
NEW_FILE_HITS = SAVE_CACHE_HITS

# Characters that would let an id name a path outside the playlists folder.
_UNSAFE_ID_CHARS = ("/", "\\", ":", "\0")

Strategy = Callable[[], Awaitable[Path | None]]


class StoreState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class StoreError(Exception):
    """Base class for storage location failures surfaced to the caller."""


class RootUnavailable(StoreError):
    """Raised when the storage root (or the playlists folder) cannot be used."""

    def __init__(self, path: Path, reason: Exception | None = None):
        self.path = path
        self.reason = reason
        msg = f"Storage folder is not available: {path}"
        if reason is not None:
            msg += f" ({reason})"
        super().__init__(msg)


class NameCollision(StoreError):
    """Raised when a regular file occupies the playlists folder's name."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(
            "The playlists folder's name is already in use by a file. "
            f"Delete or rename the file and try again: {path}"
        )


class AlreadyLoadedError(RuntimeError):
    """Raised when load() is called more than once on a store."""


class StoreNotReady(RuntimeError):
    """Raised when a disk operation is attempted before load() finished."""


def _file_stem(playlist_id: str) -> str:
    """Return the file name stem for a new playlist file.

    Ids that are empty or could leave the playlists folder get a random name.
    """
    if (
        not playlist_id
        or ".." in playlist_id
        or any(c in playlist_id for c in _UNSAFE_ID_CHARS)
    ):
        return f"playlist-{uuid.uuid4().hex}"
    return playlist_id


async def _resolve(strategies: Iterable[Strategy]) -> Path | None:
    """Run strategies in order and return the first path one produces."""
    for strategy in strategies:
        path = await strategy()
        if path is not None:
            return path
    return None


class PlaylistStore:
    def __init__(self, root: str | Path, folder: str = DEFAULT_FOLDER):
        self.root = Path(root)
        self.playlists_dir = self.root / folder
        self.playlists: list[Playlist] = []
        self.file_index: dict[str, Path] = {}
        self.state = StoreState.UNINITIALIZED
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    # -- lifecycle -------------------------------------------------------

    async def load(self) -> LoadReport:
        """Load every playlist file under the playlists folder.

        Creates the folder when it is missing. Files that cannot be decoded
        are skipped and listed in the returned report.
        """
        if self.state is not StoreState.UNINITIALIZED:
            raise AlreadyLoadedError("This store has already loaded its playlists.")
        self.state = StoreState.LOADING

        if not await asyncio.to_thread(self.root.is_dir):
            raise RootUnavailable(self.root)

        report = LoadReport(directory=self.playlists_dir)
        report.created_directory = await self._ensure_folder()

        async def on_file(path: Path, relative: Path, token: AbortToken) -> None:
            try:
                playlist = await codec.parse_file(path)
            except MalformedDocument as e:
                logger.warning("Skipping %s", e)
                report.skipped.append(SkippedFile(path, "malformed", str(e.__cause__ or e)))
                return
            except OSError as e:
                logger.warning("Skipping unreadable playlist file %s: %s", path, e)
                report.skipped.append(SkippedFile(path, "unreadable", str(e)))
                return
            if playlist.id in self.file_index:
                logger.warning(
                    "Skipping %s: playlist id %s already loaded from %s",
                    path, playlist.id, self.file_index[playlist.id],
                )
                report.skipped.append(SkippedFile(path, "duplicate id", playlist.id))
                return
            self.playlists.append(playlist)
            self.file_index[playlist.id] = path
            report.loaded.append(LoadedFile(path, playlist.id, playlist.title))

        try:
            await walk(self.playlists_dir, on_file)
        except PathUnavailable as e:
            raise RootUnavailable(self.playlists_dir, e.reason) from e

        self.state = StoreState.READY
        logger.info(
            "Loaded %d playlists from %s (%d skipped)",
            len(report.loaded), self.playlists_dir, report.skipped_count,
        )
        return report

    async def _ensure_folder(self) -> bool:
        """Make sure the playlists folder exists. Returns True if it was created."""
        folder = self.playlists_dir
        if await asyncio.to_thread(folder.is_dir):
            return False
        if await asyncio.to_thread(folder.exists):
            raise NameCollision(folder)
        try:
            await asyncio.to_thread(folder.mkdir)
        except OSError as e:
            raise RootUnavailable(folder, e) from e
        logger.info("Created playlists folder %s", folder)
        return True

    def _require_ready(self) -> None:
        if self.state is not StoreState.READY:
            raise StoreNotReady(f"Playlists are not loaded (state: {self.state.value}).")

    @contextlib.asynccontextmanager
    async def _id_lock(self, playlist_id: str) -> AsyncIterator[None]:
        """Hold the lock for one playlist id. Dropped once nobody uses it."""
        lock = self._locks.setdefault(playlist_id, asyncio.Lock())
        self._lock_users[playlist_id] = self._lock_users.get(playlist_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[playlist_id] -= 1
            if not self._lock_users[playlist_id]:
                del self._lock_users[playlist_id]
                del self._locks[playlist_id]

    # -- path resolution -------------------------------------------------

    async def _cached_path(self, playlist_id: str, accept: frozenset[Identity]) -> Path | None:
        path = self.file_index.get(playlist_id)
        if path is None:
            return None
        identity = await identify(path, playlist_id)
        if identity in accept:
            return path
        logger.debug("Cached path %s for %s is stale (%s)", path, playlist_id, identity.value)
        return None

    async def _scan_for_file(self, playlist_id: str) -> Path | None:
        found: Path | None = None

        async def on_file(path: Path, relative: Path, token: AbortToken) -> None:
            nonlocal found
            if await identify(path, playlist_id) is Identity.MATCHES:
                found = path
                token.abort()

        try:
            await walk(self.playlists_dir, on_file)
        except PathUnavailable as e:
            logger.warning("Could not scan playlists folder: %s", e)
            return None
        return found

    async def _new_file_path(self, playlist_id: str) -> Path:
        """Pick a file in the playlists folder that holds no other playlist."""
        stem = _file_stem(playlist_id)
        path = self.playlists_dir / f"{stem}{PLAYLIST_SUFFIX}"
        n = 0
        while await identify(path, playlist_id) not in NEW_FILE_HITS:
            n += 1
            path = self.playlists_dir / f"{stem} ({n}){PLAYLIST_SUFFIX}"
        return path

    # -- disk operations -------------------------------------------------

    async def save(self, playlist: Playlist) -> Path:
        """Write the full playlist to the file that holds it.

        Tries the cached path, then a scan of the folder, then a new
        ``<id>.json`` file. Returns the path written.
        """
        self._require_ready()
        pid = playlist.id
        async with self._id_lock(pid):
            path = await _resolve((
                lambda: self._cached_path(pid, SAVE_CACHE_HITS),
                lambda: self._scan_for_file(pid),
                lambda: self._new_file_path(pid),
            ))
            await codec.write_file(path, playlist)
            self.file_index[pid] = path
        logger.debug("Saved playlist %s to %s", pid, path)
        return path

    async def delete(self, playlist_id: str) -> bool:
        """Delete the file holding a playlist. Does NOT remove it from memory.

        Returns True if a file was found and deleted.
        """
        self._require_ready()
        async with self._id_lock(playlist_id):
            path = await _resolve((
                lambda: self._cached_path(playlist_id, DELETE_CACHE_HITS),
                lambda: self._scan_for_file(playlist_id),
            ))
            if path is None:
                return False
            try:
                await asyncio.to_thread(path.unlink)
            except FileNotFoundError:
                logger.info("Playlist file %s vanished before it could be deleted", path)
                return False
        logger.debug("Deleted playlist %s file %s", playlist_id, path)
        return True

    # -- memory operations -----------------------------------------------

    def create(self) -> Playlist:
        """Create a new playlist, add it to the store and return it.

        The playlist is not written to disk until save() is called.
        """
        playlist = codec.create()
        self.playlists.append(playlist)
        return playlist

    def remove(self, playlist_id: str) -> bool:
        """Remove a playlist from memory. Does NOT delete its file."""
        for i in range(len(self.playlists) - 1, -1, -1):
            if self.playlists[i].id == playlist_id:
                del self.playlists[i]
                self.file_index.pop(playlist_id, None)
                return True
        return False

    def get(self, playlist_id: str) -> Playlist | None:
        for playlist in self.playlists:
            if playlist.id == playlist_id:
                return playlist
        return None
