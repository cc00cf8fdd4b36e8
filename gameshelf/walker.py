"""Recursive directory traversal with cooperative abort."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable
from pathlib import Path

logger = logging.getLogger(__name__)


class PathUnavailable(OSError):
    """Raised when the walk root cannot be listed at all."""

    def __init__(self, path: Path, reason: OSError):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot open directory {path}: {reason}")


class AbortToken:
    """Shared flag that stops a walk before the next file or directory."""

    def __init__(self) -> None:
        self._aborted = False

    def abort(self) -> None:
        self._aborted = True

    @property
    def aborted(self) -> bool:
        return self._aborted


FileCallback = Callable[[Path, Path, AbortToken], Awaitable[None]]


def _list_dir(path: Path) -> tuple[list[str], list[str]]:
    """Return sorted (file names, sub-directory names) of a directory."""
    files: list[str] = []
    dirs: list[str] = []
    with os.scandir(path) as it:
        for entry in it:
            if entry.is_dir(follow_symlinks=False):
                dirs.append(entry.name)
            elif entry.is_file():
                files.append(entry.name)
    return sorted(files), sorted(dirs)


async def walk(
    root: str | Path,
    on_file: FileCallback,
    token: AbortToken | None = None,
) -> AbortToken:
    """Visit every regular file under *root*, awaiting *on_file* for each.

    Files in a directory are visited before its sub-directories, both in
    name order. The callback gets ``(full_path, relative_path, token)``;
    calling ``token.abort()`` stops the walk at the next check. A directory
    below the root that cannot be listed is logged and skipped.

    Returns the token so callers can tell whether the walk was aborted.
    """
    root = Path(root)
    if token is None:
        token = AbortToken()
    try:
        files, dirs = await asyncio.to_thread(_list_dir, root)
    except OSError as e:
        raise PathUnavailable(root, e) from e
    await _walk_listing(root, Path(), files, dirs, on_file, token)
    return token


async def _walk_listing(
    root: Path,
    relative: Path,
    files: list[str],
    dirs: list[str],
    on_file: FileCallback,
    token: AbortToken,
) -> None:
    current = root / relative
    for name in files:
        if token.aborted:
            return
        await on_file(current / name, relative / name, token)

    for name in dirs:
        if token.aborted:
            return
        sub_relative = relative / name
        try:
            sub_files, sub_dirs = await asyncio.to_thread(_list_dir, root / sub_relative)
        except OSError as e:
            logger.warning("Skipping unreadable directory %s: %s", root / sub_relative, e)
            continue
        await _walk_listing(root, sub_relative, sub_files, sub_dirs, on_file, token)
