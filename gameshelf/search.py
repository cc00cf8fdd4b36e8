"""Fuzzy title search over loaded playlists."""

import re
import unicodedata

from rapidfuzz import fuzz

from gameshelf.codec import Playlist

DEFAULT_THRESHOLD = 60
DEFAULT_LIMIT = 10


def _normalize(text: str) -> str:
    """Lowercase, fold accents and collapse whitespace."""
    text = unicodedata.normalize("NFKD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return re.sub(r"\s+", " ", text.lower()).strip()


def find_playlists(
    playlists: list[Playlist],
    query: str,
    threshold: int = DEFAULT_THRESHOLD,
    limit: int = DEFAULT_LIMIT,
) -> list[tuple[Playlist, float]]:
    """Return (playlist, score) pairs whose title matches *query*, best first.

    Ties keep the store's order.
    """
    q = _normalize(query)
    if not q:
        return []
    scored: list[tuple[Playlist, float]] = []
    for playlist in playlists:
        title = _normalize(playlist.title)
        if not title:
            continue
        score = fuzz.WRatio(q, title)
        if score >= threshold:
            scored.append((playlist, score))
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return scored[:limit]
