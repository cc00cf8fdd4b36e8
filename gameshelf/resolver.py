"""Decide whether a file on disk holds a given playlist."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from gameshelf.codec import MalformedDocument, parse_file

logger = logging.getLogger(__name__)


class Identity(Enum):
    NOT_FOUND = "not_found"
    MALFORMED = "malformed"
    OTHER_ERROR = "other_error"
    MATCHES = "matches"
    DOES_NOT_MATCH = "does_not_match"


async def identify(path: str | Path, expected_id: str) -> Identity:
    """Read *path* and compare the playlist id inside it to *expected_id*."""
    try:
        playlist = await parse_file(path)
    except FileNotFoundError:
        return Identity.NOT_FOUND
    except MalformedDocument as e:
        logger.debug("%s", e)
        return Identity.MALFORMED
    except OSError as e:
        logger.warning("Could not read %s: %s", path, e)
        return Identity.OTHER_ERROR
    if playlist.id == expected_id:
        return Identity.MATCHES
    return Identity.DOES_NOT_MATCH
