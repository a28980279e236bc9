"""
Spotify URI and URL parser utility.

Validates Spotify URIs and extracts bare resource IDs from URIs,
open.spotify.com URLs, or IDs passed through unchanged.
"""

import re
import logging
from typing import Optional

logger = logging.getLogger(__name__)

# spotify:track:<id>. The id is only checked for being alphanumeric;
# Spotify rejects the whole play request when the offset is malformed.
TRACK_URI_PATTERN = re.compile(r"^spotify:track:[a-zA-Z0-9]+$")

_URI_PATTERN = re.compile(r"^spotify:(?P<kind>[a-z]+):(?P<id>[a-zA-Z0-9]+)$")
_URL_PATTERN = re.compile(
    r"^(?:https?://)?open\.spotify\.com/(?P<kind>[a-z]+)/(?P<id>[a-zA-Z0-9]+)(?:\?.*)?$"
)
_BARE_ID_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")


def is_track_uri(value: Optional[str]) -> bool:
    """Return True if ``value`` is syntactically a Spotify track URI."""
    if not value or not isinstance(value, str):
        return False
    return bool(TRACK_URI_PATTERN.match(value.strip()))


def extract_spotify_id(value: str, kind: Optional[str] = None) -> Optional[str]:
    """
    Extract a resource ID from a URI, an open.spotify.com URL, or a bare ID.

    Supports these formats:
        - spotify:track:4uLU6hMCjMI75M1A2tKUQC
        - https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC?si=abc
        - 4uLU6hMCjMI75M1A2tKUQC  (bare ID)

    Args:
        value: The string to parse.
        kind: Optional resource type ("track", "artist", ...). When given,
            URIs and URLs of another type are rejected.

    Returns:
        The bare ID, or None if the input does not match.
    """
    if not value or not isinstance(value, str):
        return None

    cleaned = value.strip()
    if _BARE_ID_PATTERN.match(cleaned):
        return cleaned

    for pattern in (_URI_PATTERN, _URL_PATTERN):
        match = pattern.match(cleaned)
        if match:
            if kind and match.group("kind") != kind:
                logger.debug(
                    f"Expected a {kind} reference, got {match.group('kind')}"
                )
                return None
            return match.group("id")

    logger.debug(f"Could not parse Spotify ID from: {cleaned!r}")
    return None
