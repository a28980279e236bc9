"""
Playback request shaping.

Spotify's /me/player/play accepts two mutually exclusive bodies: a
context (playlist or album) with an optional track offset, or a plain
list of track URIs. This module decides which one to send.
"""

import logging
from typing import List, Optional, Sequence

from novaplayer.models.music import PlayBody
from .url_parser import is_track_uri

logger = logging.getLogger(__name__)

# Spotify rejects play requests with more URIs than this.
MAX_PLAY_URIS = 50


def build_play_body(
    context_uri: Optional[str] = None,
    uris: Optional[Sequence[str]] = None,
) -> PlayBody:
    """
    Translate a "play this" intent into a Spotify play body.

    - With a context: the context URI, plus an offset at the first URI
      only when that URI is a valid track URI.
    - Without a context: the URIs, truncated to MAX_PLAY_URIS.
    - Neither: an empty body, which resumes playback in place.
    """
    track_uris: List[str] = [uri for uri in (uris or []) if uri]

    if context_uri:
        start = track_uris[0] if track_uris else None
        if start and is_track_uri(start):
            return PlayBody(context_uri=context_uri, offset_uri=start)
        if start:
            logger.debug(
                "Ignoring invalid offset %r for context %s", start, context_uri
            )
        return PlayBody(context_uri=context_uri)

    if track_uris:
        if len(track_uris) > MAX_PLAY_URIS:
            logger.debug(
                "Truncating play request from %d to %d URIs",
                len(track_uris), MAX_PLAY_URIS,
            )
        return PlayBody(uris=track_uris[:MAX_PLAY_URIS])

    return PlayBody()
