"""
NovaPlayer Models Package.

Exports the SQLAlchemy database instance, the User model and the
dataclasses used to reshape Spotify payloads.

Usage:
    from novaplayer.models import db, User
    from novaplayer.models import Track, PlayBody
"""

from novaplayer.models.db import db, User
from novaplayer.models.music import (
    ArtistRef,
    Track,
    Artist,
    PlaylistSummary,
    Category,
    Device,
    PlaybackState,
    PlayBody,
    VideoResult,
)

__all__ = [
    "db",
    "User",
    "ArtistRef",
    "Track",
    "Artist",
    "PlaylistSummary",
    "Category",
    "Device",
    "PlaybackState",
    "PlayBody",
    "VideoResult",
]
