"""
Typed shapes for the Spotify resources this app reshapes.

Each class is built from a raw Spotify payload with ``from_spotify`` and
serialized back to JSON-friendly dicts with ``to_dict``. Endpoints that
pass Spotify payloads through untouched (search, playlist details) do not
go through these classes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _first_image_url(images: Optional[List[Dict[str, Any]]]) -> Optional[str]:
    if not images:
        return None
    return images[0].get("url")


@dataclass
class ArtistRef:
    """An artist as embedded in a track."""

    id: Optional[str]
    name: str
    uri: Optional[str] = None

    @classmethod
    def from_spotify(cls, data: Dict[str, Any]) -> "ArtistRef":
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            uri=data.get("uri"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "uri": self.uri}


@dataclass
class Track:
    """A playable track."""

    id: Optional[str]
    uri: str
    name: str
    duration_ms: Optional[int] = None
    artists: List[ArtistRef] = field(default_factory=list)
    album_name: Optional[str] = None
    image_url: Optional[str] = None
    external_url: Optional[str] = None

    @classmethod
    def from_spotify(cls, data: Dict[str, Any]) -> "Track":
        album = data.get("album") or {}
        return cls(
            id=data.get("id"),
            uri=data.get("uri", ""),
            name=data.get("name", ""),
            duration_ms=data.get("duration_ms"),
            artists=[
                ArtistRef.from_spotify(artist)
                for artist in data.get("artists", [])
            ],
            album_name=album.get("name"),
            image_url=_first_image_url(album.get("images")),
            external_url=(data.get("external_urls") or {}).get("spotify"),
        )

    @classmethod
    def list_from_spotify(cls, items: Optional[List[Dict[str, Any]]]) -> List["Track"]:
        """Build tracks from a list, skipping null and URI-less entries."""
        return [
            cls.from_spotify(item)
            for item in items or []
            if item and item.get("uri")
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "uri": self.uri,
            "name": self.name,
            "duration_ms": self.duration_ms,
            "artists": [artist.to_dict() for artist in self.artists],
            "album_name": self.album_name,
            "image_url": self.image_url,
            "external_url": self.external_url,
        }


@dataclass
class Artist:
    """Artist metadata."""

    id: str
    name: str
    uri: Optional[str] = None
    genres: List[str] = field(default_factory=list)
    followers: Optional[int] = None
    popularity: Optional[int] = None
    image_url: Optional[str] = None

    @classmethod
    def from_spotify(cls, data: Dict[str, Any]) -> "Artist":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            uri=data.get("uri"),
            genres=list(data.get("genres") or []),
            followers=(data.get("followers") or {}).get("total"),
            popularity=data.get("popularity"),
            image_url=_first_image_url(data.get("images")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "uri": self.uri,
            "genres": self.genres,
            "followers": self.followers,
            "popularity": self.popularity,
            "image_url": self.image_url,
        }


@dataclass
class PlaylistSummary:
    """A playlist as listed (no tracks)."""

    id: str
    name: str
    uri: Optional[str] = None
    description: Optional[str] = None
    owner_id: Optional[str] = None
    owner_name: Optional[str] = None
    total_tracks: Optional[int] = None
    image_url: Optional[str] = None

    @classmethod
    def from_spotify(cls, data: Dict[str, Any]) -> "PlaylistSummary":
        owner = data.get("owner") or {}
        tracks_meta = data.get("tracks") or data.get("items") or {}
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            uri=data.get("uri"),
            description=data.get("description"),
            owner_id=owner.get("id"),
            owner_name=owner.get("display_name"),
            total_tracks=(
                tracks_meta.get("total")
                if isinstance(tracks_meta, dict)
                else None
            ),
            image_url=_first_image_url(data.get("images")),
        )

    @classmethod
    def list_from_spotify(
        cls, items: Optional[List[Dict[str, Any]]]
    ) -> List["PlaylistSummary"]:
        # Spotify search results can contain null playlist entries
        return [cls.from_spotify(item) for item in items or [] if item]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "uri": self.uri,
            "description": self.description,
            "owner_id": self.owner_id,
            "owner_name": self.owner_name,
            "total_tracks": self.total_tracks,
            "image_url": self.image_url,
        }


@dataclass
class Category:
    """A browse category."""

    id: str
    name: str
    icon_url: Optional[str] = None

    @classmethod
    def from_spotify(cls, data: Dict[str, Any]) -> "Category":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            icon_url=_first_image_url(data.get("icons")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "icon_url": self.icon_url}


@dataclass
class Device:
    """A Spotify Connect device."""

    id: Optional[str]
    name: str
    type: Optional[str] = None
    is_active: bool = False
    volume_percent: Optional[int] = None

    @classmethod
    def from_spotify(cls, data: Dict[str, Any]) -> "Device":
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            type=data.get("type"),
            is_active=bool(data.get("is_active")),
            volume_percent=data.get("volume_percent"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "is_active": self.is_active,
            "volume_percent": self.volume_percent,
        }


@dataclass
class PlaybackState:
    """What is playing right now, and where."""

    item: Dict[str, Any]
    is_playing: bool
    device_id: Optional[str] = None
    progress_ms: Optional[int] = None

    @classmethod
    def from_spotify(cls, data: Optional[Dict[str, Any]]) -> Optional["PlaybackState"]:
        """Return None when nothing is playing (empty body or no item)."""
        if not data or not data.get("item"):
            return None
        return cls(
            item=data["item"],
            is_playing=bool(data.get("is_playing")),
            device_id=(data.get("device") or {}).get("id"),
            progress_ms=data.get("progress_ms"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item": self.item,
            "is_playing": self.is_playing,
            "device_id": self.device_id,
            "progress_ms": self.progress_ms,
        }


@dataclass(frozen=True)
class PlayBody:
    """
    Body for PUT /me/player/play.

    Either a context (with optional offset) or a URI list, never both.
    """

    context_uri: Optional[str] = None
    offset_uri: Optional[str] = None
    uris: Optional[List[str]] = None

    def __post_init__(self) -> None:
        if self.context_uri and self.uris:
            raise ValueError("A play body cannot carry both a context and URIs")
        if self.offset_uri and not self.context_uri:
            raise ValueError("An offset requires a context")

    @property
    def is_empty(self) -> bool:
        return not self.context_uri and not self.uris

    def to_dict(self) -> Dict[str, Any]:
        if self.context_uri:
            body: Dict[str, Any] = {"context_uri": self.context_uri}
            if self.offset_uri:
                body["offset"] = {"uri": self.offset_uri}
            return body
        if self.uris:
            return {"uris": list(self.uris)}
        return {}


@dataclass
class VideoResult:
    """A video found for a track."""

    video_id: str
    title: str
    url: str
    thumbnail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "videoId": self.video_id,
            "title": self.title,
            "thumbnail": self.thumbnail,
            "url": self.url,
        }
