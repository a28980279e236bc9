"""
Spotify API data operations.

Thin wrappers over SpotifyGateway for playback, library, playlists,
search and browse. Each operation picks a verb, path and parameters,
decides whether failures propagate or degrade, and reshapes the result.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from novaplayer.models.music import (
    Artist,
    Category,
    Device,
    PlaybackState,
    PlaylistSummary,
    Track,
)
from .cache import (
    ARTIST_TTL,
    CATEGORIES_TTL,
    CATEGORY_PLAYLISTS_TTL,
    FOLLOW_STATUS_TTL,
    NOW_PLAYING_TTL,
    REGION_TTL,
)
from .error_handling import best_effort
from .exceptions import SpotifyAPIError
from .http_client import SpotifyGateway
from .playback import build_play_body
from .url_parser import extract_spotify_id

if TYPE_CHECKING:
    from .cache import ResponseCache

logger = logging.getLogger(__name__)

DEFAULT_REGION = "US"
FEATURED_QUERY = "Top Hits author:spotify"


class SpotifyAPI:
    """
    Spotify Web API operations for one user.

    Example:
        api = SpotifyAPI(gateway, user.id, user.spotify_id, cache=cache)
        playlists = api.get_user_playlists()
        api.play(device_id="abc", context_uri="spotify:playlist:xyz")
    """

    SEARCH_LIMIT = 10
    TOP_TRACKS_LIMIT = 10
    SAVED_TRACKS_PAGE_SIZE = 50  # Spotify maximum
    FEATURED_LIMIT = 15
    PUBLIC_PLAYLISTS_LIMIT = 20
    CATEGORIES_LIMIT = 20
    CATEGORY_PLAYLISTS_LIMIT = 20
    RECENTLY_PLAYED_FETCH = 50

    def __init__(
        self,
        gateway: SpotifyGateway,
        user_id: int,
        spotify_user_id: Optional[str] = None,
        cache: Optional["ResponseCache"] = None,
    ):
        self._gateway = gateway
        self._user_id = user_id
        self._spotify_user_id = spotify_user_id
        self._cache = cache

    @property
    def user_id(self) -> int:
        return self._user_id

    # =========================================================================
    # Helpers
    # =========================================================================

    def _request(self, method: str, path: str, **kwargs) -> Any:
        return self._gateway.request(self._user_id, method, path, **kwargs)

    def _cached(self, key: str, ttl: float, fetch_fn: Callable[[], Any]) -> Any:
        # Connection is checked even on cache hits.
        self._gateway.require_access_token(self._user_id)
        if self._cache is None:
            return fetch_fn()
        return self._cache.get_cached(self._user_id, key, ttl, fetch_fn)

    def _remember(self, key: str, value: Any, ttl: float) -> None:
        if self._cache is not None:
            self._cache.set(self._user_id, key, value, ttl)

    @staticmethod
    def _device_params(device_id: Optional[str], **extra) -> Dict[str, Any]:
        params = {k: v for k, v in extra.items() if v is not None}
        if device_id:
            params["device_id"] = device_id
        return params

    def _get_spotify_user_id(self) -> str:
        if not self._spotify_user_id:
            profile = self._request("GET", "/me")
            self._spotify_user_id = profile["id"]
        return self._spotify_user_id

    # =========================================================================
    # User & Library
    # =========================================================================

    def get_access_token(self) -> str:
        """Current access token, for the frontend Web Playback SDK."""
        return self._gateway.require_access_token(self._user_id)

    @best_effort(lambda: DEFAULT_REGION)
    def get_user_region(self) -> str:
        """The user's country code, used as the market for browse calls."""
        profile = self._cached(
            "region", REGION_TTL, lambda: self._request("GET", "/me")
        )
        return (profile or {}).get("country") or DEFAULT_REGION

    def get_user_playlists(self) -> List[PlaylistSummary]:
        """Playlists owned or followed by the user."""
        data = self._request("GET", "/me/playlists")
        playlists = PlaylistSummary.list_from_spotify(data.get("items"))
        logger.debug(f"Retrieved {len(playlists)} playlists")
        return playlists

    def search(self, query: str, types: str = "track,artist") -> Dict[str, Any]:
        """Search the catalogue. Returns Spotify's payload unchanged."""
        return self._request(
            "GET",
            "/search",
            params={"q": query, "type": types, "limit": self.SEARCH_LIMIT},
        )

    @best_effort(list)
    def get_top_tracks(self) -> List[Track]:
        data = self._request(
            "GET", "/me/top/tracks", params={"limit": self.TOP_TRACKS_LIMIT}
        )
        return Track.list_from_spotify(data.get("items"))

    def get_saved_tracks(self, offset: int = 0) -> Dict[str, Any]:
        """One page of liked songs (Spotify paging object)."""
        return self._request(
            "GET",
            "/me/tracks",
            params={"limit": self.SAVED_TRACKS_PAGE_SIZE, "offset": max(offset, 0)},
        )

    @best_effort(lambda: False)
    def is_track_saved(self, track_id: str) -> bool:
        data = self._request(
            "GET",
            "/me/tracks/contains",
            params={"ids": extract_spotify_id(track_id, "track") or track_id},
        )
        return bool(data and data[0])

    def save_track(self, track_id: str) -> None:
        self._request(
            "PUT",
            "/me/tracks",
            params={"ids": extract_spotify_id(track_id, "track") or track_id},
        )
        logger.info(f"User {self._user_id} saved track {track_id}")

    def remove_track(self, track_id: str) -> None:
        self._request(
            "DELETE",
            "/me/tracks",
            params={"ids": extract_spotify_id(track_id, "track") or track_id},
        )
        logger.info(f"User {self._user_id} removed track {track_id}")

    def get_recently_played(self, limit: int = 20) -> List[Track]:
        """
        Recently played tracks, most recent first, each track once.

        Spotify lists every play; repeats are dropped keeping the most
        recent occurrence.
        """
        data = self._request(
            "GET",
            "/me/player/recently-played",
            params={"limit": self.RECENTLY_PLAYED_FETCH},
        )
        seen = set()
        tracks: List[Track] = []
        for item in (data or {}).get("items", []):
            track_data = (item or {}).get("track")
            if not track_data or not track_data.get("uri"):
                continue
            track = Track.from_spotify(track_data)
            dedupe_key = track.id or track.uri
            if dedupe_key in seen:
                continue
            seen.add(dedupe_key)
            tracks.append(track)
            if len(tracks) >= limit:
                break
        return tracks

    # =========================================================================
    # Playlist Operations
    # =========================================================================

    def get_playlist(self, playlist_id: str) -> Dict[str, Any]:
        """Playlist details including the first page of tracks."""
        return self._request("GET", f"/playlists/{playlist_id}")

    def create_playlist(
        self,
        name: str,
        description: str = "",
        image_base64: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a private playlist, optionally with a cover image.

        A failed cover upload is logged and does not undo the creation.
        """
        spotify_user_id = self._get_spotify_user_id()
        playlist = self._request(
            "POST",
            f"/users/{spotify_user_id}/playlists",
            json={"name": name, "description": description, "public": False},
        )
        logger.info(f"Created playlist {playlist.get('id')} for user {self._user_id}")

        if image_base64:
            try:
                self.upload_playlist_cover(playlist["id"], image_base64)
            except SpotifyAPIError as e:
                logger.error(
                    f"Cover upload failed for new playlist {playlist['id']}: {e}"
                )
        return playlist

    def edit_playlist(
        self,
        playlist_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        image_base64: Optional[str] = None,
    ) -> None:
        """Update name/description and/or the cover image."""
        details = {
            k: v
            for k, v in (("name", name), ("description", description))
            if v
        }
        if details:
            self._request("PUT", f"/playlists/{playlist_id}", json=details)
        if image_base64:
            self.upload_playlist_cover(playlist_id, image_base64)
        logger.info(f"Edited playlist {playlist_id}")

    def upload_playlist_cover(self, playlist_id: str, image_base64: str) -> None:
        """Spotify expects the raw base64 JPEG string as the body."""
        self._request(
            "PUT",
            f"/playlists/{playlist_id}/images",
            data=image_base64,
            headers={"Content-Type": "image/jpeg"},
        )

    def delete_playlist(self, playlist_id: str) -> None:
        """Spotify has no delete; unfollowing removes it from the library."""
        self._request("DELETE", f"/playlists/{playlist_id}/followers")
        logger.info(f"Unfollowed playlist {playlist_id}")

    # =========================================================================
    # Artists
    # =========================================================================

    def get_artist(self, artist_id: str) -> Artist:
        data = self._cached(
            f"artist:{artist_id}",
            ARTIST_TTL,
            lambda: self._request("GET", f"/artists/{artist_id}"),
        )
        return Artist.from_spotify(data)

    @best_effort(list)
    def get_artist_top_tracks(self, artist_id: str) -> List[Track]:
        data = self._request(
            "GET",
            f"/artists/{artist_id}/top-tracks",
            params={"market": self.get_user_region()},
        )
        return Track.list_from_spotify(data.get("tracks"))

    @best_effort(lambda: False)
    def is_following_artist(self, artist_id: str) -> bool:
        def fetch():
            data = self._request(
                "GET",
                "/me/following/contains",
                params={"type": "artist", "ids": artist_id},
            )
            return bool(data and data[0])

        return self._cached(f"follows-artist:{artist_id}", FOLLOW_STATUS_TTL, fetch)

    def follow_artist(self, artist_id: str) -> None:
        self._request(
            "PUT", "/me/following", params={"type": "artist", "ids": artist_id}
        )
        self._remember(f"follows-artist:{artist_id}", True, FOLLOW_STATUS_TTL)

    def unfollow_artist(self, artist_id: str) -> None:
        self._request(
            "DELETE", "/me/following", params={"type": "artist", "ids": artist_id}
        )
        self._remember(f"follows-artist:{artist_id}", False, FOLLOW_STATUS_TTL)

    # =========================================================================
    # Player
    # =========================================================================

    def play(
        self,
        device_id: Optional[str] = None,
        context_uri: Optional[str] = None,
        uris: Optional[List[str]] = None,
    ) -> None:
        """Start playback of a context or a list of tracks on a device."""
        body = build_play_body(context_uri, uris)
        self._request(
            "PUT",
            "/me/player/play",
            params=self._device_params(device_id),
            json=body.to_dict(),
        )

    def resume(self, device_id: Optional[str] = None) -> None:
        self._request(
            "PUT", "/me/player/play", params=self._device_params(device_id)
        )

    @best_effort(lambda: False)
    def pause(self, device_id: Optional[str] = None) -> bool:
        # Spotify errors when already paused
        self._request(
            "PUT", "/me/player/pause", params=self._device_params(device_id)
        )
        return True

    def next_track(self, device_id: Optional[str] = None) -> None:
        self._request(
            "POST", "/me/player/next", params=self._device_params(device_id)
        )

    def previous_track(self, device_id: Optional[str] = None) -> None:
        self._request(
            "POST", "/me/player/previous", params=self._device_params(device_id)
        )

    def seek(self, position_ms: int, device_id: Optional[str] = None) -> None:
        self._request(
            "PUT",
            "/me/player/seek",
            params=self._device_params(device_id, position_ms=position_ms),
        )

    @best_effort(lambda: False)
    def set_volume(self, volume_percent: int, device_id: Optional[str] = None) -> bool:
        # Some devices do not support remote volume
        self._request(
            "PUT",
            "/me/player/volume",
            params=self._device_params(device_id, volume_percent=volume_percent),
        )
        return True

    def transfer(self, device_id: str, play: bool = True) -> None:
        self._request(
            "PUT", "/me/player", json={"device_ids": [device_id], "play": play}
        )

    def get_devices(self) -> List[Device]:
        data = self._request("GET", "/me/player/devices")
        return [Device.from_spotify(d) for d in (data or {}).get("devices", [])]

    @best_effort(lambda: None)
    def get_currently_playing(self) -> Optional[PlaybackState]:
        """
        What is playing now, or None.

        Polled by the frontend: fails fast on throttling and never raises
        upstream errors.
        """
        data = self._cached(
            "now-playing",
            NOW_PLAYING_TTL,
            lambda: self._request(
                "GET", "/me/player/currently-playing", retry_budget=0
            ),
        )
        return PlaybackState.from_spotify(data)

    def get_queue(self) -> Dict[str, Any]:
        data = self._request("GET", "/me/player/queue") or {}
        current = data.get("currently_playing")
        return {
            "currently_playing": (
                Track.from_spotify(current) if current else None
            ),
            "queue": Track.list_from_spotify(data.get("queue")),
        }

    def add_to_queue(self, uri: str, device_id: Optional[str] = None) -> None:
        self._request(
            "POST",
            "/me/player/queue",
            params=self._device_params(device_id, uri=uri),
        )

    # =========================================================================
    # Browse
    # =========================================================================

    @best_effort(list)
    def get_featured_playlists(self) -> List[PlaylistSummary]:
        """Official Spotify playlists relevant to the user's market."""
        data = self._request(
            "GET",
            "/search",
            params={
                "q": FEATURED_QUERY,
                "type": "playlist",
                "market": self.get_user_region(),
                "limit": self.FEATURED_LIMIT,
            },
        )
        return PlaylistSummary.list_from_spotify(
            (data.get("playlists") or {}).get("items")
        )

    def get_categories(self) -> List[Category]:
        country = self.get_user_region()
        data = self._cached(
            f"categories:{country}",
            CATEGORIES_TTL,
            lambda: self._request(
                "GET",
                "/browse/categories",
                params={"country": country, "limit": self.CATEGORIES_LIMIT},
            ),
        )
        items = ((data or {}).get("categories") or {}).get("items", [])
        return [Category.from_spotify(item) for item in items if item]

    def get_category_playlists(self, category_id: str) -> List[PlaylistSummary]:
        country = self.get_user_region()
        data = self._cached(
            f"category-playlists:{category_id}:{country}",
            CATEGORY_PLAYLISTS_TTL,
            lambda: self._request(
                "GET",
                f"/browse/categories/{category_id}/playlists",
                params={
                    "country": country,
                    "limit": self.CATEGORY_PLAYLISTS_LIMIT,
                },
            ),
        )
        return PlaylistSummary.list_from_spotify(
            ((data or {}).get("playlists") or {}).get("items")
        )

    def get_public_profile(self, spotify_user_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/users/{spotify_user_id}")

    @best_effort(list)
    def get_public_playlists(self, spotify_user_id: str) -> List[PlaylistSummary]:
        data = self._request(
            "GET",
            f"/users/{spotify_user_id}/playlists",
            params={"limit": self.PUBLIC_PLAYLISTS_LIMIT},
        )
        return PlaylistSummary.list_from_spotify(data.get("items"))
