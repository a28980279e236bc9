"""
Spotify authentication and token management.

Handles the OAuth authorization-code flow, token refresh, and the
profile lookup that links a Spotify account to a local user. Token
storage is not handled here; callers persist what this module returns.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
from urllib.parse import urlencode

import requests

from .credentials import SpotifyCredentials
from .exceptions import (
    SpotifyAuthError,
    SpotifyTokenError,
)

logger = logging.getLogger(__name__)


# Scopes needed by the playback, library and browse endpoints
DEFAULT_SCOPES = [
    "user-read-email",
    "user-read-private",
    "user-top-read",
    "user-library-read",
    "user-library-modify",
    "user-follow-read",
    "user-follow-modify",
    "playlist-read-private",
    "playlist-read-collaborative",
    "playlist-modify-public",
    "playlist-modify-private",
    "ugc-image-upload",
    "streaming",
    "user-read-playback-state",
    "user-modify-playback-state",
    "user-read-currently-playing",
    "user-read-recently-played",
]


@dataclass
class TokenInfo:
    """
    Structured container for OAuth token information.

    ``refresh_token`` is None when Spotify did not issue a new one
    (refresh-token rotation is optional upstream).
    """

    access_token: str
    token_type: str
    expires_at: float
    refresh_token: Optional[str] = None
    scope: Optional[str] = None
    expires_in: Optional[int] = None

    _raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenInfo":
        """
        Create TokenInfo from a token endpoint response.

        Raises:
            SpotifyTokenError: If required fields are missing.
        """
        if not isinstance(data, dict):
            raise SpotifyTokenError(
                f"Token data must be a dictionary, got {type(data)}"
            )

        required = ["access_token", "token_type"]
        missing = [k for k in required if k not in data]
        if missing:
            raise SpotifyTokenError(f"Token missing required fields: {missing}")

        expires_at = data.get("expires_at")
        if expires_at is None:
            expires_in = data.get("expires_in", 3600)
            expires_at = time.time() + expires_in

        return cls(
            access_token=data["access_token"],
            token_type=data["token_type"],
            expires_at=expires_at,
            refresh_token=data.get("refresh_token"),
            scope=data.get("scope"),
            expires_in=data.get("expires_in"),
            _raw=data.copy(),
        )


@dataclass
class SpotifyProfile:
    """The subset of a Spotify user profile used to link accounts."""

    spotify_id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpotifyProfile":
        if not data or not data.get("id"):
            raise SpotifyAuthError("Spotify profile is missing 'id'")
        images: List[Dict[str, Any]] = data.get("images") or []
        return cls(
            spotify_id=data["id"],
            display_name=data.get("display_name"),
            email=data.get("email"),
            image_url=images[0].get("url") if images else None,
        )


class SpotifyAuthManager:
    """
    Manages Spotify OAuth authentication.

    Stateless regarding tokens: it operates on the values passed to it.

    Example:
        auth_manager = SpotifyAuthManager(credentials)
        auth_url = auth_manager.get_auth_url(state="abc")
        token_info = auth_manager.exchange_code(code)
        profile = auth_manager.get_profile(token_info.access_token)
    """

    _AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
    _TOKEN_URL = "https://accounts.spotify.com/api/token"
    _PROFILE_URL = "https://api.spotify.com/v1/me"

    def __init__(self, credentials: SpotifyCredentials, scopes: Optional[list] = None):
        self._credentials = credentials
        self._scopes = scopes or DEFAULT_SCOPES
        self._scope_string = " ".join(self._scopes)

    def get_auth_url(self, state: Optional[str] = None) -> str:
        """Generate the Spotify authorization URL."""
        params = {
            "client_id": self._credentials.client_id,
            "response_type": "code",
            "redirect_uri": self._credentials.redirect_uri,
            "scope": self._scope_string,
        }
        if state:
            params["state"] = state

        url = f"{self._AUTHORIZE_URL}?{urlencode(params)}"
        logger.debug(f"Generated auth URL: {url[:50]}...")
        return url

    def exchange_code(self, code: str) -> TokenInfo:
        """
        Exchange an authorization code for tokens.

        Raises:
            SpotifyAuthError: If code is missing.
            SpotifyTokenError: If token exchange fails.
        """
        if not code:
            raise SpotifyAuthError("Authorization code is required")

        token_info = self._post_token({
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self._credentials.redirect_uri,
        })
        logger.info("Successfully exchanged code for token")
        return token_info

    def refresh_access_token(self, refresh_token: str) -> TokenInfo:
        """
        Obtain a new access token using a refresh token.

        The returned TokenInfo only carries a refresh_token when Spotify
        rotated it.

        Raises:
            SpotifyTokenError: If refresh fails.
        """
        if not refresh_token:
            raise SpotifyTokenError(
                "Cannot refresh: no refresh_token available"
            )

        token_info = self._post_token({
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        })
        logger.info("Successfully refreshed token")
        return token_info

    def get_profile(self, access_token: str) -> SpotifyProfile:
        """
        Fetch the profile of the account that owns ``access_token``.

        Raises:
            SpotifyAuthError: If the profile cannot be fetched.
        """
        try:
            response = requests.get(
                self._PROFILE_URL,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=30,
            )
        except requests.RequestException as e:
            logger.error(f"Profile fetch failed: {e}")
            raise SpotifyAuthError(f"Failed to fetch Spotify profile: {e}")

        if not response.ok:
            raise SpotifyAuthError(
                f"Failed to fetch Spotify profile: HTTP {response.status_code}"
            )
        return SpotifyProfile.from_dict(response.json())

    def _post_token(self, data: Dict[str, str]) -> TokenInfo:
        """POST to the token endpoint with HTTP Basic client auth."""
        try:
            response = requests.post(
                self._TOKEN_URL,
                data=data,
                auth=self._credentials.basic_auth,
                timeout=30,
            )
        except requests.RequestException as e:
            logger.error(f"Token request failed: {e}", exc_info=True)
            raise SpotifyTokenError(f"Token request failed: {e}")

        if response.status_code != 200:
            try:
                error_msg = response.json().get(
                    "error_description", response.text
                )
            except ValueError:
                error_msg = response.text
            raise SpotifyTokenError(
                f"Token request failed ({data['grant_type']}): {error_msg}"
            )

        token_data = response.json()
        if not token_data:
            raise SpotifyTokenError("No token returned from Spotify")
        return TokenInfo.from_dict(token_data)
