"""
Spotify application credentials.

Read once from the Flask config and handed to SpotifyAuthManager, so the
OAuth code never touches ``current_app``.
"""

from dataclasses import dataclass
from typing import Mapping, Tuple


@dataclass(frozen=True)
class SpotifyCredentials:
    """
    Client id, client secret and registered callback URL of the app.

    Example:
        credentials = SpotifyCredentials.from_flask_config(app.config)
    """

    client_id: str
    client_secret: str
    redirect_uri: str

    def __post_init__(self):
        for name in ("client_id", "client_secret", "redirect_uri"):
            if not getattr(self, name):
                raise ValueError(f"{name} is required")
        if not self.redirect_uri.startswith(("http://", "https://")):
            raise ValueError(
                f"redirect_uri must be an absolute http(s) URL: "
                f"{self.redirect_uri!r}"
            )

    @property
    def basic_auth(self) -> Tuple[str, str]:
        """(client_id, client_secret) for HTTP Basic auth on the token endpoint."""
        return (self.client_id, self.client_secret)

    @classmethod
    def from_flask_config(cls, config: Mapping) -> "SpotifyCredentials":
        """
        Raises:
            ValueError: If a SPOTIFY_* setting is missing or malformed.
        """
        return cls(
            client_id=config.get("SPOTIFY_CLIENT_ID") or "",
            client_secret=config.get("SPOTIFY_CLIENT_SECRET") or "",
            redirect_uri=config.get("SPOTIFY_REDIRECT_URI") or "",
        )
