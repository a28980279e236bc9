"""
Spotify module exceptions.

Provides a clean exception hierarchy for Spotify API operations.
"""

from typing import Any, Optional


class SpotifyError(Exception):
    """Base exception for all Spotify-related errors."""
    pass


class SpotifyAuthError(SpotifyError):
    """Raised when authentication/authorization fails."""
    pass


class SpotifyNotConnectedError(SpotifyAuthError):
    """Raised when a user has no Spotify credentials on file."""
    pass


class SpotifyTokenError(SpotifyAuthError):
    """Raised when token operations fail."""
    pass


class SpotifySessionExpiredError(SpotifyTokenError):
    """Raised when a token has expired and cannot be refreshed."""
    pass


class SpotifyAPIError(SpotifyError):
    """
    Raised when a Spotify API call fails.

    Carries the upstream status code and body when a response was received.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class SpotifyRateLimitError(SpotifyAPIError):
    """Raised when rate limited by Spotify API."""

    def __init__(
        self,
        message: str,
        retry_after: Optional[float] = None,
        status_code: Optional[int] = 429,
        body: Any = None,
    ):
        super().__init__(message, status_code=status_code, body=body)
        self.retry_after = retry_after


class SpotifyNotFoundError(SpotifyAPIError):
    """Raised when a requested resource is not found."""
    pass
