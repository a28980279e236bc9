"""
Spotify API integration module.

Architecture:
    - credentials.py: SpotifyCredentials for config/DI
    - auth.py: SpotifyAuthManager for OAuth and token refresh
    - http_client.py: SpotifyGateway, the single path to the Web API
    - cache.py: ResponseCache with memory or Redis backends
    - api.py: SpotifyAPI for data operations
    - playback.py: play request body shaping
    - error_handling.py: best-effort policy for read operations
    - exceptions.py: Exception hierarchy

Usage:
    from novaplayer.spotify import (
        SpotifyCredentials,
        SpotifyAuthManager,
        SpotifyGateway,
        SpotifyAPI,
        ResponseCache,
        MemoryCacheBackend,
    )

    credentials = SpotifyCredentials.from_flask_config(app.config)
    auth_manager = SpotifyAuthManager(credentials)
    gateway = SpotifyGateway(CredentialService, auth_manager)
    cache = ResponseCache(MemoryCacheBackend())

    api = SpotifyAPI(gateway, user.id, user.spotify_id, cache=cache)
    playlists = api.get_user_playlists()
"""

# Credentials (for dependency injection)
from .credentials import SpotifyCredentials

# Auth (OAuth and token refresh)
from .auth import (
    SpotifyAuthManager,
    SpotifyProfile,
    TokenInfo,
    DEFAULT_SCOPES,
)

# Gateway
from .http_client import SpotifyGateway, CredentialStore

# Cache
from .cache import (
    ResponseCache,
    CacheBackend,
    MemoryCacheBackend,
    RedisCacheBackend,
)

# API (data operations)
from .api import SpotifyAPI

# Playback
from .playback import build_play_body

# Exceptions
from .exceptions import (
    SpotifyError,
    SpotifyAuthError,
    SpotifyNotConnectedError,
    SpotifyTokenError,
    SpotifySessionExpiredError,
    SpotifyAPIError,
    SpotifyRateLimitError,
    SpotifyNotFoundError,
)


__all__ = [
    # Credentials
    'SpotifyCredentials',

    # Auth
    'SpotifyAuthManager',
    'SpotifyProfile',
    'TokenInfo',
    'DEFAULT_SCOPES',

    # Gateway
    'SpotifyGateway',
    'CredentialStore',

    # Cache
    'ResponseCache',
    'CacheBackend',
    'MemoryCacheBackend',
    'RedisCacheBackend',

    # API
    'SpotifyAPI',

    # Playback
    'build_play_body',

    # Exceptions
    'SpotifyError',
    'SpotifyAuthError',
    'SpotifyNotConnectedError',
    'SpotifyTokenError',
    'SpotifySessionExpiredError',
    'SpotifyAPIError',
    'SpotifyRateLimitError',
    'SpotifyNotFoundError',
]
