"""
Spotify API error policy for domain operations.

State-changing operations let gateway errors propagate. Read-heavy and
polling operations are wrapped with ``best_effort`` so transient upstream
failures return a neutral value instead of breaking the caller.
"""

import logging
from functools import wraps
from typing import Any, Callable

from .exceptions import (
    SpotifyError,
    SpotifyNotConnectedError,
    SpotifySessionExpiredError,
)

logger = logging.getLogger(__name__)

# Errors that always reach the caller: the user must (re)connect.
_AUTH_ERRORS = (SpotifyNotConnectedError, SpotifySessionExpiredError)


def _classify_error(exception: Exception) -> str:
    """
    Classify a Spotify exception into a log-friendly category.

    Returns one of: 'not_connected', 'session_expired', 'rate_limited',
    'not_found', 'upstream_error'.
    """
    if isinstance(exception, SpotifyNotConnectedError):
        return "not_connected"
    if isinstance(exception, SpotifySessionExpiredError):
        return "session_expired"
    status = getattr(exception, "status_code", None)
    if status == 429:
        return "rate_limited"
    if status == 404:
        return "not_found"
    return "upstream_error"


def best_effort(default_factory: Callable[[], Any]) -> Callable:
    """
    Decorator returning ``default_factory()`` when the call fails upstream.

    Authorization failures (not connected, session expired) are re-raised
    so the HTTP layer can answer 401.

    Usage::

        @best_effort(list)
        def get_top_tracks(self): ...
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except _AUTH_ERRORS:
                raise
            except SpotifyError as e:
                logger.warning(
                    "%s in %s, returning neutral value: %s",
                    _classify_error(e), func.__name__, e,
                )
                return default_factory()

        return wrapper

    return decorator
