"""
Gateway for all calls to the Spotify Web API.

Wraps requests.Session with per-user token lookup, refresh on 401,
and rate limit backoff with jitter on 429. Every domain operation goes
through SpotifyGateway.request().
"""

import logging
import random
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional, Protocol

import requests
from requests.exceptions import RequestException

from .auth import SpotifyAuthManager
from .exceptions import (
    SpotifyAPIError,
    SpotifyError,
    SpotifyNotConnectedError,
    SpotifyNotFoundError,
    SpotifyRateLimitError,
    SpotifySessionExpiredError,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://api.spotify.com/v1"
DEFAULT_RETRY_BUDGET = 3
DEFAULT_RETRY_AFTER = 2  # seconds, when Spotify sends no Retry-After
SAFETY_MARGIN = 1  # seconds added on top of Retry-After
MAX_JITTER = 1.0  # seconds
REQUEST_TIMEOUT = 30  # seconds


class CredentialStore(Protocol):
    """Where the gateway reads and writes a user's Spotify tokens."""

    def get_access_token(self, user_id: int) -> Optional[str]:
        ...

    def get_refresh_token(self, user_id: int) -> Optional[str]:
        """Return the decrypted refresh token, or None."""
        ...

    def save_tokens(
        self,
        user_id: int,
        access_token: str,
        refresh_token: Optional[str] = None,
    ) -> None:
        ...


@dataclass(frozen=True)
class OutboundRequest:
    """One logical call to Spotify, threaded through retries."""

    user_id: int
    method: str
    url: str
    params: Optional[Dict[str, Any]] = None
    json: Any = None
    data: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    retry_budget: int = DEFAULT_RETRY_BUDGET


def build_url(path: str) -> str:
    """Absolute URLs pass through; relative paths are joined to BASE_URL."""
    if path.startswith(("http://", "https://")):
        return path
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{BASE_URL}{path}"


def parse_retry_after(value: Optional[str]) -> float:
    """Seconds Spotify asked us to wait, or DEFAULT_RETRY_AFTER."""
    if value is None:
        return DEFAULT_RETRY_AFTER
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return DEFAULT_RETRY_AFTER
    return max(seconds, 0)


def calculate_retry_delay(
    retry_after: Optional[str],
    rng: Callable[[], float] = random.random,
) -> float:
    """
    Delay before retrying a 429.

    Retry-After (default 2s) plus a 1s margin plus jitter in [0, 1)s, so
    requests throttled in the same window do not retry in lockstep.
    """
    jitter = rng() * MAX_JITTER
    return parse_retry_after(retry_after) + SAFETY_MARGIN + jitter


def _decode_body(response: requests.Response) -> Any:
    """Return the response body as JSON when possible, else text or None."""
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_message(body: Any, fallback: str) -> str:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return error.get("message", fallback)
        if isinstance(error, str):
            return body.get("error_description", error)
    return fallback


class SpotifyGateway:
    """
    Single chokepoint for Spotify Web API requests.

    Handles bearer tokens per user, token refresh on 401 (serialized per
    user), and Retry-After backoff on 429. Other errors propagate as
    typed SpotifyError subclasses.

    Example:
        gateway = SpotifyGateway(CredentialService, auth_manager)
        playlists = gateway.request(user.id, "GET", "/me/playlists")
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        auth_manager: SpotifyAuthManager,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Callable[[], float] = random.random,
        default_retry_budget: int = DEFAULT_RETRY_BUDGET,
    ):
        self._store = credential_store
        self._auth_manager = auth_manager
        self._session = session or requests.Session()
        self._sleep = sleep
        self._rng = rng
        self._default_retry_budget = default_retry_budget
        self._refresh_locks: Dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def require_access_token(self, user_id: int) -> str:
        """
        Return the user's stored access token.

        Raises:
            SpotifyNotConnectedError: If the user never linked Spotify.
        """
        access_token = self._store.get_access_token(user_id)
        if not access_token:
            raise SpotifyNotConnectedError(
                f"User {user_id} is not connected to Spotify"
            )
        return access_token

    def request(
        self,
        user_id: int,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None,
        retry_budget: Optional[int] = None,
    ) -> Any:
        """
        Perform one logical call to Spotify on behalf of a user.

        Args:
            user_id: Local user whose credentials are used.
            method: HTTP verb.
            path: Path under BASE_URL, or an absolute URL.
            params: Query parameters.
            json: JSON body.
            data: Raw body (e.g. base64 image upload).
            headers: Extra headers.
            retry_budget: 429 retries allowed. 0 fails fast.

        Returns:
            The decoded response body, unchanged.

        Raises:
            SpotifyNotConnectedError: No credentials on file.
            SpotifySessionExpiredError: Refresh failed or token still rejected.
            SpotifyRateLimitError: Still throttled with no budget left.
            SpotifyNotFoundError: Resource does not exist.
            SpotifyAPIError: Any other upstream failure.
        """
        access_token = self.require_access_token(user_id)
        outbound = OutboundRequest(
            user_id=user_id,
            method=method.upper(),
            url=build_url(path),
            params=params,
            json=json,
            data=data,
            headers=dict(headers or {}),
            retry_budget=(
                self._default_retry_budget if retry_budget is None
                else retry_budget
            ),
        )

        refreshed = False
        while True:
            response = self._send(outbound, access_token)

            if response.ok:
                return _decode_body(response)

            # --- 401 Unauthorized: refresh once, then give up ---
            if response.status_code == 401:
                if refreshed:
                    raise SpotifySessionExpiredError(
                        "Spotify rejected the refreshed token"
                    )
                logger.info(
                    "401 from %s %s, refreshing token for user %s",
                    outbound.method, outbound.url, user_id,
                )
                access_token = self._refresh_access_token(
                    user_id, stale_token=access_token
                )
                refreshed = True
                continue

            # --- 429 Rate Limited ---
            if response.status_code == 429 and outbound.retry_budget > 0:
                delay = calculate_retry_delay(
                    response.headers.get("Retry-After"), self._rng
                )
                logger.warning(
                    "Rate limited (429) on %s %s, retrying in %.2fs "
                    "(%d retries left)",
                    outbound.method, outbound.url, delay,
                    outbound.retry_budget - 1,
                )
                self._sleep(delay)
                outbound = replace(
                    outbound, retry_budget=outbound.retry_budget - 1
                )
                continue

            raise self._error_for(response, outbound)

    def refresh_credentials(self, user_id: int) -> str:
        """
        Force a token refresh for a user and return the new access token.

        Raises:
            SpotifyNotConnectedError: No refresh token on file.
            SpotifySessionExpiredError: Spotify refused the refresh.
        """
        self.require_access_token(user_id)
        return self._refresh_access_token(user_id, stale_token=None)

    # -----------------------------------------------------------------
    # Internal request handling
    # -----------------------------------------------------------------

    def _send(
        self, outbound: OutboundRequest, access_token: str
    ) -> requests.Response:
        headers = {"Authorization": f"Bearer {access_token}"}
        headers.update(outbound.headers)
        try:
            return self._session.request(
                outbound.method,
                outbound.url,
                params=outbound.params,
                json=outbound.json,
                data=outbound.data,
                headers=headers,
                timeout=REQUEST_TIMEOUT,
            )
        except RequestException as e:
            logger.error(
                "Network error on %s %s: %s",
                outbound.method, outbound.url, e,
            )
            raise SpotifyAPIError(f"Network error: {e}")

    def _error_for(
        self, response: requests.Response, outbound: OutboundRequest
    ) -> SpotifyAPIError:
        body = _decode_body(response)
        message = _error_message(body, response.text or response.reason or "")

        if response.status_code == 429:
            return SpotifyRateLimitError(
                f"Rate limited: {message}",
                retry_after=parse_retry_after(
                    response.headers.get("Retry-After")
                ),
                body=body,
            )
        if response.status_code == 404:
            return SpotifyNotFoundError(
                f"Resource not found: {outbound.url}",
                status_code=404,
                body=body,
            )
        logger.error(
            "Spotify API error %d on %s %s: %s",
            response.status_code, outbound.method, outbound.url, message,
        )
        return SpotifyAPIError(
            f"API error {response.status_code}: {message}",
            status_code=response.status_code,
            body=body,
        )

    # -----------------------------------------------------------------
    # Token refresh
    # -----------------------------------------------------------------

    def _lock_for(self, user_id: int) -> threading.Lock:
        with self._locks_guard:
            lock = self._refresh_locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                self._refresh_locks[user_id] = lock
            return lock

    def _refresh_access_token(
        self, user_id: int, stale_token: Optional[str]
    ) -> str:
        """
        Refresh the user's access token, one refresh per user at a time.

        When another request already replaced ``stale_token`` while we
        waited for the lock, its token is reused instead of refreshing
        again.
        """
        with self._lock_for(user_id):
            if stale_token is not None:
                current = self._store.get_access_token(user_id)
                if current and current != stale_token:
                    logger.debug(
                        "Token for user %s already refreshed concurrently",
                        user_id,
                    )
                    return current

            refresh_token = self._store.get_refresh_token(user_id)
            if not refresh_token:
                raise SpotifyNotConnectedError(
                    f"User {user_id} has no Spotify refresh token"
                )

            try:
                token_info = self._auth_manager.refresh_access_token(
                    refresh_token
                )
            except SpotifyError as e:
                logger.warning(
                    "Token refresh failed for user %s: %s", user_id, e
                )
                raise SpotifySessionExpiredError(
                    "Spotify session expired, please reconnect"
                )

            self._store.save_tokens(
                user_id,
                token_info.access_token,
                token_info.refresh_token,
            )
            logger.info("Refreshed Spotify token for user %s", user_id)
            return token_info.access_token
