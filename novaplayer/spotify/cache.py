"""
Per-user response cache for Spotify API reads.

Entries are addressed by (user id, logical key) and carry an absolute
expiry. Expired entries are kept so that a failed refresh can fall back
to the last good value. Storage is pluggable: an in-process dict for a
single instance, or Redis when several instances share state.
"""

import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

import redis

from .exceptions import SpotifyError, SpotifyNotConnectedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Recommended TTLs (seconds) by resource volatility
NOW_PLAYING_TTL = 2
FOLLOW_STATUS_TTL = 300
ARTIST_TTL = 3600
CATEGORIES_TTL = 3600
CATEGORY_PLAYLISTS_TTL = 1800
REGION_TTL = 86400


@dataclass
class CacheEntry:
    """A cached value and the absolute time it stops being fresh."""

    value: Any
    expires_at: float

    def is_live(self, now: float) -> bool:
        return now < self.expires_at


class CacheBackend(ABC):
    """Storage for cache entries."""

    @abstractmethod
    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for ``key`` (live or stale), or None."""

    @abstractmethod
    def set(self, key: str, entry: CacheEntry) -> None:
        """Store or overwrite the entry for ``key``."""


class MemoryCacheBackend(CacheBackend):
    """
    Process-local backend.

    Unbounded: relies on the small, fixed set of logical keys per user.
    """

    def __init__(self):
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[key] = entry

    def __len__(self) -> int:
        return len(self._entries)


class RedisCacheBackend(CacheBackend):
    """
    Redis backend shared across app instances.

    Entries are JSON-encoded. Each key lives ``stale_retention`` seconds
    past its own expiry so stale fallbacks keep working without growing
    forever. Redis failures degrade to cache misses.
    """

    def __init__(self, redis_client: redis.Redis, stale_retention: int = 86400):
        self._redis = redis_client
        self._stale_retention = stale_retention

    def _serialize(self, entry: CacheEntry) -> bytes:
        return json.dumps(
            {"value": entry.value, "expires_at": entry.expires_at}
        ).encode("utf-8")

    def _deserialize(self, data: bytes) -> CacheEntry:
        payload = json.loads(data.decode("utf-8"))
        return CacheEntry(value=payload["value"], expires_at=payload["expires_at"])

    def get(self, key: str) -> Optional[CacheEntry]:
        try:
            data = self._redis.get(key)
        except redis.RedisError as e:
            logger.warning(f"Redis error reading cache key {key}: {e}")
            return None
        if data is None:
            return None
        try:
            return self._deserialize(data)
        except (ValueError, KeyError) as e:
            logger.warning(f"Discarding unreadable cache entry {key}: {e}")
            return None

    def set(self, key: str, entry: CacheEntry) -> None:
        ttl = max(1, int(entry.expires_at - time.time()) + self._stale_retention)
        try:
            self._redis.setex(key, ttl, self._serialize(entry))
        except redis.RedisError as e:
            logger.warning(f"Redis error writing cache key {key}: {e}")


class ResponseCache:
    """
    Read-through cache keyed by (user id, logical key).

    Example:
        cache = ResponseCache(MemoryCacheBackend())
        region = cache.get_cached(user.id, "region", REGION_TTL, fetch_region)
    """

    def __init__(
        self,
        backend: CacheBackend,
        key_prefix: str = "novaplayer:cache:",
        clock: Callable[[], float] = time.time,
    ):
        self._backend = backend
        self._prefix = key_prefix
        self._clock = clock

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    def _make_key(self, user_id: Any, key: str) -> str:
        return f"{self._prefix}{user_id}:{key}"

    def get_cached(
        self,
        user_id: Any,
        key: str,
        ttl_seconds: float,
        fetch_fn: Callable[[], T],
    ) -> T:
        """
        Return the cached value for (user_id, key), fetching it when stale.

        If ``fetch_fn`` fails with a Spotify error and an older value exists,
        the older value is returned instead. A missing connection is never
        masked by stale data.
        """
        cache_key = self._make_key(user_id, key)
        entry = self._backend.get(cache_key)
        if entry is not None and entry.is_live(self._clock()):
            logger.debug(f"Cache hit: {cache_key}")
            return entry.value

        try:
            value = fetch_fn()
        except SpotifyNotConnectedError:
            raise
        except SpotifyError as e:
            if entry is None:
                raise
            logger.warning(
                f"Refresh of {cache_key} failed ({e}); serving stale value"
            )
            return entry.value

        self.set(user_id, key, value, ttl_seconds)
        return value

    def set(self, user_id: Any, key: str, value: Any, ttl_seconds: float) -> None:
        """Store or overwrite a value for (user_id, key)."""
        cache_key = self._make_key(user_id, key)
        self._backend.set(
            cache_key,
            CacheEntry(value=value, expires_at=self._clock() + ttl_seconds),
        )
        logger.debug(f"Cached {cache_key} (TTL: {ttl_seconds}s)")
