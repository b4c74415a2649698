"""
Metadata cache and background fetch guard.

Both objects are process-wide shared state. They are constructed once by
the SqueezeCloud service and handed to every component that needs them,
instead of living in module globals.

MetadataCache:
    Maps a track id to its PlaybackMetadata with a time-to-live. The clock
    is injected so expiry can be tested without sleeping. Entries older
    than their TTL are treated as absent (and dropped on access).

FetchGuard:
    A set of (player_id, track_id) pairs with a background metadata fetch
    in flight. try_begin() atomically claims a pair; end() releases it
    unconditionally. Foreground playback resolution does not go through
    the guard.

Thread Safety:
    Both classes protect their state with a lock, so a host may poll from
    a thread other than the one running the event loop.
"""

import threading
import time
from typing import Callable, Generic, Hashable, TypeVar


V = TypeVar("V")

# 24 hours
DEFAULT_METADATA_TTL = 86400.0


class MetadataCache(Generic[V]):
    """
    In-memory TTL store keyed by track id.

    Writes are single-key upserts; the last writer wins. Every write also
    drops entries that have expired, so keys that are never read again do
    not pile up.

    Example:
        cache = MetadataCache(ttl=86400)
        cache.set("42", metadata)
        cache.get("42")  # metadata, until 24 hours have passed
    """

    def __init__(
        self,
        ttl: float = DEFAULT_METADATA_TTL,
        clock: Callable[[], float] = time.monotonic
    ) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.ttl = ttl
        self._clock = clock
        self._data: dict[Hashable, tuple[V, float]] = {}
        self._next_expiry = float("inf")
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> V | None:
        """Return the cached value, or None if absent or expired."""
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._data[key]
                return None
            return value

    def set(self, key: Hashable, value: V, ttl: float | None = None) -> None:
        """Store `value` under `key` for `ttl` seconds (default: the cache TTL)."""
        now = self._clock()
        expires_at = now + (self.ttl if ttl is None else ttl)
        with self._lock:
            if now >= self._next_expiry:
                self._evict_expired(now)
            self._data[key] = (value, expires_at)
            self._next_expiry = min(self._next_expiry, expires_at)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def purge_expired(self) -> int:
        """Drop all expired entries and return how many were removed."""
        now = self._clock()
        with self._lock:
            return self._evict_expired(now)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
            self._next_expiry = float("inf")

    def _evict_expired(self, now: float) -> int:
        # Caller holds the lock
        expired = [key for key, (_, expires_at) in self._data.items() if now >= expires_at]
        for key in expired:
            del self._data[key]
        self._next_expiry = min((expires_at for _, expires_at in self._data.values()), default=float("inf"))
        return len(expired)


class FetchGuard:
    """
    In-flight flags for background metadata fetches.

    Example:
        if guard.try_begin(player_id, track_id):
            try:
                ...  # fetch
            finally:
                guard.end(player_id, track_id)
    """

    def __init__(self) -> None:
        self._in_flight: set[tuple[str, str]] = set()
        self._lock = threading.Lock()

    def try_begin(self, player_id: str, track_id: str) -> bool:
        """
        Claim the fetch for (player_id, track_id).

        Returns:
            True if the caller now owns the fetch, False if one is
            already in flight for this pair.
        """
        key = (player_id, track_id)
        with self._lock:
            if key in self._in_flight:
                return False
            self._in_flight.add(key)
            return True

    def end(self, player_id: str, track_id: str) -> None:
        """Release the pair. Called on both success and failure paths."""
        with self._lock:
            self._in_flight.discard((player_id, track_id))

    def is_fetching(self, player_id: str, track_id: str) -> bool:
        with self._lock:
            return (player_id, track_id) in self._in_flight
