"""
Metadata provider for the host's "now playing" poll.

The host polls get_cached_metadata() while a track plays. The call never
blocks: it answers from the MetadataCache, and on a miss it scans the
player's queue, claims every uncached track through the FetchGuard and
schedules one descriptor-only fetch per claimed track on the event loop.
Until those land, the poll gets PlaybackMetadata.placeholder().

Background fetches release their guard entry whether they succeed or not,
so a failing track is retried at most once per poll.

refresh() is the explicit, awaitable variant. Refreshes are keyed by
(player_id, trigger); a newer refresh for the same key supersedes an
older one, whose result is discarded when it arrives.
"""

import asyncio
import threading
from typing import Coroutine, Iterable

from squeezecloud.core.cache import FetchGuard, MetadataCache
from squeezecloud.core.exceptions import CatalogError
from squeezecloud.core.logger import get_logger
from squeezecloud.playback.models import PlaybackMetadata, parse_track_uri
from squeezecloud.playback.resolver import StreamResolver

logger = get_logger(__name__)


class MetadataProvider:
    """
    Cache-backed metadata lookups with background prefetch.

    Args:
        resolver: Used for descriptor fetches.
        cache: Shared metadata cache.
        guard: Shared fetch guard.
        loop: Event loop for background fetches scheduled from threads
              that do not run a loop themselves.
    """

    def __init__(
        self,
        resolver: StreamResolver,
        cache: MetadataCache[PlaybackMetadata],
        guard: FetchGuard,
        loop: asyncio.AbstractEventLoop | None = None
    ) -> None:
        self._resolver = resolver
        self._cache = cache
        self._guard = guard
        self._loop = loop
        self._tasks: set[asyncio.Task] = set()
        self._generations: dict[tuple[str, str], int] = {}
        self._lock = threading.Lock()

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def get_cached_metadata(
        self,
        uri: str,
        player_id: str = "",
        queue: Iterable[str] = ()
    ) -> PlaybackMetadata:
        """
        Return cached metadata for `uri`, or the placeholder.

        On a miss, every uncached track in `uri` plus `queue` gets a
        background fetch unless one is already in flight for this player.
        """
        track_id = parse_track_uri(uri)
        if track_id is None:
            return PlaybackMetadata.placeholder()

        cached = self._cache.get(track_id)
        if cached is not None:
            return cached

        for queued_uri in (uri, *queue):
            queued_id = parse_track_uri(queued_uri)
            if queued_id is None or queued_id in self._cache:
                continue
            if not self._guard.try_begin(player_id, queued_id):
                continue

            logger.debug(f"Need to fetch metadata for: {queued_id}")
            if not self._schedule(self._prefetch(player_id, queued_id)):
                self._guard.end(player_id, queued_id)

        return PlaybackMetadata.placeholder()

    async def _prefetch(self, player_id: str, track_id: str) -> None:
        try:
            descriptor = await self._resolver.fetch_descriptor(track_id)
            self._cache.set(track_id, PlaybackMetadata.from_descriptor(descriptor))
            logger.debug(f"Cached metadata for {track_id}")
        except CatalogError as e:
            logger.warning(f"Error fetching metadata for {track_id}: {e.message}")
        finally:
            self._guard.end(player_id, track_id)

    def _schedule(self, coro: Coroutine) -> bool:
        """Run `coro` in the background. Returns False if no loop is available."""
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is not None and (self._loop is None or running is self._loop):
            task = running.create_task(coro)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            return True

        if self._loop is not None and not self._loop.is_closed():
            asyncio.run_coroutine_threadsafe(coro, self._loop)
            return True

        coro.close()
        logger.warning("No event loop available for background metadata fetch")
        return False

    async def drain(self) -> None:
        """Wait for the background fetches scheduled on the current loop."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def refresh(
        self,
        player_id: str,
        uri: str,
        trigger: str = "metadata"
    ) -> PlaybackMetadata | None:
        """
        Re-fetch metadata for `uri`, superseding earlier refreshes.

        Returns:
            The new metadata, or None if the fetch failed, `uri` is not a
            track URI, or a newer refresh with the same (player_id,
            trigger) started in the meantime.
        """
        track_id = parse_track_uri(uri)
        if track_id is None:
            return None

        key = (player_id, trigger)
        with self._lock:
            generation = self._generations.get(key, 0) + 1
            self._generations[key] = generation

        try:
            descriptor = await self._resolver.fetch_descriptor(track_id)
        except CatalogError as e:
            logger.warning(f"Error refreshing metadata for {track_id}: {e.message}")
            return None

        with self._lock:
            if self._generations.get(key) != generation:
                logger.debug(f"Discarding superseded refresh for {track_id} ({trigger})")
                return None

        metadata = PlaybackMetadata.from_descriptor(descriptor)
        self._cache.set(track_id, metadata)
        return metadata
