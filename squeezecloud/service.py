"""
SqueezeCloud service: the entry points a media host calls.

The service builds the shared objects once (HTTP client, metadata cache,
fetch guard) and wires them into the paginator, the stream resolver and
the metadata provider:

    host --browse()--------------> CatalogPaginator --> CatalogClient
    host --resolve_playback()----> StreamResolver ----> CatalogClient, MetadataCache
    host --get_cached_metadata()-> MetadataProvider --> MetadataCache, FetchGuard

All network entry points are coroutines. Hosts that work with callbacks
use dispatch(), which runs a coroutine as a task and routes its result or
error to the given callbacks.

Usage:
    async with SqueezeCloud(load_config()) as service:
        page = await service.browse(BrowseRequest(BrowseKind.TRACKS, offset=0, limit=20))
        stream = await service.resolve_playback(page.items[0].play_uri)
"""

import asyncio
import concurrent.futures
import time
from typing import Any, Awaitable, Callable, Iterable

from squeezecloud.api.client import CatalogClient
from squeezecloud.api.resources import BrowseKind, BrowseRequest
from squeezecloud.browse.menu import (
    is_catalog_page_url,
    normalize_catalog_url,
    top_level_menu,
)
from squeezecloud.browse.models import MenuEntry, Page
from squeezecloud.browse.paginator import CatalogPaginator
from squeezecloud.core.cache import FetchGuard, MetadataCache
from squeezecloud.core.config import Config
from squeezecloud.core.exceptions import PlaybackError, PlaybackErrorKind, SqueezeCloudError
from squeezecloud.core.logger import get_logger
from squeezecloud.playback.metadata import MetadataProvider
from squeezecloud.playback.models import PlaybackMetadata, ResolvedStream
from squeezecloud.playback.resolver import StreamResolver

logger = get_logger(__name__)


SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[str, str], None]


class SqueezeCloud:
    """
    Catalog browser and stream resolver for one host process.

    Args:
        config: Plugin configuration (defaults when omitted).
        client: CatalogClient to use; one is created from `config` if omitted.
        clock: Clock for the metadata cache TTL.
    """

    def __init__(
        self,
        config: Config | None = None,
        client: CatalogClient | None = None,
        clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.config = config or Config()
        self.client = client or CatalogClient(self.config)
        self.cache: MetadataCache[PlaybackMetadata] = MetadataCache(
            ttl=self.config.cache.metadata_ttl,
            clock=clock
        )
        self.guard = FetchGuard()
        self.paginator = CatalogPaginator(self.client, self.config.paging)
        self.resolver = StreamResolver(self.client, self.cache, self.config)
        self.metadata = MetadataProvider(self.resolver, self.cache, self.guard)
        self._tasks: set[asyncio.Task] = set()

    async def __aenter__(self) -> "SqueezeCloud":
        self._bind_loop()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.metadata.drain()
        await self.client.close()

    def _bind_loop(self) -> None:
        # Polls from host threads schedule their fetches on this loop
        self.metadata.bind_loop(asyncio.get_running_loop())

    # -------------------------------------------------------------------------
    # Browsing
    # -------------------------------------------------------------------------

    def top_level_menu(self) -> list[MenuEntry]:
        return top_level_menu(self.config)

    async def browse(self, request: BrowseRequest) -> Page:
        """Fetch one page. Errors come back as a page with one text entry."""
        self._bind_loop()
        return await self.paginator.fetch_page(request)

    async def resolve_catalog_url(self, user_input: str) -> Page:
        """
        Resolve a pasted soundcloud.com link.

        Playlists come back with their tracks as children, single tracks
        as a track entry and users as a friend link.
        """
        url = normalize_catalog_url(user_input)
        logger.info(f"Resolving catalog URL: {url}")
        return await self.browse(BrowseRequest(kind=BrowseKind.RESOLVE_URL, search_text=url))

    async def explode_playlist(self, uri: str) -> list[str]:
        """
        Expand a soundcloud.com page URL into the play URIs it contains.

        Any other URI is returned unchanged as a one-item list.
        """
        if not is_catalog_page_url(uri):
            return [uri]

        page = await self.resolve_catalog_url(uri)
        play_uris = []
        for item in page.items:
            if item.children:
                play_uris.extend(child.play_uri for child in item.children if child.is_playable)
            elif item.is_playable:
                play_uris.append(item.play_uri)
        return play_uris

    # -------------------------------------------------------------------------
    # Playback
    # -------------------------------------------------------------------------

    async def resolve_playback(self, uri: str) -> ResolvedStream:
        """
        Resolve a play URI into a streamable CDN URL.

        Raises:
            PlaybackError: With kind NO_INFO, STREAM_FAILED or ERROR.
        """
        self._bind_loop()
        return await self.resolver.resolve(uri)

    def get_cached_metadata(
        self,
        uri: str,
        player_id: str = "",
        queue: Iterable[str] = ()
    ) -> PlaybackMetadata:
        """Non-blocking metadata lookup; may schedule background fetches."""
        return self.metadata.get_cached_metadata(uri, player_id, queue)

    async def refresh_metadata(
        self,
        player_id: str,
        uri: str,
        trigger: str = "metadata"
    ) -> PlaybackMetadata | None:
        self._bind_loop()
        return await self.metadata.refresh(player_id, uri, trigger)

    # -------------------------------------------------------------------------
    # Callback bridge
    # -------------------------------------------------------------------------

    def dispatch(
        self,
        coro: Awaitable[Any],
        on_success: SuccessCallback,
        on_error: ErrorCallback | None = None,
        loop: asyncio.AbstractEventLoop | None = None
    ) -> "asyncio.Task[None] | concurrent.futures.Future[None]":
        """
        Run an entry point as a task and report its outcome to callbacks.

        on_success receives the result; on_error receives the error kind
        token and the message. Unexpected exceptions are logged and
        reported with the generic error kind. Must be called from the
        loop's thread unless `loop` is given.

        Example:
            service.dispatch(
                service.resolve_playback("soundcloud://42"),
                on_success=lambda stream: player.play(stream.stream_url),
                on_error=lambda kind, message: player.show_error(kind),
            )
        """
        async def run() -> None:
            try:
                result = await coro
            except PlaybackError as e:
                self._report_error(on_error, e.kind.value, e.message)
                return
            except SqueezeCloudError as e:
                self._report_error(on_error, PlaybackErrorKind.ERROR.value, e.message)
                return
            except Exception as e:
                logger.error(f"Dispatched call failed: {e!r}", exc_info=True)
                self._report_error(on_error, PlaybackErrorKind.ERROR.value, str(e))
                return
            on_success(result)

        if loop is not None:
            return asyncio.run_coroutine_threadsafe(run(), loop)

        task = asyncio.get_running_loop().create_task(run())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @staticmethod
    def _report_error(on_error: ErrorCallback | None, kind: str, message: str) -> None:
        if on_error is None:
            logger.error(f"Unhandled error ({kind}): {message}")
            return
        on_error(kind, message)
