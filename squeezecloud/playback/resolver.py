"""
Stream resolution for queued tracks.

Resolving a play URI into a streamable URL is a short state machine:

    IDLE -> FETCHING_DESCRIPTOR -> RESOLVING_REDIRECT -> READY
                    |                      |
                    +------> FAILED <------+

1. FETCHING_DESCRIPTOR: GET tracks/{id} (authenticated). A transport
   failure reports ERROR; an undecodable body or a server error field
   reports NO_INFO.
2. Source selection: the download URL when the playmethod is "download"
   and the track is downloadable with a download URL, otherwise the
   stream URL.
3. RESOLVING_REDIRECT: GET the source without following redirects. The
   Location header is the signed CDN URL; a missing header reports
   STREAM_FAILED.
4. READY: the metadata is written to the cache (24h TTL) and returned
   with the CDN URL.

Failures are logged through log_stream_failure() so they end up in the
stream failure report, and raised as PlaybackError(kind).
"""

from enum import Enum
from typing import Callable

from squeezecloud.api.client import CatalogClient, ResourceRequest
from squeezecloud.core.cache import MetadataCache
from squeezecloud.core.config import PLAYMETHOD_DOWNLOAD, Config
from squeezecloud.core.exceptions import (
    CatalogError,
    PlaybackError,
    PlaybackErrorKind,
    RedirectMissing,
    TransportError,
)
from squeezecloud.core.logger import get_logger, log_stream_failure
from squeezecloud.playback.models import (
    PlaybackMetadata,
    ResolvedStream,
    TrackDescriptor,
    parse_track_uri,
)

logger = get_logger(__name__)


class PlaybackState(str, Enum):
    IDLE = "idle"
    FETCHING_DESCRIPTOR = "fetching_descriptor"
    RESOLVING_REDIRECT = "resolving_redirect"
    READY = "ready"
    FAILED = "failed"


StateObserver = Callable[[PlaybackState], None]


def select_source_url(descriptor: TrackDescriptor, playmethod: str) -> str | None:
    """
    Pick the URL to probe for a track.

    The download URL is used only when all three hold: the playmethod is
    "download", the track is downloadable, and a download URL exists.

    Example:
        select_source_url(descriptor, "download")  # stream URL if not downloadable
    """
    if playmethod == PLAYMETHOD_DOWNLOAD and descriptor.downloadable and descriptor.download_url:
        return descriptor.download_url
    return descriptor.stream_url


def descriptor_resource(track_id: str) -> ResourceRequest:
    return ResourceRequest(f"tracks/{track_id}", requires_auth=True)


class StreamResolver:
    """
    Resolves play URIs into ResolvedStream objects.

    Foreground resolution does not consult the fetch guard; concurrent
    resolutions of the same track each write the cache, last writer wins.

    Example:
        resolver = StreamResolver(client, cache, config)
        stream = await resolver.resolve("soundcloud://42")
        stream.stream_url  # https://cf-media.sndcdn.com/...
    """

    def __init__(
        self,
        client: CatalogClient,
        cache: MetadataCache[PlaybackMetadata],
        config: Config
    ) -> None:
        self._client = client
        self._cache = cache
        self._playmethod = config.soundcloud.playmethod
        self._timeout = config.http.playback_timeout

    async def fetch_descriptor(self, track_id: str) -> TrackDescriptor:
        """
        Fetch and decode the track object.

        Raises:
            CatalogError: Any fetch, decode or remote error.
        """
        data = await self._client.get_json(descriptor_resource(track_id), timeout=self._timeout)
        return TrackDescriptor.from_api(data)

    async def resolve(self, uri: str, on_state: StateObserver | None = None) -> ResolvedStream:
        """
        Resolve `uri` into a streamable CDN URL.

        Args:
            uri: Play URI (soundcloud://<id> or track://<id>).
            on_state: Optional observer called on every state transition.

        Returns:
            ResolvedStream with the CDN URL and cached metadata.

        Raises:
            PlaybackError: With kind NO_INFO, STREAM_FAILED or ERROR.
        """
        def transition(state: PlaybackState) -> None:
            logger.debug(f"{uri}: {state.value}")
            if on_state is not None:
                on_state(state)

        def fail(kind: PlaybackErrorKind, message: str, cause: Exception | None = None) -> PlaybackError:
            transition(PlaybackState.FAILED)
            log_stream_failure(logger, uri, kind.value, message)
            details = {"uri": uri}
            if cause is not None:
                details["original_error"] = str(cause)
            return PlaybackError(kind, message, details)

        transition(PlaybackState.IDLE)

        track_id = parse_track_uri(uri)
        if track_id is None:
            raise fail(PlaybackErrorKind.NO_INFO, f"Not a track URI: {uri}")

        transition(PlaybackState.FETCHING_DESCRIPTOR)
        logger.debug(f"Getting track from SoundCloud for {track_id}")
        try:
            descriptor = await self.fetch_descriptor(track_id)
        except TransportError as e:
            raise fail(PlaybackErrorKind.ERROR, e.message, e) from e
        except CatalogError as e:
            raise fail(PlaybackErrorKind.NO_INFO, e.message, e) from e

        source_url = select_source_url(descriptor, self._playmethod)
        if not source_url:
            raise fail(PlaybackErrorKind.STREAM_FAILED, f"Track {track_id} has no stream URL")

        transition(PlaybackState.RESOLVING_REDIRECT)
        try:
            location = await self._client.probe_redirect(source_url, timeout=self._timeout)
        except RedirectMissing as e:
            raise fail(PlaybackErrorKind.STREAM_FAILED, e.message, e) from e
        except TransportError as e:
            raise fail(PlaybackErrorKind.ERROR, e.message, e) from e

        logger.debug(f"Setting stream URL to SoundCloud CDN URL {location}")

        metadata = PlaybackMetadata.from_descriptor(descriptor)
        self._cache.set(track_id, metadata)
        logger.info(f"Resolved {uri}: {descriptor.title}")

        transition(PlaybackState.READY)
        return ResolvedStream(stream_url=location, metadata=metadata)
