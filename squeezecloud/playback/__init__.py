"""
Playback resolution for squeezecloud.

    - models: TrackDescriptor, PlaybackMetadata, ResolvedStream, play URIs
    - resolver: StreamResolver (descriptor fetch, source selection, redirect probe)
    - metadata: MetadataProvider (cache-backed poll path, background prefetch)

Usage:
    from squeezecloud.playback import StreamResolver, MetadataProvider
"""

from squeezecloud.playback.metadata import MetadataProvider
from squeezecloud.playback.models import (
    DEFAULT_ICON,
    PlaybackMetadata,
    ResolvedStream,
    TrackDescriptor,
    better_artwork_url,
    make_play_uri,
    parse_track_uri,
)
from squeezecloud.playback.resolver import (
    PlaybackState,
    StreamResolver,
    select_source_url,
)

__all__ = [
    "DEFAULT_ICON",
    "MetadataProvider",
    "PlaybackMetadata",
    "PlaybackState",
    "ResolvedStream",
    "StreamResolver",
    "TrackDescriptor",
    "better_artwork_url",
    "make_play_uri",
    "parse_track_uri",
    "select_source_url",
]
