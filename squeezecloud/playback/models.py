"""
Data models for playback resolution.

This module defines the dataclasses handed between the stream resolver,
the metadata provider and the host:
    - TrackDescriptor: The fields of a remote track object that playback needs
    - PlaybackMetadata: Cached display metadata for one track
    - ResolvedStream: Final CDN URL plus stream properties

It also owns the play URI format (soundcloud://<id>) and the artwork URL
upgrade, which the browse parsers reuse.
"""

import re
from dataclasses import dataclass
from typing import Any

from squeezecloud.core.exceptions import DecodeError


TRACK_URI_SCHEME = "soundcloud"

# track:// is accepted as an alias of soundcloud://
_TRACK_URI_RE = re.compile(r"^(?:soundcloud|track)://(.+)$")

DEFAULT_ICON = "http://instafamous.net/image/cache/data/soundcloud-500x500.png"

BITRATE_LABEL = "320kbps"
FORMAT_LABEL = "MP3 (SoundCloud)"


def make_play_uri(track_id: Any) -> str:
    """Build the play URI the host queues for a track."""
    return f"{TRACK_URI_SCHEME}://{track_id}"


def parse_track_uri(uri: str) -> str | None:
    """
    Extract the track id from a play URI.

    Returns:
        The id, or None if `uri` is not a track URI.

    Example:
        parse_track_uri("soundcloud://42")  # "42"
        parse_track_uri("track://42")       # "42"
        parse_track_uri("http://x/y")       # None
    """
    match = _TRACK_URI_RE.match(uri or "")
    if not match:
        return None
    return match.group(1)


def better_artwork_url(url: str | None) -> str | None:
    """Upgrade a "-large" artwork URL to the 500x500 rendition."""
    if not url:
        return url
    return url.replace("-large", "-t500x500")


def as_int(value: Any) -> int:
    """Coerce a numeric API field to int; missing or malformed values give 0."""
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _is_true(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


@dataclass(frozen=True)
class TrackDescriptor:
    """
    Remote track object, reduced to the fields playback consumes.

    Attributes:
        track_id: Catalog id, as a string.
        title: Track title.
        duration_ms: Duration in milliseconds (0 if unknown).
        artist: Uploader's username.
        artwork_url: Raw artwork URL, if any.
        stream_url: Stream endpoint (redirects to the CDN).
        download_url: Original file endpoint, if any.
        downloadable: Whether the uploader allows downloads.
    """
    track_id: str
    title: str
    duration_ms: int = 0
    artist: str = ""
    artwork_url: str | None = None
    stream_url: str | None = None
    download_url: str | None = None
    downloadable: bool = False

    @classmethod
    def from_api(cls, data: Any) -> "TrackDescriptor":
        """
        Build a descriptor from a decoded track object.

        Raises:
            DecodeError: If `data` is not a track object.
        """
        if not isinstance(data, dict) or data.get("id") is None:
            raise DecodeError(
                "Response is not a track object",
                details={"type": type(data).__name__}
            )

        user = data.get("user")
        if not isinstance(user, dict):
            user = {}
        return cls(
            track_id=str(data["id"]),
            title=data.get("title") or "",
            duration_ms=as_int(data.get("duration")),
            artist=user.get("username") or "",
            artwork_url=data.get("artwork_url"),
            stream_url=data.get("stream_url"),
            download_url=data.get("download_url"),
            downloadable=_is_true(data.get("downloadable")),
        )

    @property
    def play_uri(self) -> str:
        return make_play_uri(self.track_id)


@dataclass(frozen=True)
class PlaybackMetadata:
    """
    Display metadata cached per track id.

    Attributes:
        track_id: Catalog id ("" for the placeholder).
        duration_seconds: Track length in seconds.
        title: Track title.
        artist: Uploader's username.
        artwork_url: Upgraded artwork URL or the default icon.
        bitrate_label: Bitrate shown by the host.
        format_label: Format shown by the host.
    """
    track_id: str
    duration_seconds: float
    title: str
    artist: str
    artwork_url: str
    bitrate_label: str = BITRATE_LABEL
    format_label: str = FORMAT_LABEL

    @classmethod
    def from_descriptor(cls, descriptor: TrackDescriptor) -> "PlaybackMetadata":
        return cls(
            track_id=descriptor.track_id,
            duration_seconds=descriptor.duration_ms / 1000,
            title=descriptor.title,
            artist=descriptor.artist,
            artwork_url=better_artwork_url(descriptor.artwork_url) or DEFAULT_ICON,
        )

    @classmethod
    def placeholder(cls) -> "PlaybackMetadata":
        """Metadata returned while the real values are still being fetched."""
        return cls(
            track_id="",
            duration_seconds=0,
            title="",
            artist="",
            artwork_url=DEFAULT_ICON,
        )

    @property
    def is_placeholder(self) -> bool:
        return not self.track_id


@dataclass(frozen=True)
class ResolvedStream:
    """
    A track ready for playback.

    Attributes:
        stream_url: Signed CDN URL taken from the redirect.
        metadata: Metadata written to the cache for this track.
        can_seek: Seeking in the remote stream is not supported.
        content_type: MIME type of the stream.
        format: Container format reported to the host.
    """
    stream_url: str
    metadata: PlaybackMetadata
    can_seek: bool = False
    content_type: str = "audio/mpeg"
    format: str = "mp3"

    @property
    def duration_seconds(self) -> float:
        return self.metadata.duration_seconds
