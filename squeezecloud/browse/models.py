"""
Data models for the catalog browser.

    - EntryKind: How the host renders a menu entry
    - MenuEntry: One item of a menu level
    - Page: A page of menu entries with offset/total for the host's pager

MenuEntry and Page are frozen; parsers build them fresh per response and
hand ownership to the caller.
"""

from dataclasses import dataclass
from enum import Enum

from squeezecloud.api.resources import BrowseRequest
from squeezecloud.playback.models import PlaybackMetadata


class EntryKind(str, Enum):
    TRACK = "track"
    PLAYLIST = "playlist"
    LINK = "link"
    SEARCH = "search"
    TEXT = "text"


@dataclass(frozen=True)
class MenuEntry:
    """
    One item of a menu level.

    Attributes:
        name: Display name (never empty for tracks and playlists).
        kind: Rendering kind.
        icon_url: Artwork or avatar URL.
        play_uri: Play URI for playable entries (soundcloud://<id>).
        children: Entries embedded directly (resolved playlists).
        continuation: Request that lists this entry's children lazily.
        metadata: Playback metadata for track entries.
    """
    name: str
    kind: EntryKind
    icon_url: str | None = None
    play_uri: str | None = None
    children: tuple["MenuEntry", ...] = ()
    continuation: BrowseRequest | None = None
    metadata: PlaybackMetadata | None = None

    @classmethod
    def text(cls, message: str) -> "MenuEntry":
        return cls(name=message, kind=EntryKind.TEXT)

    @property
    def is_playable(self) -> bool:
        return self.play_uri is not None


@dataclass(frozen=True)
class Page:
    """
    A page of menu entries.

    Attributes:
        items: Entries of this page, at most the requested limit.
        offset: Echoed request offset (0 for single-friend pages).
        total: Estimated number of entries in the whole listing.
    """
    items: tuple[MenuEntry, ...]
    offset: int = 0
    total: int = 0

    @classmethod
    def error(cls, message: str) -> "Page":
        """A page holding one text entry that carries an error message."""
        return cls(items=(MenuEntry.text(message),), offset=0, total=1)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def play_uris(self) -> list[str]:
        return [item.play_uri for item in self.items if item.is_playable]
