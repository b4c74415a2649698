"""
Response parsers: decoded API responses to MenuEntry lists.

Every parser has the signature parse(raw) -> list[MenuEntry] and never
raises on malformed input; anything it cannot make sense of is skipped,
and a response of the wrong shape yields an empty list.

Responses come either as bare lists or as {"collection": [...]}
partitions; collection_items() normalizes both.

Parsers:
    - parse_tracks: one track entry per track object
    - parse_playlists: one playlist entry per playlist object
    - parse_playlist_tracks: the tracks embedded in one playlist object
    - parse_friends: one link entry per followed user
    - parse_friend: favorites/tracks/playlists entries for one user
    - parse_activities: activity stream items (tracks or shared playlists)
    - parse_resolved: the object behind a pasted catalog URL
"""

from dataclasses import replace
from typing import Any, Callable

from squeezecloud.api.resources import BrowseKind, BrowseRequest
from squeezecloud.browse.models import EntryKind, MenuEntry
from squeezecloud.playback.models import (
    DEFAULT_ICON,
    PlaybackMetadata,
    TrackDescriptor,
    as_int,
    better_artwork_url,
)
from squeezecloud.strings import string

Parser = Callable[[Any], list[MenuEntry]]


def collection_items(raw: Any) -> list:
    """Normalize a bare list or a {"collection": [...]} partition to a list."""
    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict) and isinstance(raw.get("collection"), list):
        return raw["collection"]
    return []


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _user_name(user: dict) -> str:
    return user.get("full_name") or user.get("username") or ""


# =============================================================================
# TRACKS
# =============================================================================

def track_entry(track: Any) -> MenuEntry | None:
    """Build the entry for one track object, or None if it is not one."""
    if not isinstance(track, dict) or track.get("id") is None:
        return None

    descriptor = TrackDescriptor.from_api(track)
    metadata = PlaybackMetadata.from_descriptor(descriptor)
    return MenuEntry(
        name=descriptor.title or descriptor.play_uri,
        kind=EntryKind.TRACK,
        icon_url=metadata.artwork_url,
        play_uri=descriptor.play_uri,
        metadata=metadata,
    )


def parse_tracks(raw: Any) -> list[MenuEntry]:
    entries = []
    for track in collection_items(raw):
        entry = track_entry(track)
        if entry is not None:
            entries.append(entry)
    return entries


# =============================================================================
# PLAYLISTS
# =============================================================================

def _playlist_summary(playlist: dict) -> str:
    """
    Return "<n> tracks, <m>m<s>s" with only the parts that are known.

    Example:
        _playlist_summary({"tracks": [{}, {}], "duration": 125000})  # "2 tracks, 2m5s"
        _playlist_summary({"duration": 0})                             # ""
    """
    parts = []

    tracks = playlist.get("tracks")
    if isinstance(tracks, list):
        parts.append(f"{len(tracks)} tracks")
    elif playlist.get("track_count") is not None:
        parts.append(f"{as_int(playlist['track_count'])} tracks")

    total_seconds = as_int(playlist.get("duration")) // 1000
    if total_seconds:
        minutes, seconds = divmod(total_seconds, 60)
        parts.append(f"{minutes}m{seconds}s")

    return ", ".join(parts)


def _playlist_icon(playlist: dict) -> str:
    # playlist artwork, then first track artwork, then owner avatar
    if playlist.get("artwork_url"):
        return better_artwork_url(playlist["artwork_url"])

    tracks = playlist.get("tracks")
    if isinstance(tracks, list) and tracks:
        first = _dict(tracks[0])
        if first.get("artwork_url"):
            return better_artwork_url(first["artwork_url"])

    avatar = _dict(playlist.get("user")).get("avatar_url")
    if avatar:
        return better_artwork_url(avatar)

    return DEFAULT_ICON


def playlist_entry(playlist: Any) -> MenuEntry | None:
    """Build the entry for one playlist object, or None if it is not one."""
    if not isinstance(playlist, dict) or playlist.get("id") is None:
        return None

    playlist_id = str(playlist["id"])
    title = playlist.get("title") or f"Playlist {playlist_id}"
    summary = _playlist_summary(playlist)

    return MenuEntry(
        name=f"{title} ({summary})" if summary else title,
        kind=EntryKind.PLAYLIST,
        icon_url=_playlist_icon(playlist),
        continuation=BrowseRequest(kind=BrowseKind.PLAYLISTS, playlist_id=playlist_id),
    )


def parse_playlists(raw: Any) -> list[MenuEntry]:
    entries = []
    for playlist in collection_items(raw):
        entry = playlist_entry(playlist)
        if entry is not None:
            entries.append(entry)
    return entries


def parse_playlist_tracks(raw: Any) -> list[MenuEntry]:
    """Parse the tracks embedded in a single playlist object."""
    return parse_tracks(_dict(raw).get("tracks"))


# =============================================================================
# FRIENDS
# =============================================================================

def _favorites_count(user: dict) -> int:
    return as_int(user.get("public_favorites_count", user.get("likes_count")))


def friend_entry(user: Any) -> MenuEntry | None:
    """Build the link entry for one followed user."""
    if not isinstance(user, dict) or user.get("id") is None:
        return None

    return MenuEntry(
        name=string(
            "PLUGIN_SQUEEZECLOUD_FRIEND_SUMMARY",
            name=_user_name(user),
            favorites=_favorites_count(user),
            tracks=as_int(user.get("track_count")),
            playlists=as_int(user.get("playlist_count")),
        ),
        kind=EntryKind.LINK,
        icon_url=user.get("avatar_url"),
        continuation=BrowseRequest(kind=BrowseKind.FRIEND, user_id=str(user["id"])),
    )


def parse_friends(raw: Any) -> list[MenuEntry]:
    entries = []
    for user in collection_items(raw):
        entry = friend_entry(user)
        if entry is not None:
            entries.append(entry)
    return entries


def parse_friend(raw: Any) -> list[MenuEntry]:
    """
    Expand one user into favorites, tracks and playlists entries.

    An entry is only present when its count is non-zero.
    """
    if not isinstance(raw, dict) or raw.get("id") is None:
        return []

    user_id = str(raw["id"])
    avatar = raw.get("avatar_url")
    sections = (
        ("PLUGIN_SQUEEZECLOUD_FRIEND_FAVORITES", _favorites_count(raw), BrowseKind.FAVORITES, EntryKind.PLAYLIST),
        ("PLUGIN_SQUEEZECLOUD_FRIEND_TRACKS", as_int(raw.get("track_count")), BrowseKind.TRACKS, EntryKind.PLAYLIST),
        ("PLUGIN_SQUEEZECLOUD_FRIEND_PLAYLISTS", as_int(raw.get("playlist_count")), BrowseKind.PLAYLISTS, EntryKind.LINK),
    )

    entries = []
    for token, count, browse_kind, entry_kind in sections:
        if count <= 0:
            continue
        entries.append(MenuEntry(
            name=string(token, count=count),
            kind=entry_kind,
            icon_url=avatar,
            continuation=BrowseRequest(kind=browse_kind, user_id=user_id, total_hint=count),
        ))
    return entries


# =============================================================================
# ACTIVITIES
# =============================================================================

def _activity_subtitle(activity_type: str, user_name: str) -> str:
    if activity_type == "favoriting":
        return string("PLUGIN_SQUEEZECLOUD_FAVORITED_BY", user=user_name)
    if activity_type == "comment":
        return string("PLUGIN_SQUEEZECLOUD_COMMENTED_BY", user=user_name)
    if "track" in activity_type:
        return string("PLUGIN_SQUEEZECLOUD_NEW_TRACK_BY", user=user_name)
    return string("PLUGIN_SQUEEZECLOUD_SHARED_BY", user=user_name)


def activity_entry(activity: Any) -> MenuEntry | None:
    """
    Build the entry for one activity stream item.

    Shared playlists become playlist entries suffixed "- shared by <user>";
    everything else is a track entry suffixed with the subtitle for its
    activity type.

    Example:
        activity_entry({"type": "favoriting", "origin": {...}}).name
        # "Song - favorited by alice"
    """
    activity = _dict(activity)
    activity_type = activity.get("type") or ""
    origin = _dict(activity.get("origin"))

    if activity_type.startswith("playlist"):
        entry = playlist_entry(origin)
        if entry is None:
            return None
        shared_by = string("PLUGIN_SQUEEZECLOUD_SHARED_BY", user=_user_name(_dict(origin.get("user"))))
        return replace(entry, name=f"{entry.name} - {shared_by}")

    track = _dict(origin.get("track")) or origin
    entry = track_entry(track)
    if entry is None:
        return None

    user = _dict(origin.get("user")) or _dict(track.get("user"))
    subtitle = _activity_subtitle(activity_type, _user_name(user))
    return replace(entry, name=f"{entry.name} - {subtitle}")


def parse_activities(raw: Any) -> list[MenuEntry]:
    entries = []
    for activity in collection_items(raw):
        entry = activity_entry(activity)
        if entry is not None:
            entries.append(entry)
    return entries


# =============================================================================
# RESOLVED URLS
# =============================================================================

def parse_resolved(raw: Any) -> list[MenuEntry]:
    """
    Parse the object a catalog URL resolved to.

    Playlists come back with their tracks embedded as children, users as
    a friend link, anything else is treated as a track.
    """
    if not isinstance(raw, dict):
        return []

    if raw.get("kind") == "playlist" or "tracks" in raw:
        entry = playlist_entry(raw)
        if entry is None:
            return []
        return [replace(entry, children=tuple(parse_playlist_tracks(raw)))]

    if raw.get("kind") == "user":
        entry = friend_entry(raw)
    else:
        entry = track_entry(raw)
    return [entry] if entry is not None else []


PARSERS: dict[BrowseKind, Parser] = {
    BrowseKind.TRACKS: parse_tracks,
    BrowseKind.TAGS: parse_tracks,
    BrowseKind.FAVORITES: parse_tracks,
    BrowseKind.PLAYLISTS: parse_playlists,
    BrowseKind.FRIENDS: parse_friends,
    BrowseKind.FRIEND: parse_friend,
    BrowseKind.ACTIVITIES: parse_activities,
    BrowseKind.RESOLVE_URL: parse_resolved,
}


def parser_for(request: BrowseRequest) -> Parser:
    """Pick the parser for a browse request."""
    if request.kind == BrowseKind.PLAYLISTS and request.playlist_id:
        return parse_playlist_tracks
    return PARSERS[request.kind]
