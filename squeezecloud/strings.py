"""
Localized strings for menu names, activity subtitles and error messages.

The host owns translation; this module only ships the English table and
lets the host register its own values per token.

Usage:
    from squeezecloud.strings import string, register_strings

    string("PLUGIN_SQUEEZECLOUD_FAVORITED_BY", user="alice")  # "favorited by alice"
    register_strings({"PLUGIN_SQUEEZECLOUD_HOT": "Heißeste Tracks"})
"""

import threading

from squeezecloud.core.logger import get_logger

logger = get_logger(__name__)


_DEFAULT_STRINGS: dict[str, str] = {
    "PLUGIN_SQUEEZECLOUD": "SqueezeCloud",
    # Top level menu
    "PLUGIN_SQUEEZECLOUD_HOT": "Hottest tracks",
    "PLUGIN_SQUEEZECLOUD_NEW": "New tracks",
    "PLUGIN_SQUEEZECLOUD_SEARCH": "Search",
    "PLUGIN_SQUEEZECLOUD_TAGS": "Tags",
    "PLUGIN_SQUEEZECLOUD_PLAYLIST_SEARCH": "Playlist search",
    "PLUGIN_SQUEEZECLOUD_ACTIVITIES": "Activities",
    "PLUGIN_SQUEEZECLOUD_FAVORITES": "Favorites",
    "PLUGIN_SQUEEZECLOUD_FRIENDS": "Friends",
    "PLUGIN_SQUEEZECLOUD_URL": "URL",
    "PLUGIN_SQUEEZECLOUD_SET_API_KEY": "Set your SoundCloud API key in the plugin settings to see your activities, favorites and friends",
    # Friend expansion
    "PLUGIN_SQUEEZECLOUD_FRIEND_FAVORITES": "{count} Favorites",
    "PLUGIN_SQUEEZECLOUD_FRIEND_TRACKS": "{count} Tracks",
    "PLUGIN_SQUEEZECLOUD_FRIEND_PLAYLISTS": "{count} Playlists",
    "PLUGIN_SQUEEZECLOUD_FRIEND_SUMMARY": "{name} ({favorites} favorites, {tracks} tracks, {playlists} sets)",
    # Activity subtitles
    "PLUGIN_SQUEEZECLOUD_FAVORITED_BY": "favorited by {user}",
    "PLUGIN_SQUEEZECLOUD_COMMENTED_BY": "commented on by {user}",
    "PLUGIN_SQUEEZECLOUD_NEW_TRACK_BY": "new track by {user}",
    "PLUGIN_SQUEEZECLOUD_SHARED_BY": "shared by {user}",
    # Playback errors
    "PLUGIN_SQUEEZECLOUD_NO_INFO": "Could not get track information from SoundCloud",
    "PLUGIN_SQUEEZECLOUD_STREAM_FAILED": "Could not resolve the SoundCloud stream",
    "PLUGIN_SQUEEZECLOUD_ERROR": "Error talking to SoundCloud",
}

_strings = dict(_DEFAULT_STRINGS)
_lock = threading.Lock()


def string(token: str, **params) -> str:
    """
    Look up `token` and fill in `params`.

    Unknown tokens are returned as-is so a missing translation shows up
    in the UI instead of raising. A registered template whose placeholders
    do not match `params` falls back to the built-in English one.
    """
    with _lock:
        template = _strings.get(token, token)
    if not params:
        return template

    try:
        return template.format(**params)
    except (KeyError, IndexError, ValueError) as e:
        logger.warning(f"Bad template for {token}: {e!r}")

    default = _DEFAULT_STRINGS.get(token)
    if default is None or default == template:
        return template
    return default.format(**params)


def register_strings(translations: dict[str, str]) -> None:
    """Override strings with host translations."""
    with _lock:
        _strings.update(translations)


def reset_strings() -> None:
    """Restore the built-in English table."""
    with _lock:
        _strings.clear()
        _strings.update(_DEFAULT_STRINGS)
