"""
Top-level menu and catalog URL handling.

The top-level menu is static apart from the authenticated branches:
Activities, Favorites and Friends need the user's API key and are
replaced by a single hint entry in anonymous mode.

Search entries carry a BrowseRequest without search text; the host fills
it in with BrowseRequest.with_search() once the user has typed a query.
"""

import re

from squeezecloud.api.resources import BrowseKind, BrowseRequest
from squeezecloud.browse.models import EntryKind, MenuEntry
from squeezecloud.core.config import Config
from squeezecloud.strings import string


HOTNESS = (("order", "hotness"),)
CREATED_AT = (("order", "created_at"),)

PAGE_URL_RE = re.compile(r"^(?:https?://)?(?:www\.|m\.)?soundcloud\.com/", re.IGNORECASE)


def top_level_menu(config: Config) -> list[MenuEntry]:
    """
    Build the plugin's root menu.

    Example:
        [entry.name for entry in top_level_menu(config)]
        # ['Hottest tracks', 'New tracks', 'Search', 'Tags', 'Playlist search', ..., 'URL']
    """
    entries = [
        MenuEntry(
            name=string("PLUGIN_SQUEEZECLOUD_HOT"),
            kind=EntryKind.LINK,
            continuation=BrowseRequest(kind=BrowseKind.TRACKS, order_params=HOTNESS),
        ),
        MenuEntry(
            name=string("PLUGIN_SQUEEZECLOUD_NEW"),
            kind=EntryKind.LINK,
            continuation=BrowseRequest(kind=BrowseKind.TRACKS, order_params=CREATED_AT),
        ),
        MenuEntry(
            name=string("PLUGIN_SQUEEZECLOUD_SEARCH"),
            kind=EntryKind.SEARCH,
            continuation=BrowseRequest(kind=BrowseKind.TRACKS, order_params=HOTNESS),
        ),
        MenuEntry(
            name=string("PLUGIN_SQUEEZECLOUD_TAGS"),
            kind=EntryKind.SEARCH,
            continuation=BrowseRequest(kind=BrowseKind.TAGS, order_params=HOTNESS),
        ),
        MenuEntry(
            name=string("PLUGIN_SQUEEZECLOUD_PLAYLIST_SEARCH"),
            kind=EntryKind.SEARCH,
            continuation=BrowseRequest(kind=BrowseKind.PLAYLISTS),
        ),
    ]

    if config.soundcloud.authenticated:
        entries += [
            MenuEntry(
                name=string("PLUGIN_SQUEEZECLOUD_ACTIVITIES"),
                kind=EntryKind.LINK,
                continuation=BrowseRequest(kind=BrowseKind.ACTIVITIES),
            ),
            MenuEntry(
                name=string("PLUGIN_SQUEEZECLOUD_FAVORITES"),
                kind=EntryKind.LINK,
                continuation=BrowseRequest(kind=BrowseKind.FAVORITES),
            ),
            MenuEntry(
                name=string("PLUGIN_SQUEEZECLOUD_FRIENDS"),
                kind=EntryKind.LINK,
                continuation=BrowseRequest(kind=BrowseKind.FRIENDS),
            ),
        ]
    else:
        entries.append(MenuEntry.text(string("PLUGIN_SQUEEZECLOUD_SET_API_KEY")))

    entries.append(MenuEntry(
        name=string("PLUGIN_SQUEEZECLOUD_URL"),
        kind=EntryKind.SEARCH,
        continuation=BrowseRequest(kind=BrowseKind.RESOLVE_URL),
    ))
    return entries


def normalize_catalog_url(user_input: str) -> str:
    """
    Undo the copy-paste damage some hosts do to typed URLs.

    Text input on some remotes turns periods into spaces, so the first
    " com" and "www " are turned back into ".com" and "www.".

    Example:
        normalize_catalog_url("https://www soundcloud com/artist/song")
        # "https://www.soundcloud.com/artist/song"
    """
    url = user_input.strip()
    url = url.replace(" com", ".com", 1)
    url = url.replace("www ", "www.", 1)
    return url


def is_catalog_page_url(uri: str) -> bool:
    """Return True for soundcloud.com web page URLs."""
    return bool(PAGE_URL_RE.match(uri or ""))
