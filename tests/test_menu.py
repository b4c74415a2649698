"""Tests for the top-level menu, catalog URLs and strings"""

import pytest

from squeezecloud.api.resources import BrowseKind, BrowseRequest
from squeezecloud.browse.menu import (
    is_catalog_page_url,
    normalize_catalog_url,
    top_level_menu,
)
from squeezecloud.browse.models import EntryKind
from squeezecloud.browse.paginator import CatalogPaginator
from squeezecloud.core.config import PagingPolicy
from squeezecloud.strings import register_strings, reset_strings, string

from tests.conftest import FakeCatalogClient, make_track


@pytest.fixture
def restore_strings():
    yield
    reset_strings()


class TestTopLevelMenu:
    """Test the root menu in both modes"""

    def test_anonymous(self, config):
        """Without a key the account entries are replaced by a hint"""
        entries = top_level_menu(config)
        names = [entry.name for entry in entries]

        assert names[:5] == ["Hottest tracks", "New tracks", "Search", "Tags", "Playlist search"]
        assert "Favorites" not in names
        assert entries[5].kind == EntryKind.TEXT
        assert entries[-1].name == "URL"

    def test_authenticated(self, auth_config):
        entries = top_level_menu(auth_config)
        kinds = [entry.continuation.kind for entry in entries]

        assert [entry.name for entry in entries][5:8] == ["Activities", "Favorites", "Friends"]
        assert kinds[5:] == [
            BrowseKind.ACTIVITIES,
            BrowseKind.FAVORITES,
            BrowseKind.FRIENDS,
            BrowseKind.RESOLVE_URL,
        ]
        assert all(entry.kind != EntryKind.TEXT for entry in entries)

    def test_search_entries_take_input(self, config):
        entries = top_level_menu(config)
        search = entries[2]

        assert search.kind == EntryKind.SEARCH
        filled = search.continuation.with_search("ambient")
        assert filled.search_text == "ambient"
        assert filled.order_params == (("order", "hotness"),)

    def test_hot_and_new_orders(self, config):
        hot, new = top_level_menu(config)[:2]
        assert hot.continuation.order_params == (("order", "hotness"),)
        assert new.continuation.order_params == (("order", "created_at"),)

    def test_translated_names(self, config, restore_strings):
        register_strings({"PLUGIN_SQUEEZECLOUD_HOT": "Heißeste Tracks"})
        assert top_level_menu(config)[0].name == "Heißeste Tracks"


class TestCatalogUrls:

    @pytest.mark.parametrize("user_input,expected", [
        ("https://www soundcloud com/artist/song", "https://www.soundcloud.com/artist/song"),
        ("  https://soundcloud.com/artist/sets/mix  ", "https://soundcloud.com/artist/sets/mix"),
        ("https://soundcloud com/a/b", "https://soundcloud.com/a/b"),
    ])
    def test_normalize(self, user_input, expected):
        assert normalize_catalog_url(user_input) == expected

    def test_only_first_occurrence_is_fixed(self):
        """Spaces later in the path are not touched beyond the first fix"""
        assert normalize_catalog_url("soundcloud com/a com") == "soundcloud.com/a com"

    @pytest.mark.parametrize("uri", [
        "https://soundcloud.com/artist/song",
        "http://www.soundcloud.com/artist/sets/mix",
        "https://m.soundcloud.com/artist",
        "soundcloud.com/artist",
    ])
    def test_page_urls(self, uri):
        assert is_catalog_page_url(uri)

    @pytest.mark.parametrize("uri", [
        "soundcloud://42",
        "https://example.com/soundcloud.com/",
        "",
    ])
    def test_not_page_urls(self, uri):
        assert not is_catalog_page_url(uri)


class TestStrings:

    def test_params(self):
        assert string("PLUGIN_SQUEEZECLOUD_FAVORITED_BY", user="alice") == "favorited by alice"

    def test_unknown_token_is_returned(self):
        assert string("PLUGIN_SQUEEZECLOUD_NOPE") == "PLUGIN_SQUEEZECLOUD_NOPE"

    def test_reset(self, restore_strings):
        register_strings({"PLUGIN_SQUEEZECLOUD_URL": "Adresse"})
        assert string("PLUGIN_SQUEEZECLOUD_URL") == "Adresse"
        reset_strings()
        assert string("PLUGIN_SQUEEZECLOUD_URL") == "URL"

    @pytest.mark.parametrize("template", [
        "favorisé par {utilisateur}",
        "favorisé par {0}",
        "favorisé par {user",
    ])
    def test_mismatched_translation_falls_back(self, restore_strings, template):
        """A translation with the wrong placeholder uses the English template"""
        register_strings({"PLUGIN_SQUEEZECLOUD_FAVORITED_BY": template})
        assert string("PLUGIN_SQUEEZECLOUD_FAVORITED_BY", user="alice") == "favorited by alice"

    def test_matching_translation_is_used(self, restore_strings):
        register_strings({"PLUGIN_SQUEEZECLOUD_FAVORITED_BY": "favorisé par {user}"})
        assert string("PLUGIN_SQUEEZECLOUD_FAVORITED_BY", user="alice") == "favorisé par alice"

    @pytest.mark.asyncio
    async def test_activities_page_survives_bad_translation(self, restore_strings):
        activities = {"collection": [{
            "type": "favoriting",
            "origin": {"track": make_track(title="Song"), "user": {"username": "alice"}},
        }]}
        paginator = CatalogPaginator(FakeCatalogClient({"me/activities": activities}), PagingPolicy())
        register_strings({"PLUGIN_SQUEEZECLOUD_FAVORITED_BY": "favorisé par {utilisateur}"})

        page = await paginator.fetch_page(BrowseRequest(BrowseKind.ACTIVITIES, offset=0, limit=20))

        assert [item.name for item in page.items] == ["Song - favorited by alice"]
