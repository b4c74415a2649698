"""Tests for the catalog paginator"""

import pytest

from squeezecloud.api.resources import BrowseKind, BrowseRequest
from squeezecloud.browse.models import EntryKind
from squeezecloud.browse.paginator import CatalogPaginator
from squeezecloud.core.config import PagingPolicy
from squeezecloud.core.exceptions import DecodeError, RemoteApiError, TransportError

from tests.conftest import FakeCatalogClient, make_track, make_user


def tracks(first, count):
    return [make_track(track_id) for track_id in range(first, first + count)]


def paginator_for(responses=None, urls=None, policy=None):
    client = FakeCatalogClient(responses=responses, urls=urls)
    return CatalogPaginator(client, policy or PagingPolicy()), client


class TestPageShape:
    """Test offset, total and page length"""

    @pytest.mark.asyncio
    async def test_full_page_uses_estimate(self):
        """A full page reports max_items + limit"""
        paginator, client = paginator_for({"tracks": tracks(1, 20)})
        page = await paginator.fetch_page(BrowseRequest(BrowseKind.TRACKS, offset=40, limit=20))

        assert len(page.items) == 20
        assert page.offset == 40
        assert page.total == 520
        assert len(client.calls) == 1

    @pytest.mark.asyncio
    async def test_short_page_truncates_total(self):
        """Fewer items than requested means the listing ends here"""
        paginator, _ = paginator_for({"tracks": tracks(1, 7)})
        page = await paginator.fetch_page(BrowseRequest(BrowseKind.TRACKS, offset=40, limit=20))

        assert page.total == 47

    @pytest.mark.asyncio
    async def test_items_never_exceed_limit(self):
        """Oversized responses are cut to the requested limit"""
        paginator, _ = paginator_for({"tracks": tracks(1, 30)})
        page = await paginator.fetch_page(BrowseRequest(BrowseKind.TRACKS, offset=0, limit=10))

        assert len(page.items) == 10

    @pytest.mark.asyncio
    async def test_one_call_for_large_limit(self):
        """Limits above the per-call cap still cost one call of 200"""
        paginator, client = paginator_for({"tracks": tracks(1, 200)})
        page = await paginator.fetch_page(BrowseRequest(BrowseKind.TRACKS, offset=0, limit=1000))

        assert len(client.calls) == 1
        assert client.calls[0][1].param("limit") == "200"
        assert len(page.items) == 200

    @pytest.mark.asyncio
    async def test_idempotent(self):
        """Same request against the same catalog gives the same items"""
        paginator, _ = paginator_for({"tracks": tracks(1, 20)})
        request = BrowseRequest(BrowseKind.TRACKS, offset=0, limit=20)

        first = await paginator.fetch_page(request)
        second = await paginator.fetch_page(request)

        assert first.items == second.items

    @pytest.mark.asyncio
    async def test_total_hint(self):
        """A known count replaces the estimate"""
        paginator, _ = paginator_for({"users/7/likes/tracks": tracks(1, 20)})
        request = BrowseRequest(BrowseKind.FAVORITES, offset=0, limit=20, user_id="7", total_hint=64)
        page = await paginator.fetch_page(request)

        assert page.total == 64

    @pytest.mark.asyncio
    async def test_playlist_tracks(self):
        playlist = {"id": 9, "title": "Mix", "tracks": tracks(1, 3)}
        paginator, _ = paginator_for({"playlists/9": playlist})
        page = await paginator.fetch_page(BrowseRequest(BrowseKind.PLAYLISTS, playlist_id="9"))

        assert [item.play_uri for item in page.items] == ["soundcloud://1", "soundcloud://2", "soundcloud://3"]
        assert page.total == 3


class TestFriendQuirks:
    """Test the followings and single friend special cases"""

    @pytest.mark.asyncio
    async def test_single_friend_pick(self):
        """Offset 3 of 10 followings gives the fourth friend, echoed at offset 0"""
        followings = {"collection": [make_user(user_id, f"user{user_id}") for user_id in range(10)]}
        paginator, client = paginator_for({"me/followings": followings})

        page = await paginator.fetch_page(BrowseRequest(BrowseKind.FRIENDS, offset=3, limit=1))

        assert len(page.items) == 1
        assert page.items[0].name.startswith("user3 (")
        assert page.offset == 0
        assert client.calls[0][1].query_params == ()

    @pytest.mark.asyncio
    async def test_single_friend_out_of_range(self):
        paginator, _ = paginator_for({"me/followings": [make_user(1)]})
        page = await paginator.fetch_page(BrowseRequest(BrowseKind.FRIENDS, offset=5, limit=1))

        assert page.items == ()
        assert page.total == 5

    @pytest.mark.asyncio
    async def test_single_friend_past_first_partition(self):
        """An index beyond the first partition follows next_href to reach it"""
        first = {
            "collection": [make_user(user_id, f"user{user_id}") for user_id in range(50)],
            "next_href": "https://api.test/followings?cursor=50",
        }
        second = {"collection": [make_user(user_id, f"user{user_id}") for user_id in range(50, 80)]}
        paginator, client = paginator_for(
            {"me/followings": first},
            urls={"https://api.test/followings?cursor=50": second},
        )

        page = await paginator.fetch_page(BrowseRequest(BrowseKind.FRIENDS, offset=60, limit=1))

        assert len(page.items) == 1
        assert page.items[0].name.startswith("user60 (")
        assert [kind for kind, _ in client.calls] == ["get_json", "get_json_url"]

    @pytest.mark.asyncio
    async def test_single_friend_stops_at_hop_bound(self):
        urls = {
            f"https://api.test/{n}": {"collection": [make_user(n + 1)], "next_href": f"https://api.test/{n + 1}"}
            for n in range(10)
        }
        paginator, client = paginator_for(
            {"me/followings": {"collection": [make_user(0)], "next_href": "https://api.test/0"}},
            urls=urls,
            policy=PagingPolicy(max_continuation_hops=2),
        )

        page = await paginator.fetch_page(BrowseRequest(BrowseKind.FRIENDS, offset=8, limit=1))

        assert page.items == ()
        assert len(client.calls) == 3

    @pytest.mark.asyncio
    async def test_friend_offset_reset(self):
        """A friend page echoes offset 0 when the host supplied an index"""
        paginator, _ = paginator_for({"users/7": make_user(7, playlist_count=1)})

        page = await paginator.fetch_page(BrowseRequest(BrowseKind.FRIEND, user_id="7", offset=2))
        assert page.offset == 0
        assert len(page.items) == 3

    @pytest.mark.asyncio
    async def test_friend_offset_reset_can_be_disabled(self):
        policy = PagingPolicy(reset_friend_offset=False)
        paginator, _ = paginator_for({"users/7": make_user(7)}, policy=policy)

        page = await paginator.fetch_page(BrowseRequest(BrowseKind.FRIEND, user_id="7", offset=2))
        assert page.offset == 2


class TestActivityQuirks:

    @pytest.mark.asyncio
    async def test_single_activity_pick(self):
        """Single-item activity requests select index offset from the full collection"""
        activities = {"collection": [
            {"type": "track", "origin": make_track(track_id)} for track_id in range(10)
        ]}
        paginator, client = paginator_for({"me/activities": activities})

        page = await paginator.fetch_page(BrowseRequest(BrowseKind.ACTIVITIES, offset=3, limit=1))

        assert [item.play_uri for item in page.items] == ["soundcloud://3"]
        assert page.offset == 3
        assert client.calls[0][1].query_params == ()

    @pytest.mark.asyncio
    async def test_activity_total_is_limit(self):
        activities = {"collection": [
            {"type": "track", "origin": make_track(track_id)} for track_id in range(20)
        ]}
        paginator, _ = paginator_for({"me/activities": activities})

        page = await paginator.fetch_page(BrowseRequest(BrowseKind.ACTIVITIES, offset=0, limit=20))
        assert page.total == 20


class TestContinuation:
    """Test next_href cursor following"""

    @pytest.mark.asyncio
    async def test_follows_cursor_until_full(self):
        first = {"collection": tracks(1, 5), "next_href": "https://api.test/next1"}
        second = {"collection": tracks(6, 5), "next_href": "https://api.test/next2"}
        paginator, client = paginator_for(
            {"me/likes/tracks": first},
            urls={"https://api.test/next1": second},
        )

        page = await paginator.fetch_page(BrowseRequest(BrowseKind.FAVORITES, offset=0, limit=10))

        assert len(page.items) == 10
        assert [kind for kind, _ in client.calls] == ["get_json", "get_json_url"]

    @pytest.mark.asyncio
    async def test_hop_bound(self):
        """The loop stops after max_continuation_hops extra calls"""
        urls = {
            f"https://api.test/{n}": {"collection": tracks(n * 10, 1), "next_href": f"https://api.test/{n + 1}"}
            for n in range(10)
        }
        paginator, client = paginator_for(
            {"me/likes/tracks": {"collection": tracks(1, 1), "next_href": "https://api.test/0"}},
            urls=urls,
            policy=PagingPolicy(max_continuation_hops=2),
        )

        page = await paginator.fetch_page(BrowseRequest(BrowseKind.FAVORITES, offset=0, limit=10))

        assert len(client.calls) == 3
        assert len(page.items) == 3
        assert page.total == 3

    @pytest.mark.asyncio
    async def test_plain_lists_are_not_followed(self):
        paginator, client = paginator_for({"tracks": tracks(1, 3)})
        await paginator.fetch_page(BrowseRequest(BrowseKind.TRACKS, offset=0, limit=10))
        assert len(client.calls) == 1


class TestErrors:
    """Browse errors never escape"""

    @pytest.mark.asyncio
    async def test_remote_error_becomes_text_entry(self):
        paginator, _ = paginator_for({"tracks": RemoteApiError("401 - Unauthorized", status=401)})
        page = await paginator.fetch_page(BrowseRequest(BrowseKind.TRACKS))

        assert len(page.items) == 1
        assert page.items[0].kind == EntryKind.TEXT
        assert page.items[0].name == "401 - Unauthorized"

    @pytest.mark.asyncio
    async def test_transport_error_becomes_text_entry(self):
        paginator, _ = paginator_for({"tracks": TransportError("Timed out")})
        page = await paginator.fetch_page(BrowseRequest(BrowseKind.TRACKS))

        assert page.items[0].name == "Timed out"

    @pytest.mark.asyncio
    async def test_decode_error_gives_empty_page(self):
        paginator, _ = paginator_for({"tracks": DecodeError("bad json")})
        page = await paginator.fetch_page(BrowseRequest(BrowseKind.TRACKS, offset=20))

        assert page.items == ()
        assert page.total == 20

    @pytest.mark.asyncio
    async def test_unexpected_shape_gives_empty_page(self):
        paginator, _ = paginator_for({"tracks": {"unexpected": True}})
        page = await paginator.fetch_page(BrowseRequest(BrowseKind.TRACKS, offset=0, limit=10))

        assert page.items == ()
        assert page.total == 0
