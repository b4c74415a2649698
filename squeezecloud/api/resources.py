"""
Browse requests and their mapping onto catalog API resources.

A BrowseRequest is the explicit request context of one menu level: what
kind of listing the host asked for, where the page starts and how big it
is, plus the ids and search text carried down from parent menus.

resolve_resource() turns a BrowseRequest into the concrete
ResourceRequest (path, ordered query parameters, authentication flag)
that CatalogClient sends. It is a pure function of the request and the
paging policy.

Resource table:
    tracks / tags      tracks                      filter=streamable, q= / tags=
    tracks (user)      users/{uid}/tracks          auth
    playlists          playlists/{pid}             auth
                       users/{uid}/playlists       auth
                       playlists?q=                auth, limit capped
                       me/playlists                auth
    favorites          users/{uid}/likes/tracks    auth
                       me/likes/tracks             auth
    friends            me/followings               auth, offset only
    friend             users/{uid}                 auth, no paging
    activities         me/activities               auth, limit only
    resolve_url        resolve?url=
"""

from dataclasses import dataclass, replace
from enum import Enum

from squeezecloud.api.client import ResourceRequest
from squeezecloud.core.config import PagingPolicy


class BrowseKind(str, Enum):
    """Kinds of listing the browser can produce."""
    TRACKS = "tracks"
    PLAYLISTS = "playlists"
    FAVORITES = "favorites"
    TAGS = "tags"
    FRIENDS = "friends"
    FRIEND = "friend"
    ACTIVITIES = "activities"
    RESOLVE_URL = "resolve_url"


@dataclass(frozen=True)
class BrowseRequest:
    """
    Request context of one browse call.

    Attributes:
        kind: What to list.
        offset: Index of the first item. None means the host did not
                supply an index (treated as 0).
        limit: Requested page size.
        search_text: Free text from a search entry (query, tag or URL).
        user_id: Owner of the listing, if not the authenticated user.
        playlist_id: Playlist whose tracks are listed.
        order_params: Extra (key, value) pairs such as ("order", "hotness").
        total_hint: Known item count, replacing the total estimate.
    """
    kind: BrowseKind = BrowseKind.TRACKS
    offset: int | None = None
    limit: int = 200
    search_text: str | None = None
    user_id: str | None = None
    playlist_id: str | None = None
    order_params: tuple[tuple[str, str], ...] = ()
    total_hint: int | None = None

    @property
    def start(self) -> int:
        return self.offset or 0

    def at(self, offset: int | None, limit: int | None = None) -> "BrowseRequest":
        """Return a copy positioned at `offset` (and `limit`, if given)."""
        return replace(self, offset=offset, limit=self.limit if limit is None else limit)

    def with_search(self, text: str) -> "BrowseRequest":
        return replace(self, search_text=text)


def effective_limit(request: BrowseRequest, policy: PagingPolicy) -> int:
    """
    Return the number of items one call asks for.

    The per-call cap always applies; playlist searches are further
    limited to the default page size.
    """
    limit = min(request.limit, policy.max_items_per_call)
    if (
        request.kind == BrowseKind.PLAYLISTS
        and not request.playlist_id
        and not request.user_id
        and request.search_text
    ):
        limit = min(limit, policy.default_items_count)
    return limit


def resolve_resource(request: BrowseRequest, policy: PagingPolicy) -> ResourceRequest:
    """
    Map a browse request onto the API resource that serves it.

    Args:
        request: The browse request.
        policy: Paging constants (per-call cap, playlist search size).

    Returns:
        ResourceRequest with path, ordered query params and auth flag.
    """
    offset = request.start
    limit = effective_limit(request, policy)
    kind = request.kind

    if kind == BrowseKind.PLAYLISTS:
        if request.playlist_id:
            path = f"playlists/{request.playlist_id}"
            params = []
        elif request.user_id:
            path = f"users/{request.user_id}/playlists"
            params = []
        elif request.search_text:
            path = "playlists"
            params = [("q", request.search_text)]
        else:
            path = "me/playlists"
            params = []
        params += _paging(offset, limit)
        return ResourceRequest(path, tuple(params), requires_auth=True)

    if kind == BrowseKind.TRACKS and request.user_id:
        return ResourceRequest(
            f"users/{request.user_id}/tracks",
            tuple(_paging(offset, limit)),
            requires_auth=True
        )

    if kind == BrowseKind.FAVORITES:
        path = f"users/{request.user_id}/likes/tracks" if request.user_id else "me/likes/tracks"
        return ResourceRequest(path, tuple(_paging(offset, limit)), requires_auth=True)

    if kind == BrowseKind.FRIENDS:
        # The followings resource ignores limit. A single-item request
        # fetches the whole collection and picks the entry locally.
        params = () if request.limit == 1 else (("offset", str(offset)),)
        return ResourceRequest("me/followings", params, requires_auth=True)

    if kind == BrowseKind.FRIEND:
        return ResourceRequest(f"users/{request.user_id}", (), requires_auth=True)

    if kind == BrowseKind.ACTIVITIES:
        # Offset is not honoured here; limit is left out for single items
        # so the whole collection comes back.
        params = (("limit", str(limit)),) if request.limit > 1 else ()
        return ResourceRequest("me/activities", params, requires_auth=True)

    if kind == BrowseKind.RESOLVE_URL:
        return ResourceRequest("resolve", (("url", request.search_text or ""),))

    # Public track listing, plain or by tag
    params = list(request.order_params)
    params.append(("filter", "streamable"))
    if request.search_text:
        key = "tags" if kind == BrowseKind.TAGS else "q"
        params.append((key, request.search_text))
    params += _paging(offset, limit)
    return ResourceRequest("tracks", tuple(params))


def _paging(offset: int, limit: int) -> list[tuple[str, str]]:
    return [("offset", str(offset)), ("limit", str(limit))]
