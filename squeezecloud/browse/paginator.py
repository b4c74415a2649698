"""
Catalog paginator: one browse request in, one Page out.

Each fetch_page() call resolves the request to an API resource, performs
one API call for at most min(limit, max_items_per_call) items, parses the
response and computes the page's offset and total. The host pages by
calling again with an advanced offset.

Resource quirks handled here:
    - friends, limit 1: the whole followings collection is fetched and
      the entry at `offset` is returned, with the echoed offset reset to 0.
      Partitioned collections are followed until `offset` is reached.
    - activities, limit 1: the whole activity collection is fetched and
      the entry at `offset` is parsed with the activity parser.
    - activities, limit > 1: total is the requested limit.
    - friend: echoed offset reset to 0 when the host supplied an index.
    - cursor partitions ({collection, next_href}) that come back short are
      followed for at most max_continuation_hops extra calls.

Totals:
    The API reports no real counts, so total defaults to
    max_items + limit, or the known count carried by the request. A short
    page proves the end of the listing: total = offset + len(items).

Errors:
    Browse errors never escape. An undecodable body gives an empty page;
    any other CatalogError gives a page with one text entry.
"""

from typing import Any

from squeezecloud.api.client import CatalogClient
from squeezecloud.api.resources import (
    BrowseKind,
    BrowseRequest,
    effective_limit,
    resolve_resource,
)
from squeezecloud.browse.models import MenuEntry, Page
from squeezecloud.browse.parsers import (
    Parser,
    collection_items,
    parse_activities,
    parse_friends,
    parser_for,
)
from squeezecloud.core.config import PagingPolicy
from squeezecloud.core.exceptions import CatalogError, DecodeError
from squeezecloud.core.logger import get_logger

logger = get_logger(__name__)


class CatalogPaginator:
    """
    Produces Pages for BrowseRequests.

    Example:
        paginator = CatalogPaginator(client, config.paging)
        page = await paginator.fetch_page(BrowseRequest(BrowseKind.TRACKS, offset=0, limit=50))
    """

    def __init__(self, client: CatalogClient, policy: PagingPolicy) -> None:
        self._client = client
        self._policy = policy

    async def fetch_page(self, request: BrowseRequest) -> Page:
        """
        Fetch one page for `request`.

        Returns:
            The page. Errors are folded into the page (see module docstring).
        """
        try:
            return await self._fetch_page(request)
        except DecodeError as e:
            logger.warning(f"Undecodable response for {request.kind.value}: {e.message}")
            return Page(items=(), offset=request.start, total=request.start)
        except CatalogError as e:
            logger.warning(f"Error fetching {request.kind.value}: {e.message}")
            return Page.error(e.message)

    async def _fetch_page(self, request: BrowseRequest) -> Page:
        policy = self._policy
        offset = request.start
        quantity = effective_limit(request, policy)
        resource = resolve_resource(request, policy)

        logger.debug(f"{request.kind.value}: index {offset}, quantity {quantity}")

        raw = await self._client.get_json(resource)
        echo_offset = offset

        if request.kind == BrowseKind.FRIENDS and request.limit == 1:
            items = await self._pick(raw, offset, parse_friends, resource.requires_auth)
            if policy.reset_friend_offset:
                echo_offset = 0
        elif request.kind == BrowseKind.ACTIVITIES and request.limit == 1:
            items = await self._pick(raw, offset, parse_activities, resource.requires_auth)
        else:
            parser = parser_for(request)
            items = parser(raw)
            if len(items) < quantity and _next_href(raw):
                items = await self._follow(raw, items, quantity, parser, resource.requires_auth)

        items = items[:quantity]

        if request.total_hint is not None:
            total = request.total_hint
        elif request.kind == BrowseKind.ACTIVITIES and request.limit > 1:
            total = quantity
        else:
            total = policy.default_total(quantity)

        if len(items) < quantity:
            total = offset + len(items)
            logger.debug(f"Short page, truncate total to {total}")

        if (
            request.kind == BrowseKind.FRIEND
            and request.offset is not None
            and policy.reset_friend_offset
        ):
            echo_offset = 0

        logger.debug(f"This page: {len(items)} total: {total}")
        return Page(items=tuple(items), offset=echo_offset, total=total)

    async def _follow(
        self,
        raw: Any,
        items: list[MenuEntry],
        quantity: int,
        parser: Parser,
        requires_auth: bool
    ) -> list[MenuEntry]:
        """Follow next_href cursors until the page is full or the hop bound is hit."""
        hops = 0
        next_href = _next_href(raw)
        while next_href and len(items) < quantity and hops < self._policy.max_continuation_hops:
            hops += 1
            logger.debug(f"Following cursor ({hops}): {next_href}")
            raw = await self._client.get_json_url(next_href, requires_auth=requires_auth)
            items.extend(parser(raw))
            next_href = _next_href(raw)
        return items

    async def _pick(
        self,
        raw: Any,
        index: int,
        parser: Parser,
        requires_auth: bool
    ) -> list[MenuEntry]:
        """
        Parse only the entry at `index` of a full collection.

        Partitioned collections are followed through next_href until
        `index` is reached, the cursors run out or the hop bound is hit.
        """
        collection = list(collection_items(raw))
        hops = 0
        next_href = _next_href(raw)
        while index >= len(collection) and next_href and hops < self._policy.max_continuation_hops:
            hops += 1
            logger.debug(f"Following cursor for index {index} ({hops}): {next_href}")
            raw = await self._client.get_json_url(next_href, requires_auth=requires_auth)
            collection.extend(collection_items(raw))
            next_href = _next_href(raw)

        if index >= len(collection):
            return []
        return parser([collection[index]])


def _next_href(raw: Any) -> str | None:
    if isinstance(raw, dict) and isinstance(raw.get("next_href"), str):
        return raw["next_href"]
    return None

