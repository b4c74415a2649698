"""
Asynchronous SoundCloud API client.

This module wraps an aiohttp ClientSession and provides the three network
operations the rest of the package needs:
    - get_json(): fetch a catalog resource described by a ResourceRequest
    - get_json_url(): fetch an absolute continuation URL (next_href)
    - probe_redirect(): GET a URL without following redirects and return
      the Location header (signed CDN URL)

Authentication:
    Resources flagged requires_auth are sent with an
    "Authorization: OAuth <api_key>" header when an API key is configured.
    Everything else (and everything in anonymous mode) carries the public
    client_id query parameter, so server-side anonymous limits apply.

Rate Limiting:
    Every request passes through an asyncio-throttle Throttler capped at
    http.rate_limit requests per second.

Errors:
    All failures are raised as CatalogError subclasses:
    TransportError, DecodeError, RemoteApiError, RedirectMissing.

Usage:
    async with CatalogClient(config) as client:
        data = await client.get_json(ResourceRequest("tracks", (("limit", "10"),)))
"""

import asyncio
import json
from dataclasses import dataclass
from typing import Any

import aiohttp
from asyncio_throttle import Throttler

from squeezecloud.core.config import Config
from squeezecloud.core.exceptions import (
    DecodeError,
    RedirectMissing,
    RemoteApiError,
    TransportError,
)
from squeezecloud.core.logger import get_logger

logger = get_logger(__name__)


USER_AGENT = "SqueezeCloud"


@dataclass(frozen=True)
class ResourceRequest:
    """
    A concrete API request produced by the resource resolver.

    Attributes:
        path: Resource path relative to the API base, e.g. "users/7/tracks".
        query_params: Ordered (key, value) pairs.
        requires_auth: Whether the resource needs the user's credential.
    """
    path: str
    query_params: tuple[tuple[str, str], ...] = ()
    requires_auth: bool = False

    def param(self, key: str) -> str | None:
        """Return the first value of query parameter `key`, if present."""
        for name, value in self.query_params:
            if name == key:
                return value
        return None


class CatalogClient:
    """
    aiohttp-based client for the catalog API.

    The session is created lazily on first use and closed with close() or
    by leaving the async context. A session passed in by the caller is
    not closed by the client.
    """

    def __init__(
        self,
        config: Config,
        session: aiohttp.ClientSession | None = None,
        throttler: Throttler | None = None
    ) -> None:
        self._soundcloud = config.soundcloud
        self._http = config.http
        self._session = session
        self._owns_session = session is None
        self._throttler = throttler or Throttler(rate_limit=config.http.rate_limit, period=1.0)

    @property
    def authenticated(self) -> bool:
        return self._soundcloud.authenticated

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the owned session, if one was created."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
            logger.debug("Closed aiohttp ClientSession")
        if self._owns_session:
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Accept": "application/json", "User-Agent": USER_AGENT}
            )
            self._owns_session = True
        return self._session

    def build_url(self, path: str) -> str:
        """Join a resource path onto the configured API base."""
        return self._soundcloud.api_base + path.lstrip("/")

    def _auth(self, requires_auth: bool) -> tuple[list[tuple[str, str]], dict[str, str]]:
        """Return the (extra query params, headers) for the authentication mode."""
        if requires_auth and self._soundcloud.api_key:
            return [], {"Authorization": f"OAuth {self._soundcloud.api_key}"}
        return [("client_id", self._soundcloud.client_id)], {}

    async def get_json(self, resource: ResourceRequest, timeout: float | None = None) -> Any:
        """
        Fetch a catalog resource and return the decoded JSON body.

        Raises:
            TransportError: No response (connection failure, timeout).
            RemoteApiError: Error status or error field in the body.
            DecodeError: Body is not valid JSON.
        """
        auth_params, headers = self._auth(resource.requires_auth)
        params = list(resource.query_params) + auth_params
        return await self._request_json(self.build_url(resource.path), params, headers, timeout)

    async def get_json_url(
        self,
        url: str,
        requires_auth: bool = False,
        timeout: float | None = None
    ) -> Any:
        """
        Fetch an absolute URL handed out by the API (a next_href cursor).

        The cursor already carries its paging parameters; only the
        authentication is added.
        """
        auth_params, headers = self._auth(requires_auth)
        if "client_id=" in url:
            auth_params = []
        return await self._request_json(url, auth_params, headers, timeout)

    async def _request_json(
        self,
        url: str,
        params: list[tuple[str, str]],
        headers: dict[str, str],
        timeout: float | None
    ) -> Any:
        session = self._get_session()
        logger.debug(f"Fetching: {url} {_loggable(params)}")

        try:
            async with self._throttler:
                async with session.get(
                    url,
                    params=params or None,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=timeout or self._http.timeout),
                ) as response:
                    status = response.status
                    reason = response.reason or ""
                    body = await response.text()
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Timed out fetching {url}",
                details={"url": url}
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(
                f"Failed to fetch {url}: {e}",
                details={"url": url, "original_error": str(e)}
            ) from e

        if status >= 400:
            try:
                message = _error_message(json.loads(body))
            except ValueError:
                message = None
            raise RemoteApiError(
                message or f"{status} - {reason}".strip(" -"),
                details={"url": url, "http_status": status},
                status=status
            )

        try:
            data = json.loads(body)
        except ValueError as e:
            raise DecodeError(
                f"Invalid JSON in response from {url}",
                details={"url": url, "original_error": str(e)}
            ) from e

        message = _error_message(data)
        if message:
            raise RemoteApiError(message, details={"url": url}, status=status)

        return data

    async def probe_redirect(self, url: str, timeout: float | None = None) -> str:
        """
        GET `url` without following redirects and return its Location header.

        Raises:
            TransportError: No response (connection failure, timeout).
            RedirectMissing: The response carried no Location header.
        """
        auth_params, headers = self._auth(True)
        session = self._get_session()
        logger.debug(f"Probing redirect: {url}")

        try:
            async with self._throttler:
                async with session.get(
                    url,
                    params=auth_params or None,
                    headers=headers,
                    allow_redirects=False,
                    timeout=aiohttp.ClientTimeout(total=timeout or self._http.playback_timeout),
                ) as response:
                    status = response.status
                    location = response.headers.get("Location")
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Timed out probing {url}",
                details={"url": url}
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(
                f"Failed to probe {url}: {e}",
                details={"url": url, "original_error": str(e)}
            ) from e

        if not location:
            raise RedirectMissing(
                f"No Location header in response from {url}",
                details={"url": url, "http_status": status}
            )

        return location


def _error_message(data: Any) -> str | None:
    """Extract the server-supplied error message from a decoded body, if any."""
    if not isinstance(data, dict):
        return None

    error = data.get("error")
    if error:
        if isinstance(error, dict):
            return str(error.get("message") or error)
        return str(error)

    errors = data.get("errors")
    if isinstance(errors, list) and errors:
        messages = []
        for item in errors:
            if isinstance(item, dict):
                messages.append(str(item.get("error_message") or item.get("message") or item))
            else:
                messages.append(str(item))
        return "; ".join(messages)

    return None


def _loggable(params: list[tuple[str, str]]) -> str:
    return "&".join(f"{key}={value}" for key, value in params)
