"""
SoundCloud API access for squeezecloud.

    - BrowseKind, BrowseRequest: What a menu level asks for
    - ResourceRequest: A resolved API path plus query parameters
    - resolve_resource: BrowseRequest -> ResourceRequest mapping
    - CatalogClient: aiohttp client (JSON fetch, continuation fetch, redirect probe)

Usage:
    from squeezecloud.api import BrowseKind, BrowseRequest, CatalogClient, resolve_resource
"""

from squeezecloud.api.client import CatalogClient, ResourceRequest
from squeezecloud.api.resources import (
    BrowseKind,
    BrowseRequest,
    effective_limit,
    resolve_resource,
)

__all__ = [
    "BrowseKind",
    "BrowseRequest",
    "CatalogClient",
    "ResourceRequest",
    "effective_limit",
    "resolve_resource",
]
