"""
squeezecloud: SoundCloud catalog browsing and stream resolution for media hosts.

This package exposes the SoundCloud catalog (tracks, playlists, the user's
favorites, followings and activity stream) as a paged menu tree, and turns
menu selections into playable CDN stream URLs.

Architecture:
    Browsing:
        - Resolve a BrowseRequest into an API resource (api/resources.py)
        - Fetch it through the throttled aiohttp client (api/client.py)
        - Parse the response into MenuEntry objects (browse/parsers.py)
        - Compute offset/total for the host's pager (browse/paginator.py)

    Playback:
        - Fetch the track descriptor
        - Pick the stream or download URL
        - Probe the redirect to obtain the signed CDN URL
        - Cache the track metadata for 24 hours

    Metadata polling:
        - Answer from the cache without blocking
        - Prefetch uncached queue entries in the background, at most one
          fetch per (player, track) at a time

Modules:
    core/       - Configuration, cache and fetch guard, logging, exceptions
    api/        - Browse requests, resource mapping, HTTP client
    browse/     - Menu models, parsers, paginator, top-level menu
    playback/   - Stream resolver and metadata provider
    strings.py  - Localizable UI strings
    service.py  - SqueezeCloud facade (host entry points)
    cli.py      - Command-line debugging host

Usage:
    Command Line:
        squeezecloud browse tracks --order hotness
        squeezecloud play soundcloud://123456

    Python API:
        from squeezecloud import SqueezeCloud, BrowseRequest, BrowseKind, load_config

        async with SqueezeCloud(load_config()) as service:
            page = await service.browse(BrowseRequest(BrowseKind.TRACKS, offset=0, limit=20))
            stream = await service.resolve_playback(page.items[0].play_uri)

Configuration:
    Optional config.yaml in the current directory:

        soundcloud:
          api_key: ""          # empty = anonymous mode
          playmethod: stream   # or "download"

Dependencies:
    - aiohttp: HTTP client
    - asyncio-throttle: Request rate limiting
    - pyyaml: Configuration file parsing
    - python-dotenv: .env support for secrets
    - click / rich-click: CLI framework and colors
    - tqdm: Progress bars and tqdm-safe console logging
"""

__version__ = "0.1.0"
__author__ = "squeezecloud"
__license__ = "GPL-2.0"

# Convenience imports for common usage
from squeezecloud.api import BrowseKind, BrowseRequest, CatalogClient
from squeezecloud.browse import EntryKind, MenuEntry, Page
from squeezecloud.core import (
    CatalogError,
    Config,
    ConfigError,
    PlaybackError,
    PlaybackErrorKind,
    SqueezeCloudError,
    get_logger,
    load_config,
    setup_logging,
)
from squeezecloud.playback import PlaybackMetadata, ResolvedStream
from squeezecloud.service import SqueezeCloud

__all__ = [
    # Version
    "__version__",
    # Service
    "SqueezeCloud",
    "CatalogClient",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    # Exceptions
    "SqueezeCloudError",
    "ConfigError",
    "CatalogError",
    "PlaybackError",
    "PlaybackErrorKind",
    # Models
    "BrowseKind",
    "BrowseRequest",
    "EntryKind",
    "MenuEntry",
    "Page",
    "PlaybackMetadata",
    "ResolvedStream",
]
