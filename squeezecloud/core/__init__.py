"""
Core module for squeezecloud.

This module provides the foundational components used throughout the package:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - cache: Metadata TTL cache and background fetch guard
    - logger: Logging system with multiple outputs

Usage:
    from squeezecloud.core import (
        Config, load_config,
        MetadataCache, FetchGuard,
        setup_logging, get_logger,
        SqueezeCloudError, ConfigError, PlaybackError
    )
"""

from squeezecloud.core.cache import FetchGuard, MetadataCache
from squeezecloud.core.config import (
    CacheConfig,
    Config,
    HttpConfig,
    LoggingConfig,
    PagingPolicy,
    SoundCloudConfig,
    load_config,
)
from squeezecloud.core.exceptions import (
    CatalogError,
    ConfigError,
    DecodeError,
    PlaybackError,
    PlaybackErrorKind,
    RedirectMissing,
    RemoteApiError,
    SqueezeCloudError,
    TransportError,
)
from squeezecloud.core.logger import (
    get_logger,
    log_stream_failure,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "SoundCloudConfig",
    "HttpConfig",
    "CacheConfig",
    "PagingPolicy",
    "LoggingConfig",
    "load_config",
    # Cache
    "MetadataCache",
    "FetchGuard",
    # Exceptions
    "SqueezeCloudError",
    "ConfigError",
    "CatalogError",
    "TransportError",
    "DecodeError",
    "RemoteApiError",
    "RedirectMissing",
    "PlaybackError",
    "PlaybackErrorKind",
    # Logger
    "setup_logging",
    "get_logger",
    "log_stream_failure",
    "shutdown_logging",
]
