"""
Configuration management for squeezecloud.

This module handles loading, validating, and providing access to the
plugin configuration stored in config.yaml.

The configuration file contains:
    - SoundCloud credentials (api_key for the authenticated menus, the
      public client_id used for anonymous requests)
    - The playback method selector (stream or download)
    - HTTP timeouts and the request rate limit
    - Metadata cache TTL
    - Paging policy constants for the catalog browser
    - Optional log directory

Secrets can also come from the environment (or a .env file):
    SQUEEZECLOUD_API_KEY, SQUEEZECLOUD_CLIENT_ID, SQUEEZECLOUD_PLAYMETHOD
Environment values take precedence over the file.

Example config.yaml:
    soundcloud:
      api_key: ""            # empty = anonymous mode
      playmethod: "stream"   # or "download"

    http:
      timeout: 15
      playback_timeout: 35
      rate_limit: 10

    cache:
      metadata_ttl: 86400

    paging:
      max_items: 500
      max_items_per_call: 200
      default_items_count: 30
      reset_friend_offset: true
      max_continuation_hops: 5

    logging:
      directory: "~/.squeezecloud/logs"
      level: "INFO"
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from squeezecloud.core.exceptions import ConfigError


# Default configuration file name (looked up in the current working directory)
CONFIG_FILENAME = "config.yaml"

DEFAULT_API_BASE = "https://api.soundcloud.com/"

# Public application id used for unauthenticated requests
DEFAULT_CLIENT_ID = "112d35211af80d72c8ff470ab66400d8"

PLAYMETHOD_STREAM = "stream"
PLAYMETHOD_DOWNLOAD = "download"
PLAYMETHODS = (PLAYMETHOD_STREAM, PLAYMETHOD_DOWNLOAD)

ENV_API_KEY = "SQUEEZECLOUD_API_KEY"
ENV_CLIENT_ID = "SQUEEZECLOUD_CLIENT_ID"
ENV_PLAYMETHOD = "SQUEEZECLOUD_PLAYMETHOD"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class SoundCloudConfig:
    """
    SoundCloud account and playback preferences.

    Attributes:
        api_key: OAuth token of the user. Empty string means anonymous mode:
                 authenticated-only menus are hidden and requests carry
                 the public client_id instead.
        client_id: Public application id appended to anonymous requests.
        playmethod: "stream" or "download". With "download", tracks marked
                    downloadable are played from their download URL.
        api_base: Base URL of the catalog API, with trailing slash.
    """
    api_key: str = ""
    client_id: str = DEFAULT_CLIENT_ID
    playmethod: str = PLAYMETHOD_STREAM
    api_base: str = DEFAULT_API_BASE

    @property
    def authenticated(self) -> bool:
        """True when a user credential is configured."""
        return bool(self.api_key)


@dataclass(frozen=True)
class HttpConfig:
    """
    HTTP behaviour.

    Attributes:
        timeout: Seconds allowed for catalog requests.
        playback_timeout: Seconds allowed for the track descriptor fetch
                          and redirect probe when starting playback.
        rate_limit: Maximum number of API requests per second.
    """
    timeout: float = 15.0
    playback_timeout: float = 35.0
    rate_limit: int = 10


@dataclass(frozen=True)
class CacheConfig:
    """
    Metadata cache settings.

    Attributes:
        metadata_ttl: Seconds a cached PlaybackMetadata entry stays valid.
    """
    metadata_ttl: float = 86400.0


@dataclass(frozen=True)
class PagingPolicy:
    """
    Paging constants of the catalog browser.

    The remote API caps the number of items per call and does not report
    real totals for most resources, so the browser works with estimates.

    Attributes:
        max_items: Added to the page size to form the default `total`
                   estimate, so paging UIs keep offering more items until
                   a short page proves otherwise.
        max_items_per_call: Upper bound of `limit` for one API call.
        default_items_count: Page size forced on playlist searches.
        reset_friend_offset: Echo offset 0 for single-friend pages when
                             the host supplied an index.
        max_continuation_hops: Upper bound of `next_href` cursors followed
                               while filling one page.
    """
    max_items: int = 500
    max_items_per_call: int = 200
    default_items_count: int = 30
    reset_friend_offset: bool = True
    max_continuation_hops: int = 5

    def default_total(self, quantity: int) -> int:
        """Return the generous total estimate for a page of `quantity` items."""
        return self.max_items + quantity


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging settings.

    Attributes:
        directory: Directory for log files, or None for console-only logging.
        level: Console log level name.
    """
    directory: Path | None = None
    level: str = "INFO"


@dataclass(frozen=True)
class Config:
    """
    Complete plugin configuration.

    This is the main configuration object that aggregates all sections.
    It is created by load_config() and is immutable.

    Example:
        config = load_config()
        if not config.soundcloud.authenticated:
            print("Anonymous mode")
    """
    soundcloud: SoundCloudConfig = field(default_factory=SoundCloudConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    paging: PagingPolicy = field(default_factory=PagingPolicy)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml and the environment.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory
                     and falls back to defaults when it is absent.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If an explicit config file is not found, the file has
                     invalid YAML syntax, or contains invalid values.

    Behavior:
        1. Load .env into the process environment (existing vars win)
        2. Locate config file (explicit path or CWD/config.yaml)
        3. Read and parse YAML content, if any
        4. Parse each section, applying defaults
        5. Overlay environment secrets onto the soundcloud section
    """
    load_dotenv()

    explicit = config_path is not None
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    raw_config: dict[str, Any] = {}
    if config_path.exists():
        raw_config = _read_config_file(config_path)
    elif explicit:
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            details={"file_path": str(config_path)}
        )

    for section in ("soundcloud", "http", "cache", "paging", "logging"):
        value = raw_config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )

    return Config(
        soundcloud=_parse_soundcloud_config(raw_config.get("soundcloud") or {}),
        http=_parse_http_config(raw_config.get("http") or {}),
        cache=_parse_cache_config(raw_config.get("cache") or {}),
        paging=_parse_paging_config(raw_config.get("paging") or {}),
        logging=_parse_logging_config(raw_config.get("logging") or {}),
    )


def _read_config_file(config_path: Path) -> dict[str, Any]:
    """Read and parse the YAML file, which must hold a dictionary (or nothing)."""
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except IOError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    if raw_config is None:
        return {}

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    return raw_config


def _parse_soundcloud_config(section: dict[str, Any]) -> SoundCloudConfig:
    """
    Parse the soundcloud section and overlay environment secrets.

    Raises:
        ConfigError: If a value is not a string or playmethod is unknown.
    """
    values = {
        "api_key": section.get("api_key", ""),
        "client_id": section.get("client_id", DEFAULT_CLIENT_ID),
        "playmethod": section.get("playmethod", PLAYMETHOD_STREAM),
        "api_base": section.get("api_base", DEFAULT_API_BASE),
    }

    for field_name, env_name in (
        ("api_key", ENV_API_KEY),
        ("client_id", ENV_CLIENT_ID),
        ("playmethod", ENV_PLAYMETHOD),
    ):
        env_value = os.environ.get(env_name)
        if env_value is not None:
            values[field_name] = env_value

    for field_name, value in values.items():
        if value is None:
            values[field_name] = ""
        elif not isinstance(value, str):
            raise ConfigError(
                f"'soundcloud.{field_name}' must be a string",
                details={"field": f"soundcloud.{field_name}"}
            )
        else:
            values[field_name] = value.strip()

    if values["playmethod"] not in PLAYMETHODS:
        raise ConfigError(
            f"'soundcloud.playmethod' must be one of {', '.join(PLAYMETHODS)}",
            details={"field": "soundcloud.playmethod", "value": values["playmethod"]}
        )

    if not values["client_id"]:
        values["client_id"] = DEFAULT_CLIENT_ID

    api_base = values["api_base"] or DEFAULT_API_BASE
    if not api_base.endswith("/"):
        api_base += "/"
    values["api_base"] = api_base

    return SoundCloudConfig(**values)


def _parse_http_config(section: dict[str, Any]) -> HttpConfig:
    """
    Parse the http section.

    Raises:
        ConfigError: If a timeout is not a positive number or rate_limit
                     is not a positive integer.
    """
    defaults = HttpConfig()
    timeout = _positive_number(section, "http", "timeout", defaults.timeout)
    playback_timeout = _positive_number(
        section, "http", "playback_timeout", defaults.playback_timeout
    )
    rate_limit = _positive_int(section, "http", "rate_limit", defaults.rate_limit)

    return HttpConfig(
        timeout=timeout,
        playback_timeout=playback_timeout,
        rate_limit=rate_limit
    )


def _parse_cache_config(section: dict[str, Any]) -> CacheConfig:
    """Parse the cache section."""
    return CacheConfig(
        metadata_ttl=_positive_number(
            section, "cache", "metadata_ttl", CacheConfig().metadata_ttl
        )
    )


def _parse_paging_config(section: dict[str, Any]) -> PagingPolicy:
    """
    Parse the paging section.

    Raises:
        ConfigError: If a count is not a positive integer or
                     reset_friend_offset is not a boolean.
    """
    defaults = PagingPolicy()

    reset_friend_offset = section.get("reset_friend_offset", defaults.reset_friend_offset)
    if not isinstance(reset_friend_offset, bool):
        raise ConfigError(
            "'paging.reset_friend_offset' must be true or false",
            details={"field": "paging.reset_friend_offset"}
        )

    return PagingPolicy(
        max_items=_positive_int(section, "paging", "max_items", defaults.max_items),
        max_items_per_call=_positive_int(
            section, "paging", "max_items_per_call", defaults.max_items_per_call
        ),
        default_items_count=_positive_int(
            section, "paging", "default_items_count", defaults.default_items_count
        ),
        reset_friend_offset=reset_friend_offset,
        max_continuation_hops=_positive_int(
            section, "paging", "max_continuation_hops", defaults.max_continuation_hops
        ),
    )


def _parse_logging_config(section: dict[str, Any]) -> LoggingConfig:
    """
    Parse the logging section.

    Expands ~ in the log directory. Does NOT create the directory
    (setup_logging does that).
    """
    directory = section.get("directory")
    log_dir = None
    if directory is not None:
        if not isinstance(directory, str) or not directory.strip():
            raise ConfigError(
                "'logging.directory' must be a non-empty string or null",
                details={"field": "logging.directory"}
            )
        log_dir = Path(directory.strip()).expanduser().resolve()

    level = section.get("level", "INFO")
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ConfigError(
            f"'logging.level' must be one of {', '.join(LOG_LEVELS)}",
            details={"field": "logging.level", "value": level}
        )

    return LoggingConfig(directory=log_dir, level=level.upper())


def _positive_number(section: dict[str, Any], name: str, key: str, default: float) -> float:
    value = section.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(
            f"'{name}.{key}' must be a positive number",
            details={"field": f"{name}.{key}", "value": value}
        )
    return float(value)


def _positive_int(section: dict[str, Any], name: str, key: str, default: int) -> int:
    value = section.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(
            f"'{name}.{key}' must be a positive integer",
            details={"field": f"{name}.{key}", "value": value}
        )
    return value
