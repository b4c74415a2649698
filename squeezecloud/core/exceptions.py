"""
Exception classes for squeezecloud.

This module defines all custom exceptions used throughout the package.
Each exception carries a human-readable message plus an optional details
dictionary, and the hierarchy distinguishes the failure modes the host
has to react to differently.

Exception Hierarchy:
    SqueezeCloudError (base)
        ConfigError - Configuration file issues
        CatalogError - Remote catalog access issues
            TransportError - No response / connection failure
            DecodeError - Response body not parseable
            RemoteApiError - Server reported an error
            RedirectMissing - Redirect probe without a Location header
        PlaybackError - Terminal failure of one playback attempt

Browse vs Playback:
    Browse code catches CatalogError and turns it into a text menu entry,
    so a browse session never crashes. Playback code wraps CatalogError in
    a PlaybackError whose kind the host maps to a localized message
    before advancing to the next queued track.
"""

from enum import Enum


class SqueezeCloudError(Exception):
    """
    Base exception for all squeezecloud errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (track id, URL...).

    Example:
        try:
            stream = await service.resolve_playback("soundcloud://42")
        except SqueezeCloudError as e:
            logger.error(f"Operation failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'track_id': SoundCloud track id involved in the error
                     - 'url': URL that caused the error
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(SqueezeCloudError):
    """
    Raised when there's an issue with the configuration file.

    Common causes:
        - An explicitly given config file does not exist
        - config.yaml has invalid YAML syntax
        - Invalid field values (e.g., unknown playmethod, negative timeout)
    """
    pass


class CatalogError(SqueezeCloudError):
    """
    Base class for failures talking to the remote catalog API.

    Browse code catches this class as a whole; playback code inspects
    the concrete subclass to pick the error kind reported to the host.
    """
    pass


class TransportError(CatalogError):
    """
    Raised when no usable response was received.

    Common causes:
        - Connection refused or reset
        - DNS failure
        - Request timeout
    """
    pass


class DecodeError(CatalogError):
    """
    Raised when a response body cannot be decoded as the expected JSON.

    Browse degrades this to an empty result set; playback treats it as
    a hard failure.
    """
    pass


class RemoteApiError(CatalogError):
    """
    Raised when the API answered with an error status or error field.

    Attributes:
        status: HTTP status code of the response, if known.

    Example:
        raise RemoteApiError(
            "404 - Not Found",
            details={'url': 'https://api.soundcloud.com/tracks/1'},
            status=404
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        status: int | None = None
    ) -> None:
        super().__init__(message, details)
        self.status = status


class RedirectMissing(CatalogError):
    """
    Raised when a redirect probe got a response without a Location header.

    The catalog hands out signed, time-limited redirects instead of direct
    file URLs, so a probe without a relocation target leaves nothing to play
    even if the HTTP status itself was successful.
    """
    pass


class PlaybackErrorKind(str, Enum):
    """
    User-legible error kinds reported for a failed playback attempt.

    The values are the string tokens the host looks up in its localized
    string table.
    """
    NO_INFO = "PLUGIN_SQUEEZECLOUD_NO_INFO"
    STREAM_FAILED = "PLUGIN_SQUEEZECLOUD_STREAM_FAILED"
    ERROR = "PLUGIN_SQUEEZECLOUD_ERROR"


class PlaybackError(SqueezeCloudError):
    """
    Raised when resolving a track into a playable stream failed.

    This is terminal for the playback attempt; the host should display
    the localized message for `kind` and advance to the next queued item.

    Attributes:
        kind: The PlaybackErrorKind to report to the host.
    """

    def __init__(
        self,
        kind: PlaybackErrorKind,
        message: str,
        details: dict | None = None
    ) -> None:
        super().__init__(message, details)
        self.kind = kind
