"""
Proxy error types

ConfigError is fatal at startup. Everything deriving from UpstreamError is a
per-request failure reported to the caller of the proxy service.
"""


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""


class UpstreamError(Exception):
    """Base class for failures talking to the upstream live-TV service."""


class LoginError(UpstreamError):
    """Raised when the upstream login request fails or is not accepted."""


class CatalogParseError(UpstreamError):
    """Raised when the live catalog body is not JSON of the expected shape."""

    def __init__(self, message: str, raw_body: str = ""):
        super().__init__(message)
        self.raw_body = raw_body


class StreamResolutionError(UpstreamError):
    """Raised when a channel cannot be exchanged for a playback link."""

    def __init__(self, channel_id: str, message: str, raw_body: str = ""):
        super().__init__(f"Channel {channel_id}: {message}")
        self.channel_id = channel_id
        self.raw_body = raw_body


__all__ = [
    "ConfigError",
    "UpstreamError",
    "LoginError",
    "CatalogParseError",
    "StreamResolutionError",
]
