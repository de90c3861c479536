"""Error types raised by the SkyScope ingestion pipeline."""

from __future__ import annotations


class SkyScopeError(Exception):
    """Base class for pipeline failures."""


class ConfigurationError(SkyScopeError):
    """Required configuration (e.g. OpenSky credentials) is missing."""


class UpstreamError(SkyScopeError):
    """An upstream service failed; carries the HTTP status when one was received."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamAuthError(UpstreamError):
    """The OAuth2 token exchange was rejected or returned an unusable body."""


class UpstreamUnavailableError(UpstreamError):
    """The upstream could not be reached after retries or answered with an error."""


class UpstreamPayloadError(UpstreamUnavailableError):
    """The upstream answered successfully but the body could not be decoded."""


__all__ = [
    "ConfigurationError",
    "SkyScopeError",
    "UpstreamAuthError",
    "UpstreamError",
    "UpstreamPayloadError",
    "UpstreamUnavailableError",
]
