"""Site configuration and extraction exceptions."""

from __future__ import annotations


class SiteError(Exception):
    """Base class for all site-related errors."""


class ConfigNotFound(SiteError):
    """Raised when no configuration document exists for a site identifier."""

    def __init__(self, site_id: str) -> None:
        super().__init__(f"Site configuration '{site_id}' not found")
        self.site_id = site_id


class ConfigParseError(SiteError):
    """Raised when a site document is malformed or fails validation."""


class ExtractionError(SiteError):
    """Base class for per-site runtime failures (recovered locally)."""


class TransportError(ExtractionError):
    """Non-2xx HTTP status or network failure."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ShapeError(ExtractionError):
    """Response does not match the structure expected at a configured path."""


class SiteApiError(ExtractionError):
    """The remote API signalled an application-level error."""

    def __init__(self, code: object, message: str | None = None) -> None:
        super().__init__(message or f"API error: {code}")
        self.code = code


class SearchBadRequest(SiteError):
    """Caller-level mistake in an aggregated search call."""
