"""Exception types shared by the resolution core and its store backends."""

from __future__ import annotations

from typing import Optional


class ModserveError(Exception):
    """Base class for all modserve errors."""


class InvalidArgument(ModserveError):
    """Raised for empty or malformed input; a caller bug, never retried."""


class InvalidVersion(InvalidArgument):
    """Raised when a version string is neither a semantic version nor "latest"."""

    def __init__(self, version: str, message: Optional[str] = None):
        self.version = version
        super().__init__(message or f"invalid version: {version!r}")


class NotFound(ModserveError):
    """Raised by a store when no record exists for the requested key."""


class StoreUnavailable(ModserveError):
    """Raised by a store when the backing engine cannot serve the request."""
