"""Bundle unpacker exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class UnpackError(Exception):
    """Base exception for all unpacker failures."""


class UnpackConfigError(UnpackError):
    """Raised for invalid runtime configuration."""


class UnpackArgumentError(UnpackError):
    """Raised for malformed bundle identifiers and user arguments."""


class UnpackFormatError(UnpackError):
    """Raised when bundle framing cannot be parsed."""


class UnpackVerificationError(UnpackError):
    """Raised when a bundle fails signature or identifier verification."""


class UnpackExtractionError(UnpackError):
    """Raised when an item payload byte range cannot be read."""


class UnpackDecodeError(UnpackError):
    """Raised when a metadata payload is not a JSON object."""


class UnpackFetchError(UnpackError):
    """Raised when a bundle cannot be retrieved from the gateway."""


class UnpackStoreError(UnpackError):
    """Raised for artifact export and object-store failures."""


class UnpackDependencyError(UnpackError):
    """Raised when an optional runtime dependency is missing."""
