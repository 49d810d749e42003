"""Domain-specific errors for ifacemaker."""

from __future__ import annotations


class IfaceMakerError(Exception):
    """Base error for ifacemaker."""


class UnsupportedConstructError(IfaceMakerError):
    """Raised when a type expression uses a construct the type model cannot represent."""

    def __init__(self, kind: str, location: str | None = None) -> None:
        self.kind = kind
        self.location = location
        msg = f"unsupported type construct: {kind}"
        if location:
            msg = f"{msg} at {location}"
        super().__init__(msg)


class ResolveError(IfaceMakerError):
    """Raised when a source package cannot be located on disk."""


class ScanError(IfaceMakerError):
    """Raised when the Go source scanner fails or returns unusable output."""


class GenerateError(IfaceMakerError):
    """Raised when an interface cannot be assembled from the scanned package."""
