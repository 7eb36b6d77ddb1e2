"""tlesync exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class TleSyncError(Exception):
    """Base exception for all tlesync failures."""


class TleSyncConfigError(TleSyncError):
    """Raised for invalid runtime configuration or run options."""


class CatalogFetchError(TleSyncError):
    """Raised when one catalog page cannot be fetched."""

    def __init__(self, message: str, page: int) -> None:
        super().__init__(message)
        self.page = page


class CatalogHttpError(CatalogFetchError):
    """Raised for non-success catalog responses and transport failures."""

    def __init__(self, message: str, page: int, status_code: int | None = None) -> None:
        super().__init__(message, page)
        self.status_code = status_code


class CatalogTimeoutError(CatalogFetchError):
    """Raised when a catalog page does not arrive before its deadline."""


class ConversionFailure(TleSyncError):
    """Raised when a TLE cannot be propagated to a position."""


class PersistenceError(TleSyncError):
    """Raised for read/write failures on durable stores."""


class StoreNotFoundError(PersistenceError):
    """Raised when the satellite store has never been written."""


class TleSyncRunSpecError(TleSyncConfigError):
    """Raised when a YAML run spec is missing, malformed, or inconsistent."""
