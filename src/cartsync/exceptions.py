"""Custom exception hierarchy for cartsync."""

from __future__ import annotations


class CartSyncError(Exception):
    """Base exception for all cartsync errors."""


class CartSyncConfigError(CartSyncError):
    """Invalid or missing configuration."""


class CartTransportError(CartSyncError):
    """HTTP-level failure (network, unexpected status, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class StorageError(CartSyncError):
    """A cart backend could not be read or written.

    Raised from ``fetch``/``save`` on every store. Callers of those methods
    must let it propagate; only the reconciliation engine absorbs it.
    """

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class CatalogError(CartSyncError):
    """Base for catalog lookup failures."""

    def __init__(self, message: str, *, item_id: str = "") -> None:
        self.item_id = item_id
        super().__init__(message)


class CatalogUnavailableError(CatalogError):
    """The catalog could not be reached or returned an unusable response."""


class ItemNotFoundError(CatalogError):
    """The catalog does not (or no longer) sell the requested item."""
