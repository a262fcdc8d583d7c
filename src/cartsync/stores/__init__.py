"""Cart stores: persistence plus change notification for one cart."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol

from cartsync.models.cart import Cart
from cartsync.stores.identity import IdentityCartStore, IdentityStoreRegistry
from cartsync.stores.offline import OfflineCartStore


class CartStore(Protocol):
    """Capability shared by the offline and identity-scoped stores.

    ``fetch`` and ``save`` raise :class:`cartsync.exceptions.StorageError` on
    I/O failure. ``watch`` emits the current cart on subscription and after
    every successful save, never after a failed one.
    """

    @property
    def key(self) -> str: ...

    async def fetch(self) -> Cart: ...

    async def save(self, cart: Cart) -> None: ...

    def watch(self) -> AsyncIterator[Cart]: ...


__all__ = [
    "CartStore",
    "IdentityCartStore",
    "IdentityStoreRegistry",
    "OfflineCartStore",
]
