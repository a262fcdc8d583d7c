"""Identity-scoped cart stores."""

from __future__ import annotations

import logging

from cartsync._constants import IDENTITY_CART_KEY
from cartsync.backends import CartBackend
from cartsync.stores.base import BaseCartStore

_logger = logging.getLogger(__name__)


class IdentityCartStore(BaseCartStore):
    """The cart owned by one authenticated identity."""

    def __init__(self, identity_id: str, backend: CartBackend) -> None:
        if not identity_id.strip():
            raise ValueError("identity_id must be non-empty")
        super().__init__(backend, IDENTITY_CART_KEY.format(identity_id=identity_id))
        self._identity_id = identity_id

    @property
    def identity_id(self) -> str:
        return self._identity_id


class IdentityStoreRegistry:
    """Hand out one :class:`IdentityCartStore` per identity id.

    Reusing the instance means every watcher of an identity shares its change
    notifications. Stores nobody watches can be dropped with
    :meth:`evict_idle`; the client does so whenever the identity changes.
    """

    def __init__(self, backend: CartBackend) -> None:
        self._backend = backend
        self._stores: dict[str, IdentityCartStore] = {}

    def get(self, identity_id: str) -> IdentityCartStore:
        store = self._stores.get(identity_id)
        if store is None:
            store = IdentityCartStore(identity_id, self._backend)
            self._stores[identity_id] = store
        return store

    def evict_idle(self, keep: str | None = None) -> int:
        """Forget every store without watchers except *keep*; return how many."""
        idle = [
            identity_id
            for identity_id, store in self._stores.items()
            if identity_id != keep and store.subscriber_count == 0
        ]
        for identity_id in idle:
            del self._stores[identity_id]
        if idle:
            _logger.debug("Evicted %d idle identity cart store(s)", len(idle))
        return len(idle)

    def __contains__(self, identity_id: object) -> bool:
        return identity_id in self._stores

    def __len__(self) -> int:
        return len(self._stores)
