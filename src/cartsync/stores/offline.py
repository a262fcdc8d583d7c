"""Cart store used while no identity is authenticated."""

from __future__ import annotations

from cartsync._constants import OFFLINE_CART_KEY
from cartsync.backends import CartBackend
from cartsync.stores.base import BaseCartStore


class OfflineCartStore(BaseCartStore):
    """The identity-less cart.

    Exactly one instance should exist per process; the client constructs it
    and injects it into the selector and the reconciliation engine.
    """

    def __init__(self, backend: CartBackend) -> None:
        super().__init__(backend, OFFLINE_CART_KEY)
