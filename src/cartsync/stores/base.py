"""Shared fetch/save/watch behaviour of the two cart stores."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

from pydantic import ValidationError

from cartsync._channel import ReplayChannel
from cartsync.backends import CartBackend
from cartsync.exceptions import StorageError
from cartsync.models.cart import Cart

_logger = logging.getLogger(__name__)


class BaseCartStore:
    """Persist one cart under *key* and notify watchers of saves.

    The key is also the backend key, so stores of different kinds can share
    one backend without overwriting each other.
    """

    def __init__(self, backend: CartBackend, key: str) -> None:
        self._backend = backend
        self._key = key
        self._channel: ReplayChannel[Cart] = ReplayChannel()
        self._refresh_lock = asyncio.Lock()
        self._saves = 0

    @property
    def key(self) -> str:
        return self._key

    @property
    def subscriber_count(self) -> int:
        """Number of live :meth:`watch` iterators."""
        return self._channel.subscriber_count

    async def fetch(self) -> Cart:
        """Return the persisted cart, or an empty cart if none exists."""
        document = await self._backend.load(self._key)
        if document is None:
            return Cart()
        try:
            return Cart.model_validate(document)
        except ValidationError as exc:
            raise StorageError(f"Persisted cart {self._key} is invalid: {exc}", key=self._key) from exc

    async def save(self, cart: Cart) -> None:
        """Replace the persisted cart wholesale, then notify watchers."""
        await self._backend.dump(self._key, cart.model_dump(mode="json"))
        self._saves += 1
        _logger.debug("Saved %s (%d units)", self._key, cart.total_quantity)
        self._channel.publish(cart)

    async def watch(self) -> AsyncIterator[Cart]:
        """Yield the current cart now and again after every successful save.

        Each new subscription re-reads the backend first, so changes written
        by another process since the last read are picked up.
        """
        await self._refresh()
        async with contextlib.aclosing(self._channel.subscribe()) as carts:
            async for cart in carts:
                yield cart

    async def _refresh(self) -> None:
        async with self._refresh_lock:
            saves = self._saves
            cart = await self.fetch()
            # A save that landed while the fetch was in flight wins.
            if self._saves != saves:
                return
            if not self._channel.has_value or self._channel.latest != cart:
                self._channel.publish(cart)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._key}>"
