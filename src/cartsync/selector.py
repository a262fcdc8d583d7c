"""Route cart reads and writes to the store matching the current identity."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

from cartsync.identity import IdentitySignal
from cartsync.models.cart import Cart
from cartsync.models.identity import Authenticated, IdentityState
from cartsync.stores import CartStore, IdentityStoreRegistry, OfflineCartStore

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _IdentityChanged:
    state: IdentityState


@dataclass(frozen=True, slots=True)
class _CartEmitted:
    generation: int
    cart: Cart


@dataclass(frozen=True, slots=True)
class _StoreFailed:
    generation: int
    error: Exception


_WatchEvent = _IdentityChanged | _CartEmitted | _StoreFailed


class ActiveCartSelector:
    """Single logical cart whose backing store follows the identity signal.

    ``Anonymous`` maps to the offline store, ``Authenticated(id)`` to the
    identity store for ``id``. Routing is decided per call from
    :attr:`IdentitySignal.current`, never cached.
    """

    def __init__(
        self,
        identity: IdentitySignal,
        offline_store: OfflineCartStore,
        identity_stores: IdentityStoreRegistry,
    ) -> None:
        self._identity = identity
        self._offline_store = offline_store
        self._identity_stores = identity_stores

    def store_for(self, state: IdentityState) -> CartStore:
        if isinstance(state, Authenticated):
            return self._identity_stores.get(state.identity_id)
        return self._offline_store

    def active_store(self) -> CartStore:
        return self.store_for(self._identity.current)

    async def fetch(self) -> Cart:
        return await self.active_store().fetch()

    async def save(self, cart: Cart) -> None:
        """Write *cart* to the store that is active right now.

        If the identity changes while the write is in flight, it still lands
        on the store chosen here.
        """
        store = self.active_store()
        await store.save(cart)

    async def watch(self) -> AsyncIterator[Cart]:
        """Yield the active cart, switching stores as the identity changes.

        On a switch the previous store's subscription is closed and anything
        it already queued is discarded, so the first value after a switch is
        the new store's current cart.
        """
        events: asyncio.Queue[_WatchEvent] = asyncio.Queue()
        generation = 0
        current_key: str | None = None
        forwarder: asyncio.Task[None] | None = None

        async def follow_identity() -> None:
            async with contextlib.aclosing(self._identity.watch()) as states:
                async for state in states:
                    events.put_nowait(_IdentityChanged(state))

        async def forward(store: CartStore, gen: int) -> None:
            try:
                async with contextlib.aclosing(store.watch()) as carts:
                    async for cart in carts:
                        events.put_nowait(_CartEmitted(gen, cart))
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001
                events.put_nowait(_StoreFailed(gen, exc))

        identity_task = asyncio.create_task(follow_identity())
        try:
            while True:
                event = await events.get()
                if isinstance(event, _IdentityChanged):
                    store = self.store_for(event.state)
                    if store.key == current_key:
                        continue
                    if forwarder is not None:
                        forwarder.cancel()
                    generation += 1
                    _logger.debug("Active cart store: %s -> %s", current_key, store.key)
                    current_key = store.key
                    forwarder = asyncio.create_task(forward(store, generation))
                elif event.generation != generation:
                    continue
                elif isinstance(event, _StoreFailed):
                    raise event.error
                else:
                    yield event.cart
        finally:
            identity_task.cancel()
            pending = [identity_task]
            if forwarder is not None:
                forwarder.cancel()
                pending.append(forwarder)
            await asyncio.gather(*pending, return_exceptions=True)
