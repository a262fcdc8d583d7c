"""Mutation façade used by every caller that changes the cart."""

from __future__ import annotations

import logging

from cartsync.catalog import Catalog
from cartsync.exceptions import ItemNotFoundError
from cartsync.models import cart as cart_ops
from cartsync.models.cart import Cart, CartItem
from cartsync.selector import ActiveCartSelector

_logger = logging.getLogger(__name__)


class CartService:
    """Validate item requests and write them through the active cart.

    Each call is fetch, then a pure cart operation, then save. Calls are not
    serialised against each other; two concurrent calls can lose an update
    under last-write-wins. No method caps quantities at availability.
    """

    def __init__(self, catalog: Catalog, selector: ActiveCartSelector) -> None:
        self._catalog = catalog
        self._selector = selector

    async def _require_item(self, item_id: str) -> None:
        if await self._catalog.get_available_quantity(item_id) is None:
            raise ItemNotFoundError(f"Item {item_id!r} not found", item_id=item_id)

    async def add_item(self, item: CartItem) -> Cart:
        """Add ``item.quantity`` (>= 1) units of an item that exists in the catalog.

        Raises
        ------
        ValueError
            If ``item.quantity`` is less than 1.
        ItemNotFoundError
            If the catalog does not sell ``item.item_id``.
        """
        if item.quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {item.quantity}")
        await self._require_item(item.item_id)
        cart = cart_ops.add_item(await self._selector.fetch(), item)
        await self._selector.save(cart)
        _logger.debug("Added %d x %s", item.quantity, item.item_id)
        return cart

    async def set_item(self, item: CartItem) -> Cart:
        """Set an item's quantity exactly; ``0`` behaves like :meth:`remove_item`."""
        if item.quantity == 0:
            return await self.remove_item(item.item_id)
        await self._require_item(item.item_id)
        cart = cart_ops.set_item(await self._selector.fetch(), item)
        await self._selector.save(cart)
        _logger.debug("Set %s to %d", item.item_id, item.quantity)
        return cart

    async def remove_item(self, item_id: str) -> Cart:
        # No catalog check: a discontinued item must still be removable.
        cart = cart_ops.remove_item(await self._selector.fetch(), item_id)
        await self._selector.save(cart)
        _logger.debug("Removed %s", item_id)
        return cart
