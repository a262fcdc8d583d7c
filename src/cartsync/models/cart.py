"""Cart value type and its pure operations.

A :class:`Cart` is an immutable mapping of item identifier to quantity.
Every operation in this module returns a new cart; nothing mutates in
place. Quantities are validated by callers, not here, so all operations
are total.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class CartItem(BaseModel):
    """A single mutation request: *quantity* units of *item_id*.

    ``quantity`` may be ``0`` so that :func:`set_item` can express removal.
    Additions must use ``quantity >= 1``; :class:`cartsync.service.CartService`
    enforces that.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    item_id: str
    quantity: int = Field(default=1, ge=0)

    @field_validator("item_id")
    @classmethod
    def _require_item_id(cls, value: str) -> str:
        if not value:
            raise ValueError("item_id must be non-empty")
        return value


class Cart(BaseModel):
    """Immutable cart snapshot.

    Zero-quantity entries are dropped on construction, so every stored
    quantity is ``>= 1``. Negative quantities are rejected, which is how
    corrupted persisted documents surface. ``items`` is a read-only view;
    snapshots can be shared between watchers without copying.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    items: Mapping[str, int] = Field(default_factory=dict)

    @field_validator("items")
    @classmethod
    def _normalize_items(cls, value: Mapping[str, int]) -> Mapping[str, int]:
        normalized: dict[str, int] = {}
        for item_id, quantity in value.items():
            if quantity < 0:
                raise ValueError(f"quantity for {item_id!r} must be >= 0, got {quantity}")
            if quantity:
                normalized[item_id] = quantity
        return MappingProxyType(normalized)

    @field_serializer("items")
    def _serialize_items(self, value: Mapping[str, int]) -> dict[str, int]:
        return dict(value)

    @property
    def total_quantity(self) -> int:
        """Total number of units across all items."""
        return sum(self.items.values())

    @property
    def is_empty(self) -> bool:
        return not self.items

    def quantity_of(self, item_id: str) -> int:
        return self.items.get(item_id, 0)


EMPTY_CART = Cart()


def add_item(cart: Cart, item: CartItem) -> Cart:
    """Return *cart* with ``item.quantity`` more units of ``item.item_id``."""
    items = dict(cart.items)
    items[item.item_id] = items.get(item.item_id, 0) + item.quantity
    return Cart(items=items)


def set_item(cart: Cart, item: CartItem) -> Cart:
    """Return *cart* with exactly ``item.quantity`` units (``0`` removes the key)."""
    items = dict(cart.items)
    items[item.item_id] = item.quantity
    return Cart(items=items)


def remove_item(cart: Cart, item_id: str) -> Cart:
    if item_id not in cart.items:
        return cart
    items = dict(cart.items)
    del items[item_id]
    return Cart(items=items)


def merge_carts(cart_a: Cart, cart_b: Cart) -> Cart:
    """Additive union of two carts."""
    items = dict(cart_a.items)
    for item_id, quantity in cart_b.items.items():
        items[item_id] = items.get(item_id, 0) + quantity
    return Cart(items=items)
