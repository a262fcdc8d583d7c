"""Data models for cartsync."""

from cartsync.models.cart import EMPTY_CART, Cart, CartItem, add_item, remove_item, set_item
from cartsync.models.catalog import Availability
from cartsync.models.identity import ANONYMOUS, Anonymous, Authenticated, IdentityState
from cartsync.models.report import MergeReport

__all__ = [
    "ANONYMOUS",
    "Anonymous",
    "Authenticated",
    "Availability",
    "Cart",
    "CartItem",
    "EMPTY_CART",
    "IdentityState",
    "MergeReport",
    "add_item",
    "remove_item",
    "set_item",
]
