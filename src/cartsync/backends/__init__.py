"""Persistence backends behind the cart stores.

A backend maps a cart key (``"offline"`` or an identity id) to a JSON-ready
document. Stores own serialisation; backends only move documents.
"""

from __future__ import annotations

from typing import Any, Protocol

from cartsync.backends.http import HttpCartBackend
from cartsync.backends.json_file import JsonFileCartBackend
from cartsync.backends.memory import MemoryCartBackend


class CartBackend(Protocol):
    """Structural interface every persistence backend satisfies.

    Both methods raise :class:`cartsync.exceptions.StorageError` on failure.
    """

    async def load(self, key: str) -> dict[str, Any] | None: ...

    async def dump(self, key: str, document: dict[str, Any]) -> None: ...


__all__ = [
    "CartBackend",
    "HttpCartBackend",
    "JsonFileCartBackend",
    "MemoryCartBackend",
]
