"""Remote cart backend over the JSON HTTP API."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from cartsync._constants import CART_ENDPOINT
from cartsync._transport import Transport
from cartsync.exceptions import CartTransportError, StorageError


class HttpCartBackend:
    """``GET``/``PUT /carts/{key}``. A missing cart (404) loads as ``None``."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def load(self, key: str) -> dict[str, Any] | None:
        endpoint = CART_ENDPOINT.format(key=quote(key, safe=""))
        try:
            return await self._transport.get_json(endpoint)
        except CartTransportError as exc:
            raise StorageError(f"Could not load cart {key!r}: {exc}", key=key) from exc

    async def dump(self, key: str, document: dict[str, Any]) -> None:
        endpoint = CART_ENDPOINT.format(key=quote(key, safe=""))
        try:
            await self._transport.put_json(endpoint, document)
        except CartTransportError as exc:
            raise StorageError(f"Could not save cart {key!r}: {exc}", key=key) from exc
