"""Catalog collaborators: where item availability comes from."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Protocol
from urllib.parse import quote

from pydantic import ValidationError

from cartsync._constants import AVAILABILITY_ENDPOINT
from cartsync._transport import Transport
from cartsync.exceptions import CartTransportError, CatalogUnavailableError
from cartsync.models.catalog import Availability

_logger = logging.getLogger(__name__)


class Catalog(Protocol):
    """Availability lookup.

    ``get_available_quantity`` returns ``None`` when the item is not (or no
    longer) sellable and raises :class:`CatalogUnavailableError` when the
    catalog cannot answer. Results are never cached by cartsync.
    """

    async def get_available_quantity(self, item_id: str) -> int | None: ...


class HttpCatalog:
    """Catalog backed by ``GET /catalog/items/{item_id}/availability``."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def get_availability(self, item_id: str) -> Availability | None:
        endpoint = AVAILABILITY_ENDPOINT.format(item_id=quote(item_id, safe=""))
        try:
            body = await self._transport.get_json(endpoint)
        except CartTransportError as exc:
            raise CatalogUnavailableError(
                f"Availability lookup for {item_id!r} failed: {exc}",
                item_id=item_id,
            ) from exc
        if body is None:
            _logger.debug("Item %s not found in catalog", item_id)
            return None
        body.setdefault("itemId", item_id)
        try:
            return Availability.model_validate(body)
        except ValidationError as exc:
            raise CatalogUnavailableError(
                f"Invalid availability payload for {item_id!r}: {exc}",
                item_id=item_id,
            ) from exc

    async def get_available_quantity(self, item_id: str) -> int | None:
        availability = await self.get_availability(item_id)
        return availability.available_quantity if availability is not None else None


class StaticCatalog:
    """In-memory catalog, for local use and tests.

    Items missing from *availability* are treated as not found. Setting
    ``unavailable`` makes every lookup raise :class:`CatalogUnavailableError`.
    """

    def __init__(self, availability: Mapping[str, int] | None = None) -> None:
        self._availability: dict[str, int] = dict(availability or {})
        self.unavailable = False
        self.lookups: list[str] = []

    def set_available(self, item_id: str, quantity: int) -> None:
        self._availability[item_id] = quantity

    def discontinue(self, item_id: str) -> None:
        self._availability.pop(item_id, None)

    async def get_available_quantity(self, item_id: str) -> int | None:
        self.lookups.append(item_id)
        if self.unavailable:
            raise CatalogUnavailableError("catalog unavailable", item_id=item_id)
        return self._availability.get(item_id)
