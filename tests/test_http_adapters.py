"""Tests for the HTTP-backed cart backend and catalog using a fake transport."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from cartsync.backends import HttpCartBackend
from cartsync.catalog import HttpCatalog
from cartsync.exceptions import CartTransportError, CatalogUnavailableError, StorageError


class _FakeTransport:
    def __init__(self, responses: dict[str, dict[str, Any]] | None = None) -> None:
        self.responses: dict[str, dict[str, Any]] = responses or {}
        self.fail = False
        self.gets: list[str] = []
        self.puts: list[tuple[str, dict[str, Any]]] = []

    async def get_json(self, endpoint: str) -> dict[str, Any] | None:
        self.gets.append(endpoint)
        if self.fail:
            raise CartTransportError("boom", status_code=503, endpoint=endpoint)
        response = self.responses.get(endpoint)
        return dict(response) if response is not None else None

    async def put_json(self, endpoint: str, payload: Mapping[str, Any]) -> None:
        if self.fail:
            raise CartTransportError("boom", status_code=503, endpoint=endpoint)
        self.puts.append((endpoint, dict(payload)))
        self.responses[endpoint] = dict(payload)


# ------------------------------------------------------------------
# HttpCartBackend
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_cart_backend_round_trip() -> None:
    transport = _FakeTransport()
    backend = HttpCartBackend(transport)

    assert await backend.load("user-1") is None
    await backend.dump("user-1", {"items": {"A": 1}})

    assert transport.puts == [("/carts/user-1", {"items": {"A": 1}})]
    assert await backend.load("user-1") == {"items": {"A": 1}}


@pytest.mark.asyncio
async def test_cart_backend_quotes_keys() -> None:
    transport = _FakeTransport()
    await HttpCartBackend(transport).load("team/alice")
    assert transport.gets == ["/carts/team%2Falice"]


@pytest.mark.asyncio
async def test_cart_backend_transport_failure_becomes_storage_error() -> None:
    transport = _FakeTransport()
    transport.fail = True
    backend = HttpCartBackend(transport)

    with pytest.raises(StorageError) as exc_info:
        await backend.load("user-1")
    assert exc_info.value.key == "user-1"
    assert isinstance(exc_info.value.__cause__, CartTransportError)

    with pytest.raises(StorageError):
        await backend.dump("user-1", {"items": {}})


# ------------------------------------------------------------------
# HttpCatalog
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_catalog_parses_camel_case_payload() -> None:
    transport = _FakeTransport(
        {"/catalog/items/sku-1/availability": {"itemId": "sku-1", "availableQuantity": 7}},
    )
    catalog = HttpCatalog(transport)

    availability = await catalog.get_availability("sku-1")
    assert availability is not None
    assert availability.item_id == "sku-1"
    assert availability.available_quantity == 7
    assert await catalog.get_available_quantity("sku-1") == 7


@pytest.mark.asyncio
async def test_catalog_fills_missing_item_id() -> None:
    transport = _FakeTransport({"/catalog/items/sku-1/availability": {"availableQuantity": 2}})
    availability = await HttpCatalog(transport).get_availability("sku-1")
    assert availability is not None and availability.item_id == "sku-1"


@pytest.mark.asyncio
async def test_catalog_missing_item_returns_none() -> None:
    assert await HttpCatalog(_FakeTransport()).get_available_quantity("gone") is None


@pytest.mark.asyncio
async def test_catalog_invalid_payload_is_unavailable() -> None:
    transport = _FakeTransport({"/catalog/items/sku-1/availability": {"availableQuantity": -1}})
    with pytest.raises(CatalogUnavailableError):
        await HttpCatalog(transport).get_available_quantity("sku-1")


@pytest.mark.asyncio
async def test_catalog_transport_failure_is_unavailable() -> None:
    transport = _FakeTransport()
    transport.fail = True
    with pytest.raises(CatalogUnavailableError) as exc_info:
        await HttpCatalog(transport).get_available_quantity("sku-1")
    assert exc_info.value.item_id == "sku-1"
