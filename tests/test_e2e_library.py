"""End-to-end flow through CartSyncClient with in-process collaborators."""

from __future__ import annotations

import asyncio
import contextlib
from pathlib import Path

import pytest

from cartsync import (
    Cart,
    CartItem,
    CartSyncClient,
    CartSyncConfig,
    CartSyncError,
    ItemNotFoundError,
    MergeReport,
    StaticCatalog,
)
from cartsync.backends import MemoryCartBackend


async def _next(stream, timeout: float = 1.0):  # type: ignore[no-untyped-def]
    return await asyncio.wait_for(anext(stream), timeout)


@pytest.fixture
def config(tmp_path: Path) -> CartSyncConfig:
    return CartSyncConfig(offline_cart_path=str(tmp_path / "offline.json"))


@pytest.fixture
def catalog() -> StaticCatalog:
    return StaticCatalog({"sku-1": 10, "sku-2": 1})


@pytest.mark.asyncio
async def test_anonymous_cart_merges_on_sign_in(config: CartSyncConfig, catalog: StaticCatalog) -> None:
    identity_backend = MemoryCartBackend({"identity:user-42": {"items": {"sku-2": 1}}})
    reports: list[MergeReport] = []
    merged = asyncio.Event()

    def on_merge(report: MergeReport) -> None:
        reports.append(report)
        merged.set()

    client = CartSyncClient(config, catalog=catalog, identity_backend=identity_backend, on_merge=on_merge)
    async with client, contextlib.aclosing(client.selector.watch()) as carts:
        assert await _next(carts) == Cart()

        await client.service.add_item(CartItem(item_id="sku-1", quantity=2))
        await client.service.add_item(CartItem(item_id="sku-2", quantity=3))
        assert await _next(carts) == Cart(items={"sku-1": 2})
        assert await _next(carts) == Cart(items={"sku-1": 2, "sku-2": 3})

        with pytest.raises(ItemNotFoundError):
            await client.service.add_item(CartItem(item_id="sku-404", quantity=1))

        client.sign_in("user-42")
        await asyncio.wait_for(merged.wait(), 1.0)

        # The watcher follows the identity store and ends on the merged cart.
        seen = await _next(carts)
        while seen != Cart(items={"sku-1": 2, "sku-2": 1}):
            seen = await _next(carts)

    assert reports[0].succeeded
    assert reports[0].added == {"sku-1": 2}
    assert reports[0].capped == ["sku-2"]
    assert await identity_backend.load("identity:user-42") == {"items": {"sku-1": 2, "sku-2": 1}}
    assert Path(config.offline_cart_path).exists()


@pytest.mark.asyncio
async def test_sign_out_returns_to_cleared_offline_cart(config: CartSyncConfig, catalog: StaticCatalog) -> None:
    identity_backend = MemoryCartBackend()
    merged = asyncio.Event()

    async with CartSyncClient(
        config,
        catalog=catalog,
        identity_backend=identity_backend,
        on_merge=lambda _report: merged.set(),
    ) as client:
        await client.service.add_item(CartItem(item_id="sku-1", quantity=1))
        client.sign_in("user-1")
        await asyncio.wait_for(merged.wait(), 1.0)

        client.sign_out()
        assert await client.selector.fetch() == Cart()

        await client.service.add_item(CartItem(item_id="sku-1", quantity=4))
        assert await client.selector.fetch() == Cart(items={"sku-1": 4})

    assert await identity_backend.load("identity:user-1") == {"items": {"sku-1": 1}}


@pytest.mark.asyncio
async def test_identity_changes_drop_unwatched_identity_stores(tmp_path: Path, catalog: StaticCatalog) -> None:
    config = CartSyncConfig(offline_cart_path=str(tmp_path / "offline.json"), merge_on_sign_in=False)

    async with CartSyncClient(config, catalog=catalog, identity_backend=MemoryCartBackend()) as client:
        for identity_id in ("user-1", "user-2", "user-3"):
            client.sign_in(identity_id)
            await client.service.add_item(CartItem(item_id="sku-1", quantity=1))
            assert identity_id in client.identity_stores
            client.sign_out()

        assert len(client.identity_stores) == 0

        client.sign_in("user-1")
        assert await client.selector.fetch() == Cart(items={"sku-1": 1})


@pytest.mark.asyncio
async def test_sign_out_keeps_watched_identity_store(tmp_path: Path, catalog: StaticCatalog) -> None:
    config = CartSyncConfig(offline_cart_path=str(tmp_path / "offline.json"), merge_on_sign_in=False)

    async with CartSyncClient(config, catalog=catalog, identity_backend=MemoryCartBackend()) as client:
        client.sign_in("user-1")
        watched = client.identity_stores.get("user-1")
        async with contextlib.aclosing(watched.watch()) as carts:
            await _next(carts)
            client.sign_in("user-2")
            await client.service.add_item(CartItem(item_id="sku-1", quantity=1))
            assert "user-2" in client.identity_stores
            client.sign_out()
            assert client.identity_stores.get("user-1") is watched
            assert "user-2" not in client.identity_stores


@pytest.mark.asyncio
async def test_merge_disabled_leaves_carts_separate(tmp_path: Path, catalog: StaticCatalog) -> None:
    config = CartSyncConfig(offline_cart_path=str(tmp_path / "offline.json"), merge_on_sign_in=False)
    offline_backend = MemoryCartBackend()

    async with CartSyncClient(
        config,
        catalog=catalog,
        offline_backend=offline_backend,
        identity_backend=MemoryCartBackend(),
    ) as client:
        await client.service.add_item(CartItem(item_id="sku-1", quantity=1))
        client.sign_in("user-1")
        await asyncio.sleep(0.01)

        assert not client.engine.is_running
        assert await client.selector.fetch() == Cart()

    assert await offline_backend.load("offline") == {"items": {"sku-1": 1}}


def test_components_require_context_manager(config: CartSyncConfig) -> None:
    client = CartSyncClient(config)
    with pytest.raises(CartSyncError):
        _ = client.service
