"""One-shot merge of the offline cart into the identity cart on sign-in.

The engine watches the identity signal and, on every ``Anonymous ->
Authenticated(id)`` transition, folds the offline cart into the identity
cart. Each item's combined quantity is capped at catalog availability, but
an identity quantity that already exceeds availability is never reduced.
The offline cart is cleared only after the identity cart has been saved.

Failures never reach the caller. They are logged, reported through
``on_merge``, and leave the offline cart untouched so that the next sign-in
retries the merge.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from cartsync.catalog import Catalog
from cartsync.exceptions import CartSyncError
from cartsync.identity import IdentitySignal
from cartsync.models.cart import Cart, CartItem, add_item
from cartsync.models.identity import Authenticated, IdentityState, is_sign_in
from cartsync.models.report import MergeReport
from cartsync.stores import IdentityStoreRegistry, OfflineCartStore

_logger = logging.getLogger(__name__)


class EngineState(StrEnum):
    IDLE = "idle"
    MERGING = "merging"


def merged_quantity(offline_qty: int, identity_qty: int, available: int) -> int:
    """Identity quantity after merging *offline_qty* under an *available* cap."""
    return identity_qty + max(min(offline_qty + identity_qty, available) - identity_qty, 0)


class ReconciliationEngine:
    """Merge the offline cart into the identity cart when a session signs in.

    Usage::

        engine = ReconciliationEngine(identity, offline_store, identity_stores, catalog)
        engine.start()
        ...
        await engine.stop()

    At most one merge runs at a time; a sign-in observed while a merge is in
    flight is ignored.
    """

    def __init__(
        self,
        identity: IdentitySignal,
        offline_store: OfflineCartStore,
        identity_stores: IdentityStoreRegistry,
        catalog: Catalog,
        *,
        on_merge: Callable[[MergeReport], None] | None = None,
    ) -> None:
        self._identity = identity
        self._offline_store = offline_store
        self._identity_stores = identity_stores
        self._catalog = catalog
        self._on_merge = on_merge
        self._state = EngineState.IDLE
        self._observer: asyncio.Task[None] | None = None
        self._merge_task: asyncio.Task[MergeReport] | None = None

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._observer is not None and not self._observer.done()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin observing the identity signal (no-op if already started)."""
        if self.is_running:
            return
        self._observer = asyncio.create_task(self._observe())

    async def stop(self) -> None:
        """Stop observing and wait for an in-flight merge to finish."""
        observer = self._observer
        self._observer = None
        if observer is not None:
            observer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await observer
        merge_task = self._merge_task
        self._merge_task = None
        if merge_task is not None and not merge_task.done():
            await merge_task

    async def __aenter__(self) -> ReconciliationEngine:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    # ------------------------------------------------------------------
    # Triggering
    # ------------------------------------------------------------------

    async def _observe(self) -> None:
        # The first observed state has no predecessor and never triggers.
        previous: IdentityState | None = None
        async with contextlib.aclosing(self._identity.watch()) as states:
            async for state in states:
                if is_sign_in(previous, state):
                    assert isinstance(state, Authenticated)  # noqa: S101
                    self._trigger(state.identity_id)
                previous = state

    def _try_enter(self) -> bool:
        if self._state is EngineState.MERGING:
            return False
        self._state = EngineState.MERGING
        return True

    def _trigger(self, identity_id: str) -> None:
        if not self._try_enter():
            _logger.debug("Merge already in flight, ignoring sign-in of %s", identity_id)
            return
        self._merge_task = asyncio.create_task(self._merge_and_release(identity_id))

    async def reconcile(self, identity_id: str) -> MergeReport | None:
        """Run the merge for *identity_id* now.

        Returns ``None`` without doing anything if a merge is already running.
        Never raises for storage or catalog failures; inspect the report.
        """
        if not self._try_enter():
            _logger.debug("Merge already in flight, ignoring reconcile(%s)", identity_id)
            return None
        return await self._merge_and_release(identity_id)

    async def _merge_and_release(self, identity_id: str) -> MergeReport:
        try:
            report = await self._merge(identity_id)
        finally:
            self._state = EngineState.IDLE
        self._notify(report)
        return report

    def _notify(self, report: MergeReport) -> None:
        if self._on_merge is None:
            return
        try:
            self._on_merge(report)
        except Exception:
            _logger.exception("on_merge callback raised")

    # ------------------------------------------------------------------
    # Merge algorithm
    # ------------------------------------------------------------------

    async def _merge(self, identity_id: str) -> MergeReport:
        started_at = datetime.now(UTC)
        identity_store = self._identity_stores.get(identity_id)
        added: dict[str, int] = {}
        skipped: list[str] = []
        capped: list[str] = []

        def _report(error: str | None = None) -> MergeReport:
            return MergeReport(
                identity_id=identity_id,
                added=added,
                skipped=skipped,
                capped=capped,
                error=error,
                started_at=started_at,
                finished_at=datetime.now(UTC),
            )

        try:
            offline_cart = await self._offline_store.fetch()
            if offline_cart.is_empty:
                _logger.debug("Offline cart empty, nothing to merge for %s", identity_id)
                return _report()
            identity_cart = await identity_store.fetch()

            pending: list[CartItem] = []
            for item_id, offline_qty in offline_cart.items.items():
                identity_qty = identity_cart.quantity_of(item_id)
                available = await self._catalog.get_available_quantity(item_id)
                if available is None:
                    skipped.append(item_id)
                    continue
                if offline_qty + identity_qty > available:
                    capped.append(item_id)
                delta = merged_quantity(offline_qty, identity_qty, available) - identity_qty
                if delta > 0:
                    pending.append(CartItem(item_id=item_id, quantity=delta))

            merged = identity_cart
            for item in pending:
                merged = add_item(merged, item)

            await identity_store.save(merged)
            # Record additions only once they are persisted.
            added.update({item.item_id: item.quantity for item in pending})
            await self._offline_store.save(Cart())
        except CartSyncError as exc:
            _logger.warning(
                "Cart merge for %s failed, offline cart kept for retry: %s",
                identity_id,
                exc,
                exc_info=True,
            )
            return _report(str(exc))
        except Exception as exc:  # noqa: BLE001
            _logger.exception("Unexpected error merging cart for %s", identity_id)
            return _report(repr(exc))

        _logger.info(
            "Merged offline cart into %s: added=%s skipped=%s capped=%s",
            identity_id,
            added,
            skipped,
            capped,
        )
        return _report()
