"""High-level async client wiring the cart components together."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from cartsync._transport import HttpTransport, Transport
from cartsync.backends import CartBackend, HttpCartBackend, JsonFileCartBackend
from cartsync.catalog import Catalog, HttpCatalog
from cartsync.config import CartSyncConfig
from cartsync.exceptions import CartSyncError
from cartsync.identity import IdentitySignal
from cartsync.models.identity import ANONYMOUS, Authenticated
from cartsync.models.report import MergeReport
from cartsync.reconciliation import ReconciliationEngine
from cartsync.selector import ActiveCartSelector
from cartsync.service import CartService
from cartsync.stores import IdentityStoreRegistry, OfflineCartStore

_logger = logging.getLogger(__name__)


class CartSyncClient:
    """Own one session's cart components.

    Usage::

        async with CartSyncClient(config) as client:
            await client.service.add_item(CartItem(item_id="sku-1", quantity=2))
            client.sign_in("user-42")  # merges the offline cart in the background

    Any collaborator can be injected; those left out are built from
    *config* (HTTP catalog and identity backend, JSON-file offline backend).
    """

    def __init__(
        self,
        config: CartSyncConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        identity: IdentitySignal | None = None,
        catalog: Catalog | None = None,
        offline_backend: CartBackend | None = None,
        identity_backend: CartBackend | None = None,
        on_merge: Callable[[MergeReport], None] | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._identity = identity or IdentitySignal()
        self._catalog = catalog
        self._offline_backend = offline_backend
        self._identity_backend = identity_backend
        self._on_merge = on_merge
        self._selector: ActiveCartSelector | None = None
        self._service: CartService | None = None
        self._engine: ReconciliationEngine | None = None
        self._identity_stores: IdentityStoreRegistry | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> CartSyncClient:
        catalog = self._catalog
        identity_backend = self._identity_backend
        if catalog is None or identity_backend is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            transport: Transport = HttpTransport(self._config, self._http_session)
            if catalog is None:
                catalog = HttpCatalog(transport)
            if identity_backend is None:
                identity_backend = HttpCartBackend(transport)
        offline_backend = self._offline_backend
        if offline_backend is None:
            offline_backend = JsonFileCartBackend(self._config.resolved_offline_cart_path)

        offline_store = OfflineCartStore(offline_backend)
        identity_stores = IdentityStoreRegistry(identity_backend)
        self._identity_stores = identity_stores
        self._selector = ActiveCartSelector(self._identity, offline_store, identity_stores)
        self._service = CartService(catalog, self._selector)
        self._engine = ReconciliationEngine(
            self._identity,
            offline_store,
            identity_stores,
            catalog,
            on_merge=self._on_merge,
        )
        if self._config.merge_on_sign_in:
            self._engine.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._engine is not None:
            await self._engine.stop()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def _require_started(self) -> None:
        if self._service is None:
            raise CartSyncError("Client not initialized. Use 'async with CartSyncClient(...) as client:'")

    @property
    def identity(self) -> IdentitySignal:
        return self._identity

    @property
    def selector(self) -> ActiveCartSelector:
        self._require_started()
        assert self._selector is not None  # noqa: S101
        return self._selector

    @property
    def service(self) -> CartService:
        self._require_started()
        assert self._service is not None  # noqa: S101
        return self._service

    @property
    def engine(self) -> ReconciliationEngine:
        self._require_started()
        assert self._engine is not None  # noqa: S101
        return self._engine

    @property
    def identity_stores(self) -> IdentityStoreRegistry:
        self._require_started()
        assert self._identity_stores is not None  # noqa: S101
        return self._identity_stores

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def sign_in(self, identity_id: str) -> None:
        """Publish an authenticated identity (as reported by the auth layer)."""
        _logger.debug("Signing in")
        self._identity.publish(Authenticated(identity_id))
        if self._identity_stores is not None:
            self._identity_stores.evict_idle(keep=identity_id)

    def sign_out(self) -> None:
        """Publish the anonymous state and drop identity stores nobody watches."""
        _logger.debug("Signing out")
        self._identity.publish(ANONYMOUS)
        if self._identity_stores is not None:
            self._identity_stores.evict_idle()
