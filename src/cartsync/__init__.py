"""cartsync - Async shopping-cart sync between offline and identity-scoped stores."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("cartsync")
except PackageNotFoundError:
    __version__ = "0+local"
from cartsync.catalog import Catalog, HttpCatalog, StaticCatalog
from cartsync.client import CartSyncClient
from cartsync.config import CartSyncConfig
from cartsync.exceptions import (
    CartSyncConfigError,
    CartSyncError,
    CartTransportError,
    CatalogError,
    CatalogUnavailableError,
    ItemNotFoundError,
    StorageError,
)
from cartsync.identity import IdentitySignal
from cartsync.models import (
    ANONYMOUS,
    Anonymous,
    Authenticated,
    Availability,
    Cart,
    CartItem,
    IdentityState,
    MergeReport,
)
from cartsync.reconciliation import EngineState, ReconciliationEngine
from cartsync.selector import ActiveCartSelector
from cartsync.service import CartService
from cartsync.stores import CartStore, IdentityCartStore, IdentityStoreRegistry, OfflineCartStore

__all__ = [
    "__version__",
    "ANONYMOUS",
    "ActiveCartSelector",
    "Anonymous",
    "Authenticated",
    "Availability",
    "Cart",
    "CartItem",
    "CartService",
    "CartStore",
    "CartSyncClient",
    "CartSyncConfig",
    "CartSyncConfigError",
    "CartSyncError",
    "CartTransportError",
    "Catalog",
    "CatalogError",
    "CatalogUnavailableError",
    "EngineState",
    "HttpCatalog",
    "IdentityCartStore",
    "IdentitySignal",
    "IdentityState",
    "IdentityStoreRegistry",
    "ItemNotFoundError",
    "MergeReport",
    "OfflineCartStore",
    "ReconciliationEngine",
    "StaticCatalog",
    "StorageError",
]
