"""Internal constants shared across the library."""

DEFAULT_BASE_URL = "http://localhost:8080/api"
DEFAULT_OFFLINE_CART_PATH = "~/.cartsync/offline_cart.json"
USER_AGENT = "cartsync/0.1"

# Backend keys. Identity carts are namespaced so both kinds of store can
# share one backend.
OFFLINE_CART_KEY = "offline"
IDENTITY_CART_KEY = "identity:{identity_id}"

# ------------------------------------------------------------------
# Remote API endpoints
# ------------------------------------------------------------------

CART_ENDPOINT = "/carts/{key}"
AVAILABILITY_ENDPOINT = "/catalog/items/{item_id}/availability"
