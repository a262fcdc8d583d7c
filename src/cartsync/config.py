"""Client configuration for cartsync."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from cartsync._constants import DEFAULT_BASE_URL, DEFAULT_OFFLINE_CART_PATH
from cartsync.exceptions import CartSyncConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise CartSyncConfigError(f"{name} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class CartSyncConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Base URL of the cart/catalog HTTP API (no trailing slash needed).
    api_token : str or None
        Bearer token sent with every request to the remote API.
    offline_cart_path : str
        JSON file holding the offline (anonymous) cart.  ``~`` is expanded.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    merge_on_sign_in : bool
        Start the reconciliation engine so the offline cart is merged into
        the identity cart when an anonymous session signs in.
    """

    base_url: str = DEFAULT_BASE_URL
    api_token: str | None = None
    offline_cart_path: str = DEFAULT_OFFLINE_CART_PATH
    request_timeout: float = 10.0
    merge_on_sign_in: bool = True

    def __post_init__(self) -> None:
        if not self.base_url.strip():
            raise CartSyncConfigError("base_url must be non-empty")
        if self.request_timeout <= 0:
            raise CartSyncConfigError("request_timeout must be positive")

    @property
    def resolved_offline_cart_path(self) -> str:
        return os.path.expanduser(self.offline_cart_path)

    @classmethod
    def from_env(cls, **overrides: Any) -> CartSyncConfig:
        """Create configuration from environment variables.

        Reads ``CARTSYNC_BASE_URL``, ``CARTSYNC_API_TOKEN``,
        ``CARTSYNC_OFFLINE_CART_PATH``, ``CARTSYNC_REQUEST_TIMEOUT`` and
        ``CARTSYNC_MERGE_ON_SIGN_IN``. Explicit keyword arguments override
        environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "CARTSYNC_BASE_URL": "base_url",
            "CARTSYNC_API_TOKEN": "api_token",
            "CARTSYNC_OFFLINE_CART_PATH": "offline_cart_path",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout_env = env.get("CARTSYNC_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = _env_float("CARTSYNC_REQUEST_TIMEOUT", timeout_env)

        if "merge_on_sign_in" not in overrides:
            config_kwargs["merge_on_sign_in"] = _env_bool(env.get("CARTSYNC_MERGE_ON_SIGN_IN"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
