"""JSON-over-HTTP transport for the remote cart and catalog API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from cartsync._constants import USER_AGENT
from cartsync._redact import redact_for_log
from cartsync.config import CartSyncConfig
from cartsync.exceptions import CartTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the HTTP backend and catalog.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str) -> dict[str, Any] | None: ...

    async def put_json(self, endpoint: str, payload: Mapping[str, Any]) -> None: ...


class HttpTransport:
    """aiohttp transport that adds auth headers and decodes JSON bodies."""

    def __init__(self, config: CartSyncConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "accept": "application/json",
            "content-type": "application/json; charset=UTF-8",
            "user-agent": USER_AGENT,
        }
        if self._config.api_token:
            headers["authorization"] = f"Bearer {self._config.api_token}"
        return headers

    def _url(self, endpoint: str) -> str:
        return f"{self._config.base_url.rstrip('/')}{endpoint}"

    async def get_json(self, endpoint: str) -> dict[str, Any] | None:
        """GET *endpoint* and return its JSON object, or ``None`` on 404."""
        url = self._url(endpoint)
        _logger.debug("GET %s headers=%s", url, redact_for_log(self._headers()))

        try:
            async with self._http.get(url, headers=self._headers(), timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status == 404:
                    return None
                if resp.status != 200:
                    raise CartTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except CartTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise CartTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CartTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc

        if not isinstance(body, dict):
            raise CartTransportError(
                f"Expected a JSON object from {endpoint}",
                endpoint=endpoint,
            )
        _logger.debug("GET %s -> %s", url, redact_for_log(body))
        return body

    async def put_json(self, endpoint: str, payload: Mapping[str, Any]) -> None:
        """PUT *payload* as JSON; any 2xx status is success."""
        url = self._url(endpoint)
        body = json.dumps(payload, separators=(",", ":"))
        _logger.debug("PUT %s body=%s", url, redact_for_log(payload))

        try:
            async with self._http.put(url, data=body, headers=self._headers(), timeout=self._timeout) as resp:
                if not 200 <= resp.status < 300:
                    text = await resp.text()
                    raise CartTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except CartTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise CartTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc
