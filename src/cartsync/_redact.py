"""Helpers for safe debug logging.

The only secret the cart API exchanges is the bearer token in the
``Authorization`` header. Cart payloads can hold many items, so mappings
and strings are also cut short before they reach DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SENSITIVE_HEADERS: frozenset[str] = frozenset({"authorization"})


def redact_for_log(value: Any, *, max_string: int = 512, max_items: int = 50, _depth: int = 0) -> Any:
    """Return a redacted, size-limited copy of a header map or JSON payload."""
    if _depth > 20:
        return "<max-depth>"

    if value is None or isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for index, (k, v) in enumerate(value.items()):
            if index >= max_items:
                redacted["…"] = f"<{len(value) - max_items} more>"
                break
            key = str(k)
            if key.lower() in _SENSITIVE_HEADERS:
                redacted[key] = "<redacted>"
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, max_items=max_items, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence):
        return [redact_for_log(v, max_string=max_string, max_items=max_items, _depth=_depth + 1) for v in value]

    return repr(value)
