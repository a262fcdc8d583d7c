"""In-process cart backend."""

from __future__ import annotations

import copy
from typing import Any

from cartsync.exceptions import StorageError


class MemoryCartBackend:
    """Dict-backed backend.

    ``fail_loads`` / ``fail_dumps`` make every subsequent call raise
    :class:`StorageError`, which lets callers exercise failure paths without
    a real disk or network.
    """

    def __init__(self, documents: dict[str, dict[str, Any]] | None = None) -> None:
        self._documents: dict[str, dict[str, Any]] = copy.deepcopy(documents) if documents else {}
        self.fail_loads = False
        self.fail_dumps = False

    async def load(self, key: str) -> dict[str, Any] | None:
        if self.fail_loads:
            raise StorageError(f"load of {key!r} failed", key=key)
        document = self._documents.get(key)
        return copy.deepcopy(document) if document is not None else None

    async def dump(self, key: str, document: dict[str, Any]) -> None:
        if self.fail_dumps:
            raise StorageError(f"dump of {key!r} failed", key=key)
        self._documents[key] = copy.deepcopy(document)
