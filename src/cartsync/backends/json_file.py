"""JSON file cart backend used for the offline cart."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from cartsync.exceptions import StorageError

_logger = logging.getLogger(__name__)


class JsonFileCartBackend:
    """Keep every cart document in one JSON file, keyed by cart key.

    Writes go to a temporary file in the same directory and are then moved
    into place with :func:`os.replace`, so a crash never leaves a truncated
    file. File I/O runs in a worker thread.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, Any]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        if not text.strip():
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"{self._path} does not hold a JSON object")
        return data

    def _write_all(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, separators=(",", ":"), sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise

    async def load(self, key: str) -> dict[str, Any] | None:
        try:
            data = await asyncio.to_thread(self._read_all)
        except (OSError, ValueError) as exc:
            raise StorageError(f"Could not read {self._path}: {exc}", key=key) from exc
        document = data.get(key)
        if document is not None and not isinstance(document, dict):
            raise StorageError(f"Entry {key!r} in {self._path} is not an object", key=key)
        return document

    async def dump(self, key: str, document: dict[str, Any]) -> None:
        # Read-modify-write of the shared file must not interleave.
        async with self._lock:
            try:
                data = await asyncio.to_thread(self._read_all)
                data[key] = document
                await asyncio.to_thread(self._write_all, data)
            except (OSError, ValueError, TypeError) as exc:
                raise StorageError(f"Could not write {self._path}: {exc}", key=key) from exc
        _logger.debug("Wrote cart %r to %s", key, self._path)
