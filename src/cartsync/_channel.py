"""Replay-latest publish/subscribe channel.

Every subscriber gets its own unbounded queue. A new subscription receives
the most recent value (if any) before anything published afterwards.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

T = TypeVar("T")


class ReplayChannel(Generic[T]):
    """Multi-subscriber channel that replays the latest value on subscribe."""

    def __init__(self) -> None:
        self._subscribers: set[asyncio.Queue[T]] = set()
        self._latest: T | None = None
        self._has_value = False

    @property
    def has_value(self) -> bool:
        return self._has_value

    @property
    def latest(self) -> T | None:
        return self._latest

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, value: T) -> None:
        self._latest = value
        self._has_value = True
        for queue in self._subscribers:
            queue.put_nowait(value)

    async def subscribe(self) -> AsyncIterator[T]:
        """Yield the latest value, then every later publication.

        The subscription is released when the iterator is closed or the
        consuming task is cancelled.
        """
        queue: asyncio.Queue[T] = asyncio.Queue()
        if self._has_value:
            queue.put_nowait(self._latest)  # type: ignore[arg-type]
        self._subscribers.add(queue)
        try:
            while True:
                yield await queue.get()
        finally:
            self._subscribers.discard(queue)
