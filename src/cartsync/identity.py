"""Observable identity state.

The authentication mechanism lives outside cartsync; it only has to
``publish`` the current :class:`~cartsync.models.identity.IdentityState`
here whenever it changes.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from cartsync._channel import ReplayChannel
from cartsync.models.identity import ANONYMOUS, IdentityState

_logger = logging.getLogger(__name__)


class IdentitySignal:
    """Current identity plus a stream of its changes.

    ``watch`` always starts with the current value.
    """

    def __init__(self, initial: IdentityState = ANONYMOUS) -> None:
        self._channel: ReplayChannel[IdentityState] = ReplayChannel()
        self._channel.publish(initial)

    @property
    def current(self) -> IdentityState:
        state = self._channel.latest
        assert state is not None  # noqa: S101
        return state

    def publish(self, state: IdentityState) -> None:
        _logger.debug("Identity changed: %r -> %r", self.current, state)
        self._channel.publish(state)

    def watch(self) -> AsyncIterator[IdentityState]:
        return self._channel.subscribe()
