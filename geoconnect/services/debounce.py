"""Debounce helper for map move notifications."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Runs an action once a quiet period has passed since the last trigger.

    Every ``schedule`` call restarts the timer; only the most recent action
    survives.  Timers live on the running asyncio loop, so ``schedule``
    must be called from the loop thread.  An action that has already fired
    is never affected by later calls.
    """

    def __init__(self, delay: float = 0.4) -> None:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.delay = delay
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, action: Callable[[], object]) -> None:
        """Cancel any pending invocation and arm a new timer for *action*."""
        if self._handle is not None:
            self._handle.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, action)

    def cancel(self) -> None:
        """Drop the pending invocation, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, action: Callable[[], object]) -> None:
        self._handle = None
        logger.debug("Debounce quiet period elapsed (%.3fs)", self.delay)
        action()
