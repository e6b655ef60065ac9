"""
Viewport Synchronization Guards
===============================
Three small pieces of per-coordinator state:

- ``SequenceGuard``: numbers search attempts and tells whether a
  finished attempt is still the latest one.
- ``SuppressionLatch``: one-shot flag swallowing the move notification
  caused by a programmatic camera move.
- ``FitPolicy``: auto-fit the map only on the first successful
  viewport render.

None of them lock: they are only touched from the event loop thread.
"""

from __future__ import annotations


class SequenceGuard:
    """Issues strictly increasing attempt ids; the last one issued is current."""

    def __init__(self) -> None:
        self._current = 0

    @property
    def current(self) -> int:
        """Most recently issued id (0 before the first attempt)."""
        return self._current

    def next(self) -> int:
        self._current += 1
        return self._current

    def is_current(self, attempt_id: int) -> bool:
        return attempt_id == self._current


class SuppressionLatch:
    """Swallows exactly one move notification after being armed."""

    def __init__(self) -> None:
        self._armed = False

    @property
    def armed(self) -> bool:
        return self._armed

    def arm_for_next_move(self) -> None:
        self._armed = True

    def disarm(self) -> None:
        """Clear the latch without swallowing anything."""
        self._armed = False

    def consume_if_armed(self) -> bool:
        """Return True and clear the latch if it was set."""
        if not self._armed:
            return False
        self._armed = False
        return True


class FitPolicy:
    """Allows an automatic map fit once, then never again."""

    def __init__(self) -> None:
        self._allow_auto_fit = True

    def should_auto_fit(self) -> bool:
        return self._allow_auto_fit

    def consume(self) -> bool:
        """Return the current value, then disable auto-fit for good."""
        allowed = self._allow_auto_fit
        self._allow_auto_fit = False
        return allowed
