"""Debouncer: hold back a rapidly changing value until input goes quiet.

Clock-driven and single-threaded: callers push values and poll. The Qt layer
polls from a single-shot QTimer; tests drive a fake clock.
"""

from __future__ import annotations

import time
from typing import Callable, Generic, TypeVar

V = TypeVar("V")


class Debouncer(Generic[V]):
    """Keep the latest pushed value until ``delay`` seconds pass without a push."""

    def __init__(self, delay: float, clock: Callable[[], float] = time.monotonic) -> None:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self._delay = delay
        self._clock = clock
        self._pending: V | None = None
        self._has_pending = False
        self._deadline = 0.0

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        return self._has_pending

    def push(self, value: V) -> None:
        """Replace the pending value and restart the quiet period."""
        self._pending = value
        self._has_pending = True
        self._deadline = self._clock() + self._delay

    def remaining(self) -> float:
        """Seconds until the pending value becomes due (0 if none pending)."""
        if not self._has_pending:
            return 0.0
        return max(0.0, self._deadline - self._clock())

    def poll(self) -> tuple[bool, V | None]:
        """Return ``(True, value)`` once the quiet period elapsed, else ``(False, None)``."""
        if self._has_pending and self._clock() >= self._deadline:
            return self.flush()
        return False, None

    def flush(self) -> tuple[bool, V | None]:
        """Release the pending value immediately, if any."""
        if not self._has_pending:
            return False, None
        value = self._pending
        self.cancel()
        return True, value

    def cancel(self) -> None:
        self._pending = None
        self._has_pending = False
