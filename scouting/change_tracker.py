"""Recent-change bookkeeping for scoring counters.

Each accepted counter update adds its delta to a running total that stays
visible for a fixed window; further updates inside the window extend it, and
once the window passes without updates the total clears.
"""

from __future__ import annotations

import time
from typing import Callable

from .constants import CHANGE_DISPLAY_SECONDS, COUNTER_NAMES

Clock = Callable[[], float]


class ChangeTracker:
    """Accumulated delta with an expiring display deadline for one counter."""

    def __init__(
        self,
        window: float = CHANGE_DISPLAY_SECONDS,
        clock: Clock = time.monotonic,
    ):
        self.window = window
        self._clock = clock
        self._accumulated: int | None = None
        self._visible_until: float | None = None

    def _expire(self, now: float) -> None:
        if self._visible_until is not None and now >= self._visible_until:
            self._accumulated = None
            self._visible_until = None

    def record(self, delta: int) -> int:
        """Add an accepted delta and restart the display window."""
        now = self._clock()
        self._expire(now)
        self._accumulated = (self._accumulated or 0) + delta
        self._visible_until = now + self.window
        return self._accumulated

    @property
    def accumulated_delta(self) -> int | None:
        """Current displayed delta, or None once the window has elapsed."""
        self._expire(self._clock())
        return self._accumulated

    @property
    def visible_until(self) -> float | None:
        self._expire(self._clock())
        return self._visible_until

    def remaining(self) -> float:
        """Seconds left in the display window (0 when nothing is shown)."""
        deadline = self.visible_until
        if deadline is None:
            return 0.0
        return max(0.0, deadline - self._clock())

    def cancel(self) -> None:
        self._accumulated = None
        self._visible_until = None


class CounterChangeSet:
    """One ChangeTracker per scoring counter."""

    def __init__(
        self,
        names=COUNTER_NAMES,
        window: float = CHANGE_DISPLAY_SECONDS,
        clock: Clock = time.monotonic,
    ):
        self._trackers = {name: ChangeTracker(window, clock) for name in names}

    def __getitem__(self, name: str) -> ChangeTracker:
        return self._trackers[name]

    def record(self, name: str, delta: int) -> int:
        return self._trackers[name].record(delta)

    def snapshot(self) -> dict[str, int | None]:
        return {name: tracker.accumulated_delta for name, tracker in self._trackers.items()}

    def cancel_all(self) -> None:
        for tracker in self._trackers.values():
            tracker.cancel()
