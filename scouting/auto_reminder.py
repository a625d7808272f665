"""Reminder to move on from the autonomous period.

The reminder arms on the first auto-counter interaction. If no teleop counter
has been touched within the budget, it signals until the auto section is
collapsed or a teleop counter is touched. Once cleared it stays cleared for
the rest of the match.
"""

from __future__ import annotations

import time
from typing import Callable

from .constants import AUTO_REMINDER_SECONDS


class AutoPhaseReminder:
    def __init__(
        self,
        budget: float = AUTO_REMINDER_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.budget = budget
        self._clock = clock
        self._started_at: float | None = None
        self._cleared = False

    @property
    def armed(self) -> bool:
        return self._started_at is not None and not self._cleared

    @property
    def cleared(self) -> bool:
        return self._cleared

    def touch_auto(self) -> None:
        """Record an auto-counter interaction; only the first one starts the timer."""
        if self._started_at is None and not self._cleared:
            self._started_at = self._clock()

    def touch_teleop(self) -> None:
        self._clear()

    def collapse_auto(self) -> None:
        self._clear()

    def _clear(self) -> None:
        self._cleared = True

    def is_signalling(self) -> bool:
        """True while the budget has elapsed and nothing has cleared the reminder."""
        if not self.armed:
            return False
        return self._clock() - self._started_at >= self.budget

    def seconds_until_signal(self) -> float | None:
        if not self.armed:
            return None
        return max(0.0, self.budget - (self._clock() - self._started_at))

    def cancel(self) -> None:
        self._started_at = None
        self._cleared = True
