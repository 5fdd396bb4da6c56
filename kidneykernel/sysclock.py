"""The system clock, advanced by the programmable interval timer."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import timedelta

__all__ = ["TIMER_INTERRUPT_INTERVAL", "SystemClock"]

# The PIT runs at 3579545 / 3 Hz and interrupts after 0xffff input ticks.
TIMER_INTERRUPT_INTERVAL = timedelta(
    microseconds=10**6 * 0xFFFF * 3 // 3579545
)


@dataclass
class SystemClock:
    """Time since boot, advanced one timer interval per interrupt."""

    now: timedelta = timedelta(0)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def step(self) -> timedelta:
        """Advance by one timer interval and return the new time."""
        with self._lock:
            try:
                self.now = self.now + TIMER_INTERRUPT_INTERVAL
            except OverflowError:
                raise OverflowError("System clock overflowed!") from None
            return self.now

    def wakeup_time(self, duration: timedelta) -> timedelta:
        """Return the clock time at which a sleep of ``duration`` ends."""
        with self._lock:
            try:
                return self.now + duration
            except OverflowError:
                raise OverflowError("Wakeup time is too far into the future!") from None