"""A counting semaphore whose permits post back when released."""

from __future__ import annotations

import threading
from typing import Any

__all__ = ["Semaphore", "SemaphorePermit"]


class Semaphore:
    """A counting semaphore; waiting threads sleep until a post."""

    def __init__(self, value: int) -> None:
        self._value = value
        self._cond = threading.Condition()

    @property
    def value(self) -> int:
        """Number of permits currently available."""
        with self._cond:
            return self._value

    def post(self) -> None:
        """Add one permit and wake a waiting thread."""
        with self._cond:
            self._value += 1
            self._cond.notify()

    def acquire(self) -> SemaphorePermit:
        """Wait for a permit and take it."""
        with self._cond:
            self._cond.wait_for(lambda: self._value > 0)
            self._value -= 1
        return SemaphorePermit(self)

    def try_acquire(self) -> SemaphorePermit | None:
        """Take a permit if one is available right now."""
        with self._cond:
            if self._value <= 0:
                return None
            self._value -= 1
        return SemaphorePermit(self)


class SemaphorePermit:
    """A taken permit; releasing it posts the semaphore unless forgotten."""

    def __init__(self, semaphore: Semaphore) -> None:
        self._semaphore = semaphore
        self._done = False

    def forget(self) -> None:
        """Give the permit up without returning it to the semaphore."""
        self._done = True

    def release(self) -> None:
        """Return the permit; doing so again, or after ``forget``, does nothing."""
        if not self._done:
            self._done = True
            self._semaphore.post()

    def __enter__(self) -> SemaphorePermit:
        return self

    def __exit__(self, *args: Any) -> None:
        self.release()