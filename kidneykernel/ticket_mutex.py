"""A first-in-first-out ticket mutex."""

from __future__ import annotations

import threading
from typing import Any, Generic, TypeVar

__all__ = ["TicketMutex", "TicketMutexGuard"]

T = TypeVar("T")


class TicketMutex(Generic[T]):
    """A mutex that serves waiting threads in the order they arrived.

    Every caller of ``lock`` draws a ticket. The lock is held by whoever's
    ticket is currently being served, and releasing it serves the next ticket.
    """

    def __init__(self, value: T) -> None:
        self._data = value
        self._next_ticket = 0
        self._next_serving = 0
        self._cond = threading.Condition()

    def lock(self) -> TicketMutexGuard[T]:
        """Wait for this caller's turn and return a guard over the data."""
        with self._cond:
            ticket = self._next_ticket
            self._next_ticket += 1
            self._cond.wait_for(lambda: self._next_serving == ticket)
        return TicketMutexGuard(self, ticket)

    def try_lock(self) -> TicketMutexGuard[T] | None:
        """Take the lock only if nobody holds or waits for it."""
        with self._cond:
            if self._next_serving != self._next_ticket:
                return None
            ticket = self._next_ticket
            self._next_ticket += 1
        return TicketMutexGuard(self, ticket)

    def is_locked(self) -> bool:
        """Whether the lock is held or waited for."""
        with self._cond:
            return self._next_serving != self._next_ticket

    def _unlock(self, ticket: int) -> None:
        with self._cond:
            self._next_serving = ticket + 1
            self._cond.notify_all()

    def __repr__(self) -> str:
        guard = self.try_lock()
        if guard is None:
            return "Mutex { <locked> }"
        with guard:
            return f"Mutex {{ data: {guard.value!r}}}"


class TicketMutexGuard(Generic[T]):
    """Access to the data of a held ``TicketMutex``; releases it on exit."""

    def __init__(self, mutex: TicketMutex[T], ticket: int) -> None:
        self._mutex = mutex
        self._ticket = ticket
        self._released = False

    def _check(self) -> None:
        if self._released:
            raise RuntimeError("mutex guard used after release")

    @property
    def value(self) -> T:
        """The protected data."""
        self._check()
        return self._mutex._data

    @value.setter
    def value(self, new_value: T) -> None:
        self._check()
        self._mutex._data = new_value

    def release(self) -> None:
        """Release the lock; releasing again does nothing."""
        if not self._released:
            self._released = True
            self._mutex._unlock(self._ticket)

    def __enter__(self) -> TicketMutexGuard[T]:
        return self

    def __exit__(self, *args: Any) -> None:
        self.release()