"""A read-write lock: many readers or one writer."""

from __future__ import annotations

import threading
from typing import Any, Generic, TypeVar

__all__ = ["RwLock"]

T = TypeVar("T")


class RwLock(Generic[T]):
    """Allows any number of concurrent readers but only one writer.

    Readers are admitted whenever no writer holds the lock; a writer waits
    until there are neither readers nor another writer.
    """

    def __init__(self, value: T) -> None:
        self._data = value
        self._readers = 0
        self._writer = False
        self._cond = threading.Condition()

    @property
    def reader_count(self) -> int:
        """Number of read guards currently held."""
        with self._cond:
            return self._readers

    @property
    def is_write_locked(self) -> bool:
        """Whether a write guard is currently held."""
        with self._cond:
            return self._writer

    def read(self) -> _ReadGuard[T]:
        """Acquire the lock for reading."""
        with self._cond:
            self._cond.wait_for(lambda: not self._writer)
            self._readers += 1
        return _ReadGuard(self)

    def write(self) -> _WriteGuard[T]:
        """Acquire the lock for writing."""
        with self._cond:
            self._cond.wait_for(lambda: self._readers == 0 and not self._writer)
            self._writer = True
        return _WriteGuard(self)

    def _release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def _release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()


class _Guard(Generic[T]):
    def __init__(self, lock: RwLock[T]) -> None:
        self._lock = lock
        self._released = False

    def _check(self) -> None:
        if self._released:
            raise RuntimeError("lock guard used after release")

    def _unlock(self) -> None:
        raise NotImplementedError

    def release(self) -> None:
        """Release the lock; releasing again does nothing."""
        if not self._released:
            self._released = True
            self._unlock()

    def __enter__(self) -> Any:
        return self

    def __exit__(self, *args: Any) -> None:
        self.release()


class _ReadGuard(_Guard[T]):
    """Shared access to the data."""

    @property
    def value(self) -> T:
        self._check()
        return self._lock._data

    def _unlock(self) -> None:
        self._lock._release_read()


class _WriteGuard(_Guard[T]):
    """Exclusive access to the data."""

    @property
    def value(self) -> T:
        self._check()
        return self._lock._data

    @value.setter
    def value(self, new_value: T) -> None:
        self._check()
        self._lock._data = new_value

    def _unlock(self) -> None:
        self._lock._release_write()