"""Thread schedulers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from enum import Enum, auto
from typing import Any, Protocol

__all__ = ["ThreadStatus", "Scheduler", "FIFOScheduler"]


class ThreadStatus(Enum):
    """Life-cycle state of a thread."""

    INVALID = auto()
    RUNNING = auto()
    READY = auto()
    BLOCKED = auto()
    DYING = auto()


class _Thread(Protocol):
    tid: int


class Scheduler(ABC):
    """Holds threads waiting to run."""

    @abstractmethod
    def push(self, thread: Any) -> None:
        """Queue ``thread`` to run."""

    @abstractmethod
    def pop(self) -> Any | None:
        """Take the next thread to run, or None if there is none."""

    @abstractmethod
    def remove(self, tid: int) -> Any | None:
        """Take the thread with ``tid`` out of the scheduler, if present."""

    @abstractmethod
    def get(self, tid: int) -> Any | None:
        """Return the queued thread with ``tid`` without removing it."""


class FIFOScheduler(Scheduler):
    """Runs threads in the order they were queued."""

    def __init__(self) -> None:
        self._ready: deque[_Thread] = deque()

    def push(self, thread: _Thread) -> None:
        self._ready.append(thread)

    def pop(self) -> _Thread | None:
        return self._ready.popleft() if self._ready else None

    def remove(self, tid: int) -> _Thread | None:
        thread = self.get(tid)
        if thread is not None:
            self._ready.remove(thread)
        return thread

    def get(self, tid: int) -> _Thread | None:
        return next((thread for thread in self._ready if thread.tid == tid), None)

    def __len__(self) -> int:
        return len(self._ready)