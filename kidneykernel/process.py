"""Process control blocks, the process table, and id allocation."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from kidneykernel.vma import VMAList

__all__ = ["ProcessControlBlock", "ProcessTable", "ProcessState"]

_ID_MASK = 0xFFFF


@dataclass
class ProcessControlBlock:
    """Book-keeping for one process."""

    pid: int
    ppid: int = 0
    child_tids: list[int] = field(default_factory=list)
    waiting_thread: int | None = None
    exit_code: int | None = None
    cwd_path: str = "/"
    vmas: VMAList = field(default_factory=VMAList)


class ProcessTable:
    """Process control blocks indexed by pid."""

    def __init__(self) -> None:
        self._content: dict[int, ProcessControlBlock] = {}
        self._lock = threading.RLock()

    def add(self, pcb: ProcessControlBlock) -> ProcessControlBlock:
        """Insert ``pcb``; its pid must not already be present."""
        with self._lock:
            if pcb.pid in self._content:
                raise ValueError(
                    f"PCB with pid {pcb.pid} already added to process table."
                )
            self._content[pcb.pid] = pcb
        return pcb

    def remove(self, pid: int) -> ProcessControlBlock | None:
        """Remove and return the process with ``pid``, if present."""
        with self._lock:
            return self._content.pop(pid, None)

    def get(self, pid: int) -> ProcessControlBlock | None:
        """Return the process with ``pid``, if present."""
        with self._lock:
            return self._content.get(pid)

    def __len__(self) -> int:
        with self._lock:
            return len(self._content)


@dataclass
class ProcessState:
    """The process table plus counters for new pids and tids (16 bits wide)."""

    table: ProcessTable = field(default_factory=ProcessTable)
    next_pid: int = 1
    next_tid: int = 1
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def allocate_pid(self) -> int:
        """Return a fresh pid; raises OverflowError once the counter wraps."""
        with self._lock:
            pid = self.next_pid
            self.next_pid = (pid + 1) & _ID_MASK
        if pid == 0:
            raise OverflowError("PID overflow")
        return pid

    def allocate_tid(self) -> int:
        """Return a fresh tid; raises OverflowError once the counter wraps."""
        with self._lock:
            tid = self.next_tid
            self.next_tid = (tid + 1) & _ID_MASK
        if tid == 0:
            raise OverflowError("TID overflow")
        return tid