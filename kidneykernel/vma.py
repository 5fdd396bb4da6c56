"""Virtual memory areas of a process."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from kidneykernel.frame_allocator import PAGE_FRAME_SIZE

__all__ = ["VMAKind", "VMA", "VMAList"]


class VMAKind(Enum):
    """What a virtual memory area holds."""

    STACK = auto()
    HEAP = auto()
    MMAP = auto()


@dataclass
class VMA:
    """A virtual memory area.

    Memory-mapped areas name a filesystem, an inode, and an ``offset`` into
    the file in units of pages.
    """

    kind: VMAKind
    size: int
    writeable: bool
    fs: int | None = None
    inode: int | None = None
    offset: int = 0

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError("a VMA cannot have a negative size")
        if self.kind is VMAKind.MMAP and (self.fs is None or self.inode is None):
            raise ValueError("a memory-mapped VMA needs a filesystem and an inode")


class VMAList:
    """The virtual memory areas of one process, ordered by start address."""

    def __init__(self) -> None:
        self._addresses: list[int] = []
        self._areas: dict[int, VMA] = {}

    def vma_at(self, addr: int) -> tuple[int, VMA] | None:
        """Return ``(start, vma)`` for the area covering ``addr``, if any."""
        position = bisect_right(self._addresses, addr)
        if position == 0:
            return None
        start = self._addresses[position - 1]
        vma = self._areas[start]
        if start <= addr < start + vma.size:
            return start, vma
        return None

    def is_address_range_free(self, start: int, end: int) -> bool:
        """Whether no area overlaps the addresses ``start`` up to ``end``."""
        if self.vma_at(start) is not None:
            return False
        position = bisect_left(self._addresses, start)
        return position == len(self._addresses) or self._addresses[position] >= end

    def add_vma(self, vma: VMA, addr: int) -> bool:
        """Add ``vma`` at page-aligned ``addr``; False if the range is taken."""
        if addr % PAGE_FRAME_SIZE:
            raise ValueError(f"VMA address {addr:#x} is not page aligned")
        if not self.is_address_range_free(addr, addr + vma.size):
            return False
        position = bisect_left(self._addresses, addr)
        if position < len(self._addresses) and self._addresses[position] == addr:
            return False
        self._addresses.insert(position, addr)
        self._areas[addr] = vma
        return True

    def __iter__(self) -> Iterator[tuple[int, VMA]]:
        return ((addr, self._areas[addr]) for addr in self._addresses)

    def __len__(self) -> int:
        return len(self._addresses)