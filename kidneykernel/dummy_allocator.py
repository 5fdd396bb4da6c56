"""A bump allocator used once, to place the core map before paging is ready."""

from __future__ import annotations

from dataclasses import dataclass

from kidneykernel.frame_allocator import PAGE_FRAME_SIZE
from kidneykernel.placement import AllocError

__all__ = ["DummyAllocator"]


@dataclass
class DummyAllocator:
    """Hands out whole frames from ``start_address`` upwards; never frees."""

    start_address: int
    end_address: int

    def alloc(self, total_frames: int) -> int:
        """Reserve ``total_frames`` frames and return the address of the first.

        ``start_address`` then moves to the next page boundary past the region.
        """
        length = PAGE_FRAME_SIZE * total_frames
        if self.start_address + length > self.end_address:
            raise AllocError(f"cannot reserve {total_frames} frames")
        if self.start_address == 0:
            raise AllocError("cannot hand out a region starting at address zero")

        address = self.start_address
        end = self.start_address + length
        self.start_address = -(-end // PAGE_FRAME_SIZE) * PAGE_FRAME_SIZE
        return address