"""Contiguous physical frame allocation backed by a core map."""

from __future__ import annotations

from typing import MutableSequence

from kidneykernel.placement import AllocError, CoreMapEntry, NextFit, PlacementAlgorithm

__all__ = ["PAGE_FRAME_SIZE", "FrameAllocator"]

PAGE_FRAME_SIZE = 4096


class FrameAllocator:
    """Hands out runs of page frames starting at address ``start``.

    Each frame has an entry in ``core_map``; frames of one allocation are
    chained through their ``next`` flag so that freeing needs only the address.
    """

    def __init__(
        self,
        start: int,
        core_map: MutableSequence[CoreMapEntry],
        placement_algorithm: PlacementAlgorithm | None = None,
    ) -> None:
        self.start = start
        self.core_map = core_map
        self.placement_algorithm = (
            placement_algorithm if placement_algorithm is not None else NextFit()
        )
        self._frames_allocated = 0

    @property
    def size(self) -> int:
        """Number of bytes covered by the allocator."""
        return len(self.core_map) * PAGE_FRAME_SIZE

    def alloc(self, frames_requested: int) -> int:
        """Allocate contiguous frames and return the address of the first one."""
        if self._frames_allocated + frames_requested > len(self.core_map):
            raise AllocError(f"cannot allocate {frames_requested} more frames")

        frames = self.placement_algorithm.place(self.core_map, frames_requested)
        last = frames.stop - 1
        for i in frames:
            entry = self.core_map[i]
            if entry.allocated:
                raise RuntimeError(f"frame {i} chosen for allocation is already in use")
            entry.allocated = True
            if i != last:
                entry.next = True

        self._frames_allocated += frames_requested
        return self.start + frames.start * PAGE_FRAME_SIZE

    def dealloc(self, address: int) -> int:
        """Free the allocation starting at ``address``; return frames freed."""
        index = (address - self.start) // PAGE_FRAME_SIZE
        if not 0 <= index < len(self.core_map):
            raise ValueError(f"address {address:#x} is not owned by this allocator")

        frames_freed = 1
        while self.core_map[index].next:
            entry = self.core_map[index]
            if not entry.allocated:
                raise RuntimeError(f"frame {index} in allocation chain is not allocated")
            entry.next = False
            entry.allocated = False
            frames_freed += 1
            index += 1

        self.core_map[index].allocated = False
        self._frames_allocated -= frames_freed
        return frames_freed

    def num_allocated(self) -> int:
        """Number of frames currently allocated."""
        return self._frames_allocated