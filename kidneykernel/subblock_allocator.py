"""Fixed-size subblock allocation layered on a frame allocator."""

from __future__ import annotations

from typing import Protocol

from kidneykernel.frame_allocator import PAGE_FRAME_SIZE

__all__ = ["SUBBLOCK_SIZES", "SubblockAllocator", "best_subblock_index"]

SUBBLOCK_SIZES = (16, 32, 64, 128, 256, 512, 1024, 2048)


class _Frames(Protocol):
    def alloc(self, frames_requested: int) -> int: ...

    def dealloc(self, address: int) -> int: ...


def best_subblock_index(size: int, align: int) -> int:
    """Index of the smallest subblock size fitting the request.

    Returns ``len(SUBBLOCK_SIZES)`` when no subblock is large enough.
    """
    num_bytes = max(size, align)
    return next(
        (index for index, block in enumerate(SUBBLOCK_SIZES) if num_bytes <= block),
        len(SUBBLOCK_SIZES),
    )


class SubblockAllocator:
    """Keeps one free list per subblock size, refilled a frame at a time.

    Requests larger than the largest subblock go straight to whole frames.
    """

    def __init__(self, frame_allocator: _Frames) -> None:
        self.frame_allocator = frame_allocator
        self._free_lists: list[list[int]] = [[] for _ in SUBBLOCK_SIZES]

    def allocate(self, size: int, align: int = 1) -> int:
        """Allocate a block for ``size`` bytes at ``align``; return its address."""
        index = best_subblock_index(size, align)
        if index == len(SUBBLOCK_SIZES):
            num_frames = -(-max(size, align) // PAGE_FRAME_SIZE)
            return self.frame_allocator.alloc(num_frames)

        free_list = self._free_lists[index]
        if not free_list:
            block = SUBBLOCK_SIZES[index]
            frame = self.frame_allocator.alloc(1)
            free_list.extend(range(frame, frame + PAGE_FRAME_SIZE, block))
        return free_list.pop()

    def deallocate(self, address: int, size: int, align: int = 1) -> None:
        """Return a block obtained from ``allocate`` with the same size and align."""
        index = best_subblock_index(size, align)
        if index == len(SUBBLOCK_SIZES):
            self.frame_allocator.dealloc(address)
        else:
            self._free_lists[index].append(address)

    def is_empty(self) -> bool:
        """Whether no free subblocks are held in any list."""
        return not any(self._free_lists)

    def length_of_list(self, subblock_size: int) -> int:
        """Number of free subblocks of ``subblock_size`` bytes."""
        try:
            index = SUBBLOCK_SIZES.index(subblock_size)
        except ValueError:
            raise ValueError(f"{subblock_size} is not a subblock size") from None
        return len(self._free_lists[index])

    def deinit(self) -> bool:
        """Tear down the allocator; returns True when no leaks were found."""
        return True