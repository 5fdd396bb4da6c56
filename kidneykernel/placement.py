"""Frame placement policies used by the frame allocator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from itertools import islice, takewhile
from typing import Sequence

__all__ = [
    "AllocError",
    "CoreMapEntry",
    "PlacementAlgorithm",
    "NextFit",
    "FirstFit",
    "BestFit",
]


class AllocError(MemoryError):
    """Raised when a request for memory cannot be satisfied."""


@dataclass
class CoreMapEntry:
    """Book-keeping flags for one physical frame."""

    allocated: bool = False
    pinned: bool = False
    is_kernel: bool = False
    next: bool = False


def _free_run(core_map: Sequence[CoreMapEntry], start: int, limit: int | None) -> int:
    """Count consecutive free frames from ``start``, stopping at ``limit`` frames."""
    stop = None if limit is None else start + limit
    entries = islice(core_map, start, stop)
    return sum(1 for _ in takewhile(lambda entry: not entry.allocated, entries))


class PlacementAlgorithm(ABC):
    """A strategy that chooses which frames satisfy an allocation."""

    @abstractmethod
    def place(self, core_map: Sequence[CoreMapEntry], frames_requested: int) -> range:
        """Return the range of frame numbers to allocate.

        Raises AllocError when no sufficiently large run of free frames exists.
        """


class NextFit(PlacementAlgorithm):
    """Search from where the previous allocation ended, wrapping around once."""

    def __init__(self, position: int = 0) -> None:
        self.position = position

    def place(self, core_map: Sequence[CoreMapEntry], frames_requested: int) -> range:
        total_frames = len(core_map)
        block_start = self.position
        wrapped_around = False

        while not (wrapped_around and block_start >= self.position):
            if block_start + frames_requested > total_frames:
                block_start = 0
                # A second wrap would loop forever on oversized requests.
                if wrapped_around:
                    break
                wrapped_around = True
                continue

            block_size = _free_run(core_map, block_start, frames_requested)
            if block_size == frames_requested:
                self.position = (block_start + block_size) % total_frames
                return range(block_start, block_start + block_size)
            block_start += block_size + 1

        raise AllocError(f"no run of {frames_requested} free frames")


class FirstFit(PlacementAlgorithm):
    """Take the lowest-numbered run of free frames that is large enough."""

    def place(self, core_map: Sequence[CoreMapEntry], frames_requested: int) -> range:
        total_frames = len(core_map)
        block_start = 0

        while block_start + frames_requested <= total_frames:
            block_size = _free_run(core_map, block_start, frames_requested)
            if block_size == frames_requested:
                return range(block_start, block_start + block_size)
            block_start += block_size + 1

        raise AllocError(f"no run of {frames_requested} free frames")


class BestFit(PlacementAlgorithm):
    """Take the smallest run of free frames that is large enough."""

    def place(self, core_map: Sequence[CoreMapEntry], frames_requested: int) -> range:
        total_frames = len(core_map)
        best_start = total_frames
        best_size = total_frames + 1
        block_start = 0

        while block_start + frames_requested <= total_frames:
            block_size = _free_run(core_map, block_start, None)
            if block_size == frames_requested:
                return range(block_start, block_start + block_size)
            if frames_requested < block_size < best_size:
                best_start = block_start
                best_size = block_size
            block_start += block_size + 1

        if best_start < total_frames:
            return range(best_start, best_start + frames_requested)

        raise AllocError(f"no run of {frames_requested} free frames")