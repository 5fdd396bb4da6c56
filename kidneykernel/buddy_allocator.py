"""A buddy allocator over a simulated region of memory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from kidneykernel.placement import AllocError

__all__ = ["BuddyAllocator"]

logger = logging.getLogger(__name__)


class _State(Enum):
    FREE = 0
    ALLOCATED = 1
    SPLIT = 2


@dataclass(frozen=True)
class _Region:
    start: int
    length: int

    @property
    def usable(self) -> int:
        """Space left once the leading state byte is accounted for."""
        return self.length - BuddyAllocator.OVERHEAD

    def halves(self) -> tuple[_Region, _Region]:
        size = self.usable // 2
        left_start = self.start + BuddyAllocator.OVERHEAD
        return _Region(left_start, size), _Region(left_start + size, size)


def _align_up(value: int, align: int) -> int:
    return -(-value // align) * align


class BuddyAllocator:
    """Splits a region in halves on demand and coalesces free buddies.

    Every region keeps its state in its first byte, so each region spends
    ``OVERHEAD`` bytes on book-keeping and its two halves share the rest.
    """

    OVERHEAD = 1

    def __init__(self, size: int, base: int = 0) -> None:
        if size < self.OVERHEAD:
            raise ValueError(f"region of {size} bytes is too small for a buddy allocator")
        self.base = base
        self.size = size
        self._root = _Region(base, size)
        self._states: dict[int, _State] = {base: _State.FREE}

    def _state(self, region: _Region) -> _State:
        return self._states[region.start]

    def _set_state(self, region: _Region, state: _State) -> None:
        self._states[region.start] = state

    def is_empty(self) -> bool:
        """Whether every allocation has been freed."""
        return self._state(self._root) is _State.FREE

    def _leaked(self, region: _Region) -> Iterator[_Region]:
        state = self._state(region)
        if state is _State.ALLOCATED:
            yield region
        elif state is _State.SPLIT:
            for half in region.halves():
                yield from self._leaked(half)

    def detect_leaks(self) -> bool:
        """Log every region still allocated and return whether there were any."""
        leaked = list(self._leaked(self._root))
        for region in leaked:
            logger.error(
                "address within buddy allocator region %#x leaked!", region.start
            )
        return bool(leaked)

    def _find_free(self, region: _Region, target_size: int) -> _Region | None:
        if region.usable < target_size:
            return None
        state = self._state(region)
        if state is _State.FREE:
            return self._split_free(region, target_size)
        if state is _State.ALLOCATED:
            return None
        left, right = region.halves()
        return self._find_free(left, target_size) or self._find_free(right, target_size)

    def _split_free(self, region: _Region, target_size: int) -> _Region:
        left, right = region.halves()
        if left.usable < target_size:
            self._set_state(region, _State.ALLOCATED)
            return region
        self._set_state(region, _State.SPLIT)
        self._set_state(right, _State.FREE)
        return self._split_free(left, target_size)

    def allocate(self, size: int, align: int = 1) -> int:
        """Allocate ``size`` bytes aligned to ``align``; return the address."""
        if size < 0:
            raise ValueError("size must not be negative")
        if align <= 0 or align & (align - 1):
            raise ValueError("align must be a power of two")
        # Over-allocate so an aligned sub-range of the right size always fits.
        target_size = size + align - 1
        region = self._find_free(self._root, target_size)
        if region is None:
            raise AllocError(f"cannot allocate {size} bytes aligned to {align}")
        return _align_up(region.start + self.OVERHEAD, align)

    def _deallocate(self, region: _Region, address: int) -> bool:
        state = self._state(region)
        if state is _State.FREE:
            raise RuntimeError("internal inconsistency detected in buddy allocator")
        if state is _State.ALLOCATED:
            self._set_state(region, _State.FREE)
            return True
        left, right = region.halves()
        target, buddy = (left, right) if address < right.start else (right, left)
        if self._deallocate(target, address) and self._state(buddy) is _State.FREE:
            self._set_state(region, _State.FREE)
            return True
        return False

    def deallocate(self, address: int) -> None:
        """Free the allocation containing ``address``."""
        if not self.base <= address < self.base + self.size:
            raise ValueError(f"address {address:#x} is not owned by this allocator")
        self._deallocate(self._root, address)