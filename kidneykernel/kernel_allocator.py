"""The kernel's global allocator: bootstrap, subblock and frame allocation."""

from __future__ import annotations

from enum import Enum, auto

from kidneykernel.dummy_allocator import DummyAllocator
from kidneykernel.frame_allocator import PAGE_FRAME_SIZE, FrameAllocator
from kidneykernel.placement import AllocError, CoreMapEntry, NextFit
from kidneykernel.subblock_allocator import SubblockAllocator

__all__ = [
    "KB",
    "MB",
    "MAX_SUPPORTED_ALIGN",
    "UPPER_MEMORY_START",
    "CORE_MAP_ENTRY_SIZE",
    "KernelAllocatorError",
    "KernelAllocator",
]

KB = 1024
MB = 1024 * KB

MAX_SUPPORTED_ALIGN = 4096
# "Upper memory" (as opposed to "lower memory") starts at 1MB.
UPPER_MEMORY_START = MB
# Each core map entry occupies a single byte.
CORE_MAP_ENTRY_SIZE = 1


class KernelAllocatorError(RuntimeError):
    """Raised where the kernel allocator cannot continue at all."""


class _Stage(Enum):
    DEINITIALIZED = auto()
    SETUP = auto()
    INITIALIZED = auto()


class KernelAllocator:
    """Serves kernel allocations in three stages.

    Before ``init`` only a bootstrap bump allocator exists, and it serves
    exactly one request: the core map. After ``init`` small requests are
    served from subblocks and large ones from whole frames.
    """

    def __init__(self) -> None:
        self._stage = _Stage.SETUP
        self._dummy = DummyAllocator(0, 0)
        self._subblocks: SubblockAllocator | None = None
        self._first_allocation = True
        self._allocations = 0
        self._deallocations = 0

    @property
    def initialized(self) -> bool:
        """Whether ``init`` has completed and ``deinit`` has not run."""
        return self._stage is _Stage.INITIALIZED

    @property
    def frame_allocator(self) -> FrameAllocator:
        """The frame allocator beneath the subblock allocator."""
        return self._initialized_subblocks("frame allocator requested").frame_allocator

    def _initialized_subblocks(self, action: str) -> SubblockAllocator:
        if self._stage is not _Stage.INITIALIZED or self._subblocks is None:
            raise KernelAllocatorError(
                f"[KERNEL ALLOCATOR]: {action} before initialization of kernel allocator"
            )
        return self._subblocks

    def init(self, mem_upper: int, base_address: int) -> None:
        """Set up frame allocation between ``base_address`` and the top of memory.

        ``mem_upper`` is the size of upper memory in kilobytes.
        """
        if self._stage is not _Stage.SETUP:
            raise KernelAllocatorError(
                "[PANIC]: init called while kernel allocator was already initialized"
            )
        if self._dummy.start_address != 0 or self._dummy.end_address != 0:
            raise KernelAllocatorError("bootstrap allocator was already configured")

        frames_ceil_address = UPPER_MEMORY_START + mem_upper * KB
        if base_address >= frames_ceil_address:
            raise ValueError(
                f"base address {base_address:#x} lies above the end of memory "
                f"{frames_ceil_address:#x}"
            )

        self._dummy.start_address = base_address
        self._dummy.end_address = frames_ceil_address

        num_frames = (frames_ceil_address - base_address) // (
            CORE_MAP_ENTRY_SIZE + PAGE_FRAME_SIZE
        )

        # This must be the very first allocation, served by the bootstrap allocator.
        self.alloc(num_frames * CORE_MAP_ENTRY_SIZE, 1)
        core_map = [CoreMapEntry() for _ in range(num_frames)]

        if self._dummy.start_address == base_address:
            raise KernelAllocatorError("bootstrap allocator did not reserve the core map")

        frames = FrameAllocator(self._dummy.start_address, core_map, NextFit())
        self._subblocks = SubblockAllocator(frames)
        self._stage = _Stage.INITIALIZED

    def alloc(self, size: int, align: int = 1) -> int:
        """Allocate ``size`` bytes aligned to ``align`` and return the address."""
        if self._first_allocation:
            if self._stage is not _Stage.SETUP:
                raise KernelAllocatorError(
                    "[KERNEL ALLOCATOR]: Kernel initialized before Coremap Entries created"
                )
            if align > MAX_SUPPORTED_ALIGN:
                raise AllocError(f"alignment {align} is larger than a page")
            frames = -(-(size + align) // PAGE_FRAME_SIZE)
            try:
                address = self._dummy.alloc(frames)
            except AllocError as error:
                raise KernelAllocatorError(
                    "[KERNEL ALLOCATOR]: Unable to allocate memory according to "
                    "provided layout in DummyAllocator"
                ) from error
            self._first_allocation = False
            return address

        if self._stage is not _Stage.INITIALIZED or self._subblocks is None:
            raise KernelAllocatorError(
                "[KERNEL ALLOCATOR]: Allocation requested before kernel is Initialized"
            )
        if align > MAX_SUPPORTED_ALIGN:
            raise AllocError(f"alignment {align} is larger than a page")
        try:
            address = self._subblocks.allocate(size, align)
        except AllocError as error:
            raise KernelAllocatorError(
                "[KERNEL ALLOCATOR]: Unable to allocate memory according to "
                "provided layout in SubblockAllocator"
            ) from error
        self._allocations += 1
        return address

    def dealloc(self, address: int, size: int, align: int = 1) -> None:
        """Free an allocation made by ``alloc`` with the same size and align."""
        subblocks = self._initialized_subblocks("dealloc called")
        subblocks.deallocate(address, size, align)
        self._deallocations += 1

    def frame_alloc(self, frames: int) -> int:
        """Allocate whole frames directly; return the address of the first."""
        if self._stage is not _Stage.INITIALIZED or self._subblocks is None:
            raise AllocError("kernel allocator is not initialized")
        return self._subblocks.frame_allocator.alloc(frames)

    def frame_dealloc(self, address: int) -> None:
        """Free frames obtained from ``frame_alloc``."""
        if self._stage is not _Stage.INITIALIZED or self._subblocks is None:
            raise KernelAllocatorError(
                "[KERNEL ALLOCATOR]: Dealloc called on DeInitialized or SetupState kernel"
            )
        self._subblocks.frame_allocator.dealloc(address)

    def deinit(self) -> None:
        """Shut the allocator down, raising if allocations were leaked."""
        subblocks = self._initialized_subblocks("deinit called")
        leaked = self._allocations != self._deallocations
        subblocks.deinit()
        if leaked:
            raise KernelAllocatorError("[KERNEL ALLOCATOR]: Leaks detected")
        self._stage = _Stage.DEINITIALIZED
        self._subblocks = None