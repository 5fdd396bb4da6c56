import pytest

from kidneykernel.frame_allocator import PAGE_FRAME_SIZE
from kidneykernel.kernel_allocator import (
    MAX_SUPPORTED_ALIGN,
    MB,
    KernelAllocator,
    KernelAllocatorError,
)
from kidneykernel.placement import AllocError

BASE = 2 * MB
MEM_UPPER = 4096


@pytest.fixture
def allocator():
    kernel = KernelAllocator()
    kernel.init(MEM_UPPER, BASE)
    return kernel


def test_init_places_frames_after_core_map(allocator):
    assert allocator.initialized
    frames = allocator.frame_allocator
    assert frames.start > BASE
    assert frames.start % PAGE_FRAME_SIZE == 0
    assert frames.num_allocated() == 0


def test_first_frame_follows_core_map(allocator):
    address = allocator.frame_alloc(1)
    assert address == BASE + PAGE_FRAME_SIZE
    assert allocator.frame_allocator.num_allocated() == 1


def test_frame_alloc_and_dealloc_round_trip(allocator):
    address = allocator.frame_alloc(3)
    assert allocator.frame_allocator.num_allocated() == 3
    allocator.frame_dealloc(address)
    assert allocator.frame_allocator.num_allocated() == 0


def test_small_allocations_are_distinct_and_in_range(allocator):
    first = allocator.alloc(8, 8)
    second = allocator.alloc(8, 8)
    assert first != second
    frames = allocator.frame_allocator
    for address in (first, second):
        assert frames.start <= address < frames.start + frames.size
        assert address % 8 == 0


def test_large_allocation_uses_whole_frames(allocator):
    address = allocator.alloc(5000, 2)
    assert address % PAGE_FRAME_SIZE == 0
    assert allocator.frame_allocator.num_allocated() == 2
    allocator.dealloc(address, 5000, 2)
    assert allocator.frame_allocator.num_allocated() == 0


def test_deinit_after_balanced_use(allocator):
    address = allocator.alloc(32, 4)
    allocator.dealloc(address, 32, 4)
    allocator.deinit()
    assert not allocator.initialized


def test_deinit_detects_leaks(allocator):
    allocator.alloc(32, 4)
    with pytest.raises(KernelAllocatorError):
        allocator.deinit()
    assert allocator.initialized


def test_alignment_larger_than_page_is_rejected(allocator):
    with pytest.raises(AllocError):
        allocator.alloc(8, MAX_SUPPORTED_ALIGN * 2)


def test_alloc_before_init_fails():
    with pytest.raises(KernelAllocatorError):
        KernelAllocator().alloc(8, 8)


def test_frame_alloc_before_init_fails():
    with pytest.raises(AllocError):
        KernelAllocator().frame_alloc(1)


def test_frame_dealloc_before_init_fails():
    with pytest.raises(KernelAllocatorError):
        KernelAllocator().frame_dealloc(BASE)


def test_deinit_before_init_fails():
    with pytest.raises(KernelAllocatorError):
        KernelAllocator().deinit()


def test_dealloc_before_init_fails():
    with pytest.raises(KernelAllocatorError):
        KernelAllocator().dealloc(BASE, 8, 8)


def test_init_twice_fails(allocator):
    with pytest.raises(KernelAllocatorError):
        allocator.init(MEM_UPPER, BASE)


def test_base_above_memory_is_rejected():
    with pytest.raises(ValueError):
        KernelAllocator().init(1, 8 * MB)


def test_frames_run_out(allocator):
    frames = allocator.frame_allocator
    allocator.frame_alloc(len(frames.core_map))
    with pytest.raises(AllocError):
        allocator.frame_alloc(1)