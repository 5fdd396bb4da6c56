import pytest

from kidneykernel.frame_allocator import PAGE_FRAME_SIZE, FrameAllocator
from kidneykernel.placement import CoreMapEntry, NextFit
from kidneykernel.subblock_allocator import SubblockAllocator, best_subblock_index

NUM_FRAMES = 25
REGION_START = 0x400000


@pytest.fixture
def allocator():
    core_map = [CoreMapEntry() for _ in range(NUM_FRAMES)]
    frames = FrameAllocator(REGION_START, core_map, NextFit())
    return SubblockAllocator(frames)


def test_subblock_allocator(allocator):
    assert allocator.is_empty()

    ptr_16 = allocator.allocate(5, 2)
    assert not allocator.is_empty()
    assert allocator.length_of_list(16) == 255
    assert allocator.frame_allocator.num_allocated() == 1

    ptr_128 = allocator.allocate(97, 2)
    assert allocator.length_of_list(128) == 31
    assert allocator.frame_allocator.num_allocated() == 2

    frame_ptr = allocator.allocate(5000, 2)
    assert allocator.frame_allocator.num_allocated() == 4

    allocator.deallocate(ptr_16, 5, 2)
    allocator.deallocate(ptr_128, 97, 2)
    allocator.deallocate(frame_ptr, 5000, 2)

    assert not allocator.is_empty()
    assert allocator.length_of_list(16) == 256
    assert allocator.length_of_list(128) == 32
    assert allocator.frame_allocator.num_allocated() == 2


def test_best_subblock_index():
    assert best_subblock_index(5, 2) == 0
    assert best_subblock_index(97, 2) == 3
    assert best_subblock_index(1, 64) == 2
    assert best_subblock_index(2048, 1) == 7
    assert best_subblock_index(2049, 1) == 8


def test_subblocks_are_distinct_and_inside_frame(allocator):
    addresses = [allocator.allocate(16, 1) for _ in range(PAGE_FRAME_SIZE // 16)]
    assert len(set(addresses)) == len(addresses)
    frame_start = min(addresses)
    assert all(frame_start <= a < frame_start + PAGE_FRAME_SIZE for a in addresses)
    assert all(a % 16 == 0 for a in addresses)
    assert allocator.frame_allocator.num_allocated() == 1
    allocator.allocate(16, 1)
    assert allocator.frame_allocator.num_allocated() == 2


def test_freed_block_is_reused_first(allocator):
    first = allocator.allocate(30, 1)
    allocator.deallocate(first, 30, 1)
    assert allocator.allocate(30, 1) == first


def test_large_allocation_frees_frames(allocator):
    address = allocator.allocate(3 * PAGE_FRAME_SIZE, 1)
    assert allocator.frame_allocator.num_allocated() == 3
    allocator.deallocate(address, 3 * PAGE_FRAME_SIZE, 1)
    assert allocator.frame_allocator.num_allocated() == 0
    assert allocator.is_empty()


def test_length_of_unknown_size_raises(allocator):
    with pytest.raises(ValueError):
        allocator.length_of_list(24)


def test_deinit_reports_no_leaks(allocator):
    assert allocator.deinit() is True