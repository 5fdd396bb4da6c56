import pytest

from kidneykernel.placement import (
    AllocError,
    BestFit,
    CoreMapEntry,
    FirstFit,
    NextFit,
)


def make_core_map(count):
    return [CoreMapEntry() for _ in range(count)]


def fill_coremap_range(core_map, frames):
    for i in frames:
        assert not core_map[i].allocated
        core_map[i].allocated = True
        core_map[i].next = True


def test_next_fit():
    core_map = make_core_map(16)
    fill_coremap_range(core_map, range(1, 4))
    fill_coremap_range(core_map, range(8, 12))
    fill_coremap_range(core_map, range(14, 16))

    algorithm = NextFit()
    assert algorithm.place(core_map, 4) == range(4, 8)
    fill_coremap_range(core_map, range(4, 8))

    assert algorithm.place(core_map, 1) == range(12, 13)
    fill_coremap_range(core_map, range(12, 13))

    with pytest.raises(AllocError):
        algorithm.place(core_map, 2)


def test_next_fit_wrap_around():
    core_map = make_core_map(16)
    algorithm = NextFit(position=8)
    fill_coremap_range(core_map, range(0, 1))
    with pytest.raises(AllocError):
        algorithm.place(core_map, 16)
    assert algorithm.place(core_map, 15) == range(1, 16)


def test_next_fit_advances_position():
    core_map = make_core_map(8)
    algorithm = NextFit()
    assert algorithm.place(core_map, 3) == range(0, 3)
    assert algorithm.position == 3


def test_first_fit():
    core_map = make_core_map(16)
    fill_coremap_range(core_map, range(2, 4))
    fill_coremap_range(core_map, range(8, 13))
    fill_coremap_range(core_map, range(15, 16))

    algorithm = FirstFit()
    assert algorithm.place(core_map, 4) == range(4, 8)
    fill_coremap_range(core_map, range(4, 8))

    assert algorithm.place(core_map, 2) == range(0, 2)
    fill_coremap_range(core_map, range(0, 2))

    with pytest.raises(AllocError):
        algorithm.place(core_map, 3)


def test_best_fit_first():
    core_map = make_core_map(16)
    fill_coremap_range(core_map, range(2, 4))
    fill_coremap_range(core_map, range(8, 13))
    fill_coremap_range(core_map, range(15, 16))

    algorithm = BestFit()
    assert algorithm.place(core_map, 4) == range(4, 8)
    fill_coremap_range(core_map, range(4, 8))

    assert algorithm.place(core_map, 2) == range(0, 2)
    fill_coremap_range(core_map, range(0, 2))

    with pytest.raises(AllocError):
        algorithm.place(core_map, 4)


def test_best_fit_second():
    core_map = make_core_map(16)
    fill_coremap_range(core_map, range(3, 13))
    fill_coremap_range(core_map, range(15, 16))

    algorithm = BestFit()
    assert algorithm.place(core_map, 2) == range(13, 15)
    fill_coremap_range(core_map, range(13, 15))
    assert all(entry.allocated for entry in core_map[13:15])


@pytest.mark.parametrize("algorithm_cls", [NextFit, FirstFit, BestFit])
def test_full_map_raises(algorithm_cls):
    core_map = make_core_map(4)
    fill_coremap_range(core_map, range(0, 4))
    with pytest.raises(AllocError):
        algorithm_cls().place(core_map, 1)


def test_alloc_error_is_memory_error():
    with pytest.raises(MemoryError):
        FirstFit().place(make_core_map(2), 3)