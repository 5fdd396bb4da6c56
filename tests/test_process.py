import pytest

from kidneykernel.process import ProcessControlBlock, ProcessState, ProcessTable


def test_pids_start_at_one_and_increase():
    state = ProcessState()
    assert state.allocate_pid() == 1
    assert state.allocate_pid() == 2


def test_tids_are_independent_of_pids():
    state = ProcessState()
    state.allocate_pid()
    state.allocate_pid()
    assert state.allocate_tid() == 1


def test_pid_overflow():
    state = ProcessState(next_pid=0xFFFF)
    assert state.allocate_pid() == 0xFFFF
    with pytest.raises(OverflowError):
        state.allocate_pid()


def test_tid_overflow():
    state = ProcessState(next_tid=0xFFFF)
    assert state.allocate_tid() == 0xFFFF
    with pytest.raises(OverflowError):
        state.allocate_tid()


def test_allocated_pids_are_unique():
    state = ProcessState()
    pids = [state.allocate_pid() for _ in range(100)]
    assert len(set(pids)) == len(pids)


def test_table_add_get_remove():
    table = ProcessTable()
    pcb = ProcessControlBlock(pid=7, ppid=3)
    assert table.add(pcb) is pcb
    assert table.get(7) is pcb
    assert table.remove(7) is pcb
    assert table.get(7) is None


def test_table_rejects_duplicate_pid():
    table = ProcessTable()
    table.add(ProcessControlBlock(pid=4))
    with pytest.raises(ValueError):
        table.add(ProcessControlBlock(pid=4))
    assert len(table) == 1


def test_remove_missing_returns_none():
    assert ProcessTable().remove(9) is None


def test_pcb_defaults():
    pcb = ProcessControlBlock(pid=1)
    assert pcb.cwd_path == "/"
    assert pcb.child_tids == []
    assert pcb.exit_code is None
    assert len(pcb.vmas) == 0


def test_state_table_holds_created_processes():
    state = ProcessState()
    pid = state.allocate_pid()
    state.table.add(ProcessControlBlock(pid=pid))
    assert state.table.get(pid).pid == pid