import pytest

from resource_sim.policies import SchedulingAlgorithm
from resource_sim.workbench import Workbench


def test_defaults_build_engines_lazily():
    bench = Workbench()
    assert bench.cpu.algorithm is SchedulingAlgorithm.FCFS
    assert bench.cpu is bench.cpu
    assert bench.memory.initial_holes == [100, 500, 200, 300]
    assert bench.paging.frame_count == 3


def test_policy_change_rebuilds_engine():
    bench = Workbench()
    old = bench.cpu
    old.run_to_end()
    ok, message = bench.set_cpu_policy('rr', quantum=3)
    assert ok
    assert 'RR' in message
    assert bench.cpu is not old
    assert bench.cpu.quantum == 3
    assert bench.cpu.time == 0


def test_unknown_policy_raises():
    bench = Workbench()
    with pytest.raises(ValueError):
        bench.set_paging_policy('CLOCK')


def test_workload_editing():
    bench = Workbench()
    ok, _ = bench.add_process('P4', 3, 2, 1)
    assert ok
    ok, message = bench.add_process('P4', 0, 1)
    assert not ok
    assert 'already exists' in message
    assert len(bench.cpu.processes) == 4

    bench.clear_processes()
    assert bench.cpu.is_done()

    bench.clear_memory_requests()
    bench.add_memory_request('X', 600)
    bench.memory.run_to_end()
    assert bench.memory.requests[0].status.value == 'FAILED'

    ok, message = bench.set_frame_count(2)
    assert message == '3 frames'


def test_session_timeline_records_changes():
    bench = Workbench()
    bench.set_memory_policy('BEST_FIT')
    bench.set_allocation_unit(8)
    events = bench.get_timeline()
    assert [e['category'] for e in events] == ['MEMORY', 'MEMORY']
    assert bench.get_timeline(1)[0]['message'] == 'Allocation unit set to 8'
