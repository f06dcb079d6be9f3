import pytest

from resource_sim.policies import (
    FcfsPolicy,
    PriorityPolicy,
    RoundRobinPolicy,
    SchedulingAlgorithm,
    SjfPolicy,
    SrtfPolicy,
    get_policy,
)
from resource_sim.process import Process


def make(pid, arrival, burst, priority=0, remaining=None):
    process = Process(pid, arrival, burst, priority)
    if remaining is not None:
        process.remaining_time = remaining
    return process


def test_fcfs_keeps_insertion_order():
    ready = [make('B', 3, 1), make('A', 0, 9)]
    assert FcfsPolicy().select_next(ready).pid == 'B'
    assert [p.pid for p in FcfsPolicy().order(ready)] == ['B', 'A']


def test_sjf_orders_by_burst_then_arrival():
    ready = [make('late', 2, 3), make('early', 1, 3), make('long', 0, 7)]
    assert [p.pid for p in SjfPolicy().order(ready)] == ['early', 'late', 'long']


def test_srtf_preempts_only_on_strictly_shorter_remaining():
    running = make('R', 0, 8, remaining=4)
    policy = SrtfPolicy()
    assert policy.should_preempt(running, [make('X', 1, 4)], 0) is False
    assert policy.should_preempt(running, [make('Y', 1, 3)], 0) is True
    assert policy.should_preempt(running, [], 0) is False


def test_priority_preempts_only_on_strictly_lower_number():
    running = make('R', 0, 5, priority=2)
    policy = PriorityPolicy()
    assert policy.should_preempt(running, [make('same', 1, 1, priority=2)], 0) is False
    assert policy.should_preempt(running, [make('urgent', 1, 1, priority=1)], 0) is True
    assert policy.select_next([make('a', 2, 1, 1), make('b', 1, 1, 1)]).pid == 'b'


def test_round_robin_ignores_other_processes():
    policy = RoundRobinPolicy(quantum=2)
    running = make('R', 0, 10, priority=9)
    urgent = [make('U', 0, 1, priority=0)]
    assert policy.should_preempt(running, urgent, 1) is False
    assert policy.should_preempt(running, [], 2) is True
    assert policy.time_sliced is True


def test_non_preemptive_policies_never_preempt():
    running = make('R', 0, 10, priority=5)
    better = [make('B', 1, 1, priority=0)]
    assert FcfsPolicy().should_preempt(running, better, 100) is False
    assert SjfPolicy().should_preempt(running, better, 100) is False


def test_get_policy_resolves_names():
    assert isinstance(get_policy('srtf'), SrtfPolicy)
    assert get_policy(' rr ', quantum=3).quantum == 3
    assert get_policy(SchedulingAlgorithm.PRIORITY).algorithm is SchedulingAlgorithm.PRIORITY
    with pytest.raises(ValueError):
        get_policy('MLFQ')
