from .memory import AllocationAlgorithm, AllocationEngine, RequestStatus
from .policies import SchedulingAlgorithm
from .scheduler import SchedulingEngine
from .virtual_memory import PagingAlgorithm, PagingEngine


def compare_scheduling(processes, quantum=1):
    rows = []
    for algorithm in SchedulingAlgorithm:
        engine = SchedulingEngine(processes, algorithm, quantum=quantum)
        result = engine.run_to_end()
        rows.append({
            'algorithm': algorithm.value,
            'average_waiting': result['averages']['waiting'],
            'average_turnaround': result['averages']['turnaround'],
            'final_clock': result['final_clock'],
            'context_switches': engine.context_switches,
        })
    return rows


def compare_allocation(requests, initial_holes=None, allocation_unit=1):
    rows = []
    for algorithm in AllocationAlgorithm:
        engine = AllocationEngine(requests, algorithm, initial_holes=initial_holes,
                                  allocation_unit=allocation_unit)
        metrics = engine.run_to_end()
        failed = sum(1 for request in engine.requests if request.status is RequestStatus.FAILED)
        rows.append(dict(metrics, algorithm=algorithm.value, failed=failed))
    return rows


def compare_paging(processes, frame_counts=(3,)):
    rows = []
    for frame_count in frame_counts:
        for algorithm in PagingAlgorithm:
            engine = PagingEngine(processes, algorithm, frame_count=frame_count)
            metrics = engine.run_to_end()
            rows.append(dict(metrics, algorithm=algorithm.value))
    return rows
