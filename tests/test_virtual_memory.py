import random
import time

import pytest

from resource_sim.comparison import compare_paging
from resource_sim.virtual_memory import LOG_CAPACITY, PagingAlgorithm, PagingEngine, build_reference_queue


def single(references, total_pages=8, pid='P1'):
    return [{'pid': pid, 'total_pages': total_pages, 'reference_string': references}]


def run(references, algorithm, frames=3, total_pages=8):
    engine = PagingEngine(single(references, total_pages), algorithm, frame_count=frames)
    return engine, engine.run_to_end()


def test_fifo_evicts_the_earliest_loaded_page():
    engine = PagingEngine(single([0, 1, 2, 3], total_pages=4), 'FIFO', frame_count=3)
    for _ in range(3):
        engine.step()
    snapshot = engine.step()

    assert snapshot['metrics']['page_faults'] == 4
    assert snapshot['metrics']['page_hits'] == 0
    assert snapshot['last_access'] == {'pid': 'P1', 'page': 3, 'hit': False, 'frame': 0,
                                       'evicted': {'pid': 'P1', 'page': 0}}
    assert snapshot['frames'][0] == {'frame_id': 0, 'is_free': False, 'page_id': 3, 'process_id': 'P1'}
    assert snapshot['page_tables']['P1'] == [None, 1, 2, 0]


def test_fifo_ignores_hits_but_lru_does_not():
    fifo, _ = run([0, 1, 2, 0, 3], 'FIFO')
    lru, _ = run([0, 1, 2, 0, 3], 'LRU')
    assert fifo.last_access['evicted'] == {'pid': 'P1', 'page': 0}
    assert lru.last_access['evicted'] == {'pid': 'P1', 'page': 1}
    assert fifo.get_metrics()['page_hits'] == lru.get_metrics()['page_hits'] == 1


def test_optimal_evicts_page_used_farthest_in_future():
    engine, metrics = run([0, 1, 2, 3, 0, 1], 'OPTIMAL')
    assert metrics['page_faults'] == 4
    assert metrics['page_hits'] == 2
    assert engine.page_tables['P1'][2] is None


def test_optimal_never_used_again_picks_lowest_frame():
    engine, _ = run([0, 1, 2, 3], 'OPTIMAL')
    assert engine.last_access['frame'] == 0
    assert engine.last_access['evicted'] == {'pid': 'P1', 'page': 0}


def test_optimal_farthest_use_example():
    engine = PagingEngine(single([7, 0, 1, 2, 0, 3, 0, 4, 2, 3, 0, 3, 2], total_pages=8), 'OPTIMAL',
                          frame_count=3)
    for _ in range(4):
        snapshot = engine.step()
    # 7 is never referenced again
    assert snapshot['last_access']['evicted'] == {'pid': 'P1', 'page': 7}
    for _ in range(2):
        snapshot = engine.step()
    # 1 is never referenced again; 0 and 2 are
    assert snapshot['last_access']['evicted'] == {'pid': 'P1', 'page': 1}


STREAMS = [
    [7, 0, 1, 2, 0, 3, 0, 4, 2, 3, 0, 3, 2, 1, 2, 0, 1, 7, 0, 1],
    [1, 2, 3, 4, 1, 2, 5, 1, 2, 3, 4, 5],
    [0, 1, 2, 3, 4, 5, 6, 7, 0, 1, 2, 3],
    [0, 0, 0, 1, 1, 2],
]


@pytest.mark.parametrize('stream', STREAMS)
@pytest.mark.parametrize('frames', [3, 4, 5])
def test_optimal_never_faults_more_than_fifo_or_lru(stream, frames):
    faults = {}
    for algorithm in PagingAlgorithm:
        _, metrics = run(stream, algorithm, frames=frames)
        faults[algorithm] = metrics['page_faults']
    assert faults[PagingAlgorithm.OPTIMAL] <= faults[PagingAlgorithm.FIFO]
    assert faults[PagingAlgorithm.OPTIMAL] <= faults[PagingAlgorithm.LRU]


def test_optimal_bound_holds_for_random_multi_process_streams():
    rng = random.Random(7)
    for _ in range(20):
        processes = [
            {'pid': f"P{i}", 'total_pages': 5, 'reference_string': [rng.randrange(5) for _ in range(15)]}
            for i in range(3)
        ]
        rows = {row['algorithm']: row['page_faults'] for row in compare_paging(processes, frame_counts=(4,))}
        assert rows['OPTIMAL'] <= rows['FIFO']
        assert rows['OPTIMAL'] <= rows['LRU']


def test_fifo_shows_beladys_anomaly():
    stream = [1, 2, 3, 4, 1, 2, 5, 1, 2, 3, 4, 5]
    _, three = run(stream, 'FIFO', frames=3)
    _, four = run(stream, 'FIFO', frames=4)
    assert three['page_faults'] == 9
    assert four['page_faults'] == 10


def test_reference_stream_interleaves_processes():
    engine = PagingEngine([
        {'pid': 'a', 'total_pages': 4, 'reference_string': [0, 1, 3]},
        {'pid': 'b', 'total_pages': 4, 'reference_string': '2'},
    ], 'FIFO')
    assert engine.get_snapshot()['reference_queue'] == [
        {'pid': 'A', 'page': 0}, {'pid': 'B', 'page': 2}, {'pid': 'A', 'page': 1}, {'pid': 'A', 'page': 3},
    ]


def test_build_reference_queue_order():
    queue = build_reference_queue([
        {'pid': 'P1', 'reference_string': [0, 1]},
        {'pid': 'P2', 'reference_string': [5, 6, 7]},
    ])
    assert queue == [('P1', 0), ('P2', 5), ('P1', 1), ('P2', 6), ('P2', 7)]


def test_reference_pages_are_clamped_and_parsed():
    engine = PagingEngine(single("0, 5 -2 x 1.0", total_pages=3), 'LRU')
    assert engine.processes[0]['reference_string'] == [0, 2, 0, 1]


def test_degenerate_inputs_get_safe_defaults():
    engine = PagingEngine([], 'LRU', frame_count=1)
    assert engine.frame_count == 3
    assert engine.reference_queue == [('P1', 0)]

    blank = PagingEngine([{'pid': 'p9', 'total_pages': 'many', 'reference_string': ''}], 'FIFO',
                         frame_count='lots')
    assert blank.frame_count == 6
    assert blank.processes == [{'pid': 'P9', 'total_pages': 1, 'reference_string': [0]}]


def test_fault_rate_is_integer_percent():
    _, metrics = run([0, 0, 0], 'FIFO')
    assert metrics['page_fault_rate'] == 33
    _, metrics = run([0, 1, 1], 'FIFO')
    assert metrics['page_fault_rate'] == 67
    engine = PagingEngine(single([0, 1]), 'FIFO')
    assert engine.get_metrics()['page_fault_rate'] == 0


def test_frames_and_page_tables_stay_consistent():
    engine = PagingEngine([
        {'pid': 'P1', 'total_pages': 6, 'reference_string': [0, 1, 2, 3, 4, 5, 0, 1]},
        {'pid': 'P2', 'total_pages': 4, 'reference_string': [3, 2, 1, 0, 3, 2]},
    ], 'LRU', frame_count=4)
    while not engine.is_done():
        snapshot = engine.step()
        mapped = [frame for table in snapshot['page_tables'].values() for frame in table if frame is not None]
        assert len(mapped) == len(set(mapped))
        assert snapshot['metrics']['frames_used'] <= snapshot['metrics']['frame_count']
        for frame in snapshot['frames']:
            if not frame['is_free']:
                assert snapshot['page_tables'][frame['process_id']][frame['page_id']] == frame['frame_id']
    assert snapshot['metrics']['total_references'] == 14
    assert snapshot['metrics']['page_faults'] + snapshot['metrics']['page_hits'] == 14


def test_log_keeps_only_the_newest_records():
    engine = PagingEngine(single(list(range(8)) * 2), 'FIFO')
    engine.run_to_end()
    logs = engine.get_snapshot()['logs']
    assert len(logs) == LOG_CAPACITY
    steps = [record['step'] for record in logs]
    assert steps == sorted(steps)
    assert steps[0] > 1


def test_reset_rewinds_the_stream():
    engine = PagingEngine(single([0, 1, 2, 3, 0]), 'LRU')
    pristine = engine.get_snapshot()
    first = engine.run_to_end()
    engine.reset()
    assert engine.get_snapshot() == pristine
    assert engine.run_to_end() == first


def test_step_when_done_is_a_no_op():
    engine, _ = run([1, 2], 'FIFO')
    before = engine.get_snapshot()
    assert engine.step() == before
    assert before['next_reference'] is None
    assert before['current_reference'] == {'pid': 'P1', 'page': 2}


def test_unknown_algorithm_is_rejected():
    with pytest.raises(ValueError):
        PagingEngine(single([0]), 'CLOCK')


def test_five_thousand_references_run_quickly():
    processes = [
        {'pid': 'P1', 'total_pages': 16, 'reference_string': [(i * 7) % 16 for i in range(2500)]},
        {'pid': 'P2', 'total_pages': 12, 'reference_string': [(i * i) % 12 for i in range(2500)]},
    ]
    faults = {}
    for algorithm in PagingAlgorithm:
        engine = PagingEngine(processes, algorithm, frame_count=6)
        started = time.perf_counter()
        metrics = engine.run_to_end()
        assert time.perf_counter() - started < 10
        assert metrics['total_references'] == 5000
        assert metrics['page_faults'] + metrics['page_hits'] == 5000
        faults[algorithm] = metrics['page_faults']
    assert faults[PagingAlgorithm.OPTIMAL] <= faults[PagingAlgorithm.FIFO]
    assert faults[PagingAlgorithm.OPTIMAL] <= faults[PagingAlgorithm.LRU]


def test_stepping_and_running_agree():
    stream = [7, 0, 1, 2, 0, 3, 0, 4, 2, 3, 0, 3, 2]
    stepped = PagingEngine(single(stream), 'OPTIMAL', frame_count=3)
    while not stepped.is_done():
        stepped.step()
    ran, _ = run(stream, 'OPTIMAL')
    assert stepped.get_snapshot() == ran.get_snapshot()


def test_zero_pid_is_kept():
    engine = PagingEngine([{'pid': 0, 'total_pages': 2, 'reference_string': [1]}], 'FIFO')
    assert engine.processes[0]['pid'] == '0'
    assert engine.reference_queue == [('0', 1)]
