"""Demand paging over a fixed set of frames.

Every process gets its own page table; the reference stream interleaves the
processes round robin. Replacement policies only pick victims: loading,
eviction and page table bookkeeping stay in :class:`PagingEngine`.
"""

import copy
import logging
import math
from bisect import bisect_left
from collections import deque
from dataclasses import asdict, dataclass
from enum import Enum

from .timeline import EventLog
from .workload import parse_reference_string, read_field, read_pid, to_int


logger = logging.getLogger(__name__)

MIN_FRAMES = 3
DEFAULT_FRAMES = 6
LOG_CAPACITY = 12


class PagingAlgorithm(Enum):
    FIFO = "FIFO"
    LRU = "LRU"
    OPTIMAL = "OPTIMAL"


@dataclass
class Frame:
    frame_id: int
    is_free: bool = True
    page_id: int = None
    process_id: str = None


class ReplacementPolicy:
    def on_load(self, frame):
        pass

    def on_hit(self, frame):
        pass

    def on_evict(self, frame):
        pass

    def select_victim(self, occupied, references, cursor):
        raise NotImplementedError


class FifoReplacement(ReplacementPolicy):
    """Evict in load order; hits do not refresh a page."""

    def __init__(self):
        self.load_order = deque()

    def on_load(self, frame):
        self.load_order.append(frame.frame_id)

    def on_evict(self, frame):
        if frame.frame_id in self.load_order:
            self.load_order.remove(frame.frame_id)

    def select_victim(self, occupied, references, cursor):
        by_id = {frame.frame_id: frame for frame in occupied}
        for frame_id in self.load_order:
            if frame_id in by_id:
                return by_id[frame_id]
        return occupied[0]


class LruReplacement(ReplacementPolicy):
    def __init__(self):
        self.clock = 0
        self.last_used = {}

    def _touch(self, frame):
        self.clock += 1
        self.last_used[frame.frame_id] = self.clock

    on_load = _touch
    on_hit = _touch

    def on_evict(self, frame):
        self.last_used.pop(frame.frame_id, None)

    def select_victim(self, occupied, references, cursor):
        return min(occupied, key=lambda frame: (self.last_used.get(frame.frame_id, 0), frame.frame_id))


class OptimalReplacement(ReplacementPolicy):
    """Belady's clairvoyant policy, looking ahead from ``cursor``.

    The queue positions of every (pid, page) pair are indexed on first use,
    so each lookahead is a binary search instead of a scan.
    """

    def __init__(self):
        self._positions = None

    def _positions_for(self, references):
        if self._positions is None:
            self._positions = {}
            for index, reference in enumerate(references):
                self._positions.setdefault(reference, []).append(index)
        return self._positions

    def next_use(self, frame, references, cursor):
        positions = self._positions_for(references).get((frame.process_id, frame.page_id), [])
        found = bisect_left(positions, cursor)
        return positions[found] if found < len(positions) else None

    def select_victim(self, occupied, references, cursor):
        victim = None
        farthest = -1
        for frame in sorted(occupied, key=lambda f: f.frame_id):
            distance = self.next_use(frame, references, cursor)
            if distance is None:
                return frame
            if distance > farthest:
                farthest = distance
                victim = frame
        return victim


REPLACEMENT_POLICIES = {
    PagingAlgorithm.FIFO: FifoReplacement,
    PagingAlgorithm.LRU: LruReplacement,
    PagingAlgorithm.OPTIMAL: OptimalReplacement,
}


def resolve_algorithm(algorithm):
    if isinstance(algorithm, PagingAlgorithm):
        return algorithm
    try:
        return PagingAlgorithm(str(algorithm).strip().upper())
    except ValueError:
        msg = f"unknown paging algorithm: {algorithm!r}"
        raise ValueError(msg) from None


def normalize_processes(processes):
    if not processes:
        return [{'pid': 'P1', 'total_pages': 4, 'reference_string': [0]}]
    normalized = []
    for index, process in enumerate(processes):
        pid = read_pid(process, index).upper()
        total_pages = to_int(read_field(process, 'total_pages', 'totalPages'), 1, minimum=1)
        references = parse_reference_string(
            read_field(process, 'reference_string', 'referenceString', default=''), total_pages)
        normalized.append({'pid': pid, 'total_pages': total_pages, 'reference_string': references})
    return normalized


def build_reference_queue(processes):
    queue = []
    longest = max(len(process['reference_string']) for process in processes)
    for position in range(longest):
        for process in processes:
            if position < len(process['reference_string']):
                queue.append((process['pid'], process['reference_string'][position]))
    return queue or [(processes[0]['pid'], 0)]


class PagingEngine:
    def __init__(self, processes, algorithm=PagingAlgorithm.FIFO, frame_count=DEFAULT_FRAMES):
        self.algorithm = resolve_algorithm(algorithm)
        self.frame_count = max(MIN_FRAMES, to_int(frame_count, DEFAULT_FRAMES))
        self.processes = normalize_processes(processes)
        self.reference_queue = build_reference_queue(self.processes)
        self.logs = EventLog(capacity=LOG_CAPACITY)
        self.reset()

    def reset(self):
        self.frames = [Frame(frame_id=index) for index in range(self.frame_count)]
        self.page_tables = {}
        for process in self.processes:
            size = max(process['total_pages'], len(self.page_tables.get(process['pid'], [])))
            self.page_tables[process['pid']] = [None] * size
        self.replacement = REPLACEMENT_POLICIES[self.algorithm]()
        self.current_index = 0
        self.page_faults = 0
        self.page_hits = 0
        self.last_access = None
        self.logs.clear()

    def is_done(self):
        return self.current_index >= len(self.reference_queue)

    def _log(self, message, kind):
        self.logs.append(message=message, type=kind)

    def _find_free_frame(self):
        for frame in self.frames:
            if frame.is_free:
                return frame
        return None

    def _evict(self, frame):
        self.page_tables[frame.process_id][frame.page_id] = None
        self.replacement.on_evict(frame)
        self._log(f"Evicted page {frame.page_id} of {frame.process_id} from Frame {frame.frame_id} "
                  f"using {self.algorithm.value}", 'evict')
        evicted = {'pid': frame.process_id, 'page': frame.page_id}
        frame.is_free = True
        frame.page_id = None
        frame.process_id = None
        return evicted

    def _load(self, pid, page, frame):
        frame.is_free = False
        frame.process_id = pid
        frame.page_id = page
        self.page_tables[pid][page] = frame.frame_id
        self.replacement.on_load(frame)
        self._log(f"Loaded page {page} of {pid} into Frame {frame.frame_id}", 'load')

    def _advance(self):
        if self.is_done():
            return
        pid, page = self.reference_queue[self.current_index]
        self.current_index += 1

        cached = self.page_tables[pid][page]
        if cached is not None:
            self.page_hits += 1
            self.replacement.on_hit(self.frames[cached])
            self._log(f"Page {page} accessed for {pid} -> Hit (Frame {cached})", 'hit')
            self.last_access = {'pid': pid, 'page': page, 'hit': True, 'frame': cached, 'evicted': None}
            return

        self.page_faults += 1
        self._log(f"Page {page} accessed for {pid} -> Fault", 'fault')
        evicted = None
        frame = self._find_free_frame()
        if frame is None:
            occupied = [f for f in self.frames if not f.is_free]
            frame = self.replacement.select_victim(occupied, self.reference_queue, self.current_index)
            evicted = self._evict(frame)
            logger.debug("%s evicted %s page %s from frame %d", self.algorithm.value,
                         evicted['pid'], evicted['page'], frame.frame_id)
        self._load(pid, page, frame)
        self.last_access = {'pid': pid, 'page': page, 'hit': False, 'frame': frame.frame_id, 'evicted': evicted}

    def step(self):
        self._advance()
        return self.get_snapshot()

    def run_to_end(self):
        while not self.is_done():
            self._advance()
        return self.get_metrics()

    def get_metrics(self):
        total = min(self.current_index, len(self.reference_queue))
        rate = math.floor(self.page_faults * 100 / total + 0.5) if total else 0
        return {
            'total_references': total,
            'page_faults': self.page_faults,
            'page_hits': self.page_hits,
            'page_fault_rate': rate,
            'frames_used': sum(1 for frame in self.frames if not frame.is_free),
            'frame_count': self.frame_count,
        }

    def get_snapshot(self):
        current = None
        if self.current_index > 0:
            current = self.reference_queue[min(self.current_index, len(self.reference_queue)) - 1]
        upcoming = None
        if not self.is_done():
            upcoming = self.reference_queue[self.current_index]
        return {
            'algorithm': self.algorithm.value,
            'frames': [asdict(frame) for frame in self.frames],
            'page_tables': {pid: list(entries) for pid, entries in self.page_tables.items()},
            'logs': self.logs.records(),
            'metrics': self.get_metrics(),
            'current_reference': {'pid': current[0], 'page': current[1]} if current else None,
            'next_reference': {'pid': upcoming[0], 'page': upcoming[1]} if upcoming else None,
            'reference_queue': [{'pid': pid, 'page': page} for pid, page in self.reference_queue],
            'current_index': self.current_index,
            'last_access': copy.deepcopy(self.last_access),
            'done': self.is_done(),
        }
