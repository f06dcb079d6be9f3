import logging
from dataclasses import asdict, dataclass
from enum import Enum

from .timeline import EventLog
from .workload import read_field, read_pid, sample_holes, to_int


logger = logging.getLogger(__name__)


class AllocationAlgorithm(Enum):
    FIRST_FIT = "FIRST_FIT"
    BEST_FIT = "BEST_FIT"
    WORST_FIT = "WORST_FIT"


class RequestStatus(Enum):
    PENDING = "PENDING"
    ALLOCATED = "ALLOCATED"
    FAILED = "FAILED"


ALGORITHM_LABELS = {
    AllocationAlgorithm.FIRST_FIT: 'First Fit',
    AllocationAlgorithm.BEST_FIT: 'Best Fit',
    AllocationAlgorithm.WORST_FIT: 'Worst Fit',
}


@dataclass
class Segment:
    start: int
    size: int
    free: bool = True
    process_id: str = None
    requested_size: int = None


@dataclass
class MemoryRequest:
    pid: str
    size: int
    status: RequestStatus = RequestStatus.PENDING
    allocation: dict = None
    reason: str = None

    def as_dict(self):
        return {
            'pid': self.pid,
            'size': self.size,
            'status': self.status.value,
            'allocation': dict(self.allocation) if self.allocation else None,
            'reason': self.reason,
        }


def align_up(value, unit):
    return -(-value // unit) * unit


def resolve_algorithm(algorithm):
    if isinstance(algorithm, AllocationAlgorithm):
        return algorithm
    name = str(algorithm).strip().upper().replace('-', '_').replace(' ', '_')
    try:
        return AllocationAlgorithm(name)
    except ValueError:
        msg = f"unknown allocation algorithm: {algorithm!r}"
        raise ValueError(msg) from None


class AllocationEngine:
    def __init__(self, requests, algorithm, initial_holes=None, allocation_unit=1):
        self.algorithm = resolve_algorithm(algorithm)
        holes = [to_int(size, 0) for size in (initial_holes if initial_holes is not None else sample_holes())]
        holes = [size for size in holes if size > 0]
        self.initial_holes = holes or sample_holes()
        self.memory_size = sum(self.initial_holes)
        self.allocation_unit = to_int(allocation_unit, 1, minimum=1)
        self._original_requests = [
            (read_pid(req, index),
             to_int(read_field(req, 'size'), 1, minimum=1))
            for index, req in enumerate(requests or [])
        ]
        self.logs = EventLog()
        self.reset()

    def reset(self):
        self.requests = [MemoryRequest(pid, size) for pid, size in self._original_requests]
        self.segments = self._build_initial_segments()
        self.current_index = 0
        self.internal_fragmentation = 0
        self.logs.clear()

    def _build_initial_segments(self):
        segments = []
        offset = 0
        for size in self.initial_holes:
            segments.append(Segment(start=offset, size=size))
            offset += size
        return segments

    @property
    def label(self):
        return ALGORITHM_LABELS[self.algorithm]

    def is_done(self):
        return self.current_index >= len(self.requests)

    def find_candidates(self, aligned_size):
        return [segment for segment in self.segments if segment.free and segment.size >= aligned_size]

    def select_hole(self, request):
        aligned = align_up(request.size, self.allocation_unit)
        candidates = self.find_candidates(aligned)
        if not candidates:
            return None, aligned
        # min/max keep the first hit, so ties resolve to the lowest address
        if self.algorithm is AllocationAlgorithm.BEST_FIT:
            chosen = min(candidates, key=lambda segment: segment.size)
        elif self.algorithm is AllocationAlgorithm.WORST_FIT:
            chosen = max(candidates, key=lambda segment: segment.size)
        else:
            chosen = candidates[0]
        return chosen, aligned

    def _allocate(self, request, hole, aligned_size):
        index = next(i for i, segment in enumerate(self.segments) if segment is hole)
        remainder = hole.size - aligned_size
        pieces = [Segment(start=hole.start, size=aligned_size, free=False,
                          process_id=request.pid, requested_size=request.size)]
        if remainder > 0:
            pieces.append(Segment(start=hole.start + aligned_size, size=remainder))
        self.segments[index:index + 1] = pieces

        self.internal_fragmentation += aligned_size - request.size
        request.status = RequestStatus.ALLOCATED
        request.allocation = {'start': hole.start, 'size': aligned_size}

        tail = f"; {remainder} units remain free." if remainder > 0 else "."
        description = (f"{self.label} selected hole at {hole.start} (size {hole.size}). "
                       f"Allocated {aligned_size} units for {request.pid}{tail}")
        self.logs.append(
            pid=request.pid, type=RequestStatus.ALLOCATED.value, description=description,
            hole_start=hole.start, size=aligned_size,
        )

    def _fail(self, request, aligned_size):
        request.status = RequestStatus.FAILED
        request.allocation = None
        request.reason = f"No contiguous hole was large enough for {request.pid} ({aligned_size} units)."
        self.logs.append(
            pid=request.pid, type=RequestStatus.FAILED.value, description=request.reason,
            hole_start=None, size=aligned_size,
        )
        logger.debug("%s: %s", self.label, request.reason)

    def _advance(self):
        if self.is_done():
            return
        request = self.requests[self.current_index]
        hole, aligned_size = self.select_hole(request)
        if hole is None:
            self._fail(request, aligned_size)
        else:
            self._allocate(request, hole, aligned_size)
        self.current_index += 1

    def step(self):
        self._advance()
        return self.get_snapshot()

    def run_to_end(self):
        while not self.is_done():
            self._advance()
        return self.get_metrics()

    def get_metrics(self):
        free = [segment.size for segment in self.segments if segment.free]
        allocated = sum(segment.size for segment in self.segments if not segment.free)
        total_free = sum(free)
        largest_hole = max(free) if free else 0
        return {
            'total_memory': self.memory_size,
            'allocated': allocated,
            'free': total_free,
            'largest_hole': largest_hole,
            'internal_fragmentation': self.internal_fragmentation,
            'external_fragmentation': max(0, total_free - largest_hole),
        }

    def get_snapshot(self):
        current = None
        if not self.is_done():
            current = self.requests[self.current_index].as_dict()
        return {
            'algorithm': self.algorithm.value,
            'allocation_unit': self.allocation_unit,
            'segments': [asdict(segment) for segment in self.segments],
            'requests': [request.as_dict() for request in self.requests],
            'logs': self.logs.records(),
            'metrics': self.get_metrics(),
            'current_request': current,
            'done': self.is_done(),
            'last_event': self.logs.last(),
        }
