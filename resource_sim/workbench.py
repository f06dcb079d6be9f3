import logging

from . import workload
from .memory import AllocationEngine, resolve_algorithm as resolve_allocation
from .policies import SchedulingAlgorithm, resolve_algorithm as resolve_scheduling
from .scheduler import SchedulingEngine
from .timeline import EventLog
from .virtual_memory import PagingEngine, resolve_algorithm as resolve_paging
from .workload import to_int


logger = logging.getLogger(__name__)


class Workbench:
    """Editable workloads plus one engine per kind, rebuilt whenever an input changes."""

    def __init__(self):
        self.processes = workload.sample_processes()
        self.cpu_algorithm = SchedulingAlgorithm.FCFS
        self.quantum = 2
        self.memory_requests = workload.sample_memory_requests()
        self.holes = workload.sample_holes()
        self.allocation_unit = 1
        self.memory_algorithm = resolve_allocation('FIRST_FIT')
        self.paging_processes = workload.sample_paging_processes()
        self.frame_count = 3
        self.paging_algorithm = resolve_paging('FIFO')
        self.running = True
        self.timeline = EventLog()
        self._cpu = None
        self._memory = None
        self._paging = None

    @property
    def cpu(self):
        if self._cpu is None:
            self._cpu = SchedulingEngine(self.processes, self.cpu_algorithm, quantum=self.quantum)
            logger.debug("built scheduling engine %s (quantum=%d)", self.cpu_algorithm.value, self.quantum)
        return self._cpu

    @property
    def memory(self):
        if self._memory is None:
            self._memory = AllocationEngine(self.memory_requests, self.memory_algorithm,
                                            initial_holes=self.holes, allocation_unit=self.allocation_unit)
            logger.debug("built allocation engine %s", self.memory_algorithm.value)
        return self._memory

    @property
    def paging(self):
        if self._paging is None:
            self._paging = PagingEngine(self.paging_processes, self.paging_algorithm,
                                        frame_count=self.frame_count)
            logger.debug("built paging engine %s with %d frames", self.paging_algorithm.value, self.frame_count)
        return self._paging

    def set_cpu_policy(self, name, quantum=None):
        self.cpu_algorithm = resolve_scheduling(name)
        if quantum is not None:
            self.quantum = to_int(quantum, 1, minimum=1)
        self._cpu = None
        self.log_event("CPU", f"Scheduling policy set to {self.cpu_algorithm.value}",
                       metadata={'quantum': self.quantum})
        return True, f"Policy {self.cpu_algorithm.value} active (quantum={self.quantum})"

    def add_process(self, pid, arrival_time, burst_time, priority=0):
        if any(p['pid'] == pid for p in self.processes):
            return False, f"Process {pid} already exists"
        self.processes.append({'pid': pid, 'arrival_time': arrival_time,
                               'burst_time': burst_time, 'priority': priority})
        self._cpu = None
        self.log_event("CPU", f"Added process {pid}", metadata={'arrival': arrival_time, 'burst': burst_time})
        return True, f"Process {pid} added"

    def clear_processes(self):
        self.processes = []
        self._cpu = None
        self.log_event("CPU", "Process list cleared")

    def set_memory_policy(self, name):
        self.memory_algorithm = resolve_allocation(name)
        self._memory = None
        self.log_event("MEMORY", f"Allocation policy set to {self.memory_algorithm.value}")
        return True, f"Policy {self.memory_algorithm.value} active"

    def set_holes(self, sizes):
        self.holes = list(sizes)
        self._memory = None
        self.log_event("MEMORY", "Initial holes replaced", metadata={'holes': self.holes})
        return True, f"Holes set to {self.memory.initial_holes}"

    def set_allocation_unit(self, unit):
        self.allocation_unit = to_int(unit, 1, minimum=1)
        self._memory = None
        self.log_event("MEMORY", f"Allocation unit set to {self.allocation_unit}")
        return True, f"Allocation unit {self.allocation_unit}"

    def add_memory_request(self, pid, size):
        self.memory_requests.append({'pid': pid, 'size': size})
        self._memory = None
        self.log_event("MEMORY", f"Request {pid} for {size} units queued")
        return True, f"Request {pid} queued"

    def clear_memory_requests(self):
        self.memory_requests = []
        self._memory = None
        self.log_event("MEMORY", "Request list cleared")

    def set_paging_policy(self, name):
        self.paging_algorithm = resolve_paging(name)
        self._paging = None
        self.log_event("PAGING", f"Replacement policy set to {self.paging_algorithm.value}")
        return True, f"Policy {self.paging_algorithm.value} active"

    def set_frame_count(self, count):
        self.frame_count = count
        self._paging = None
        actual = self.paging.frame_count
        self.log_event("PAGING", f"Frame count set to {actual}")
        return True, f"{actual} frames"

    def add_paging_process(self, pid, total_pages, references):
        self.paging_processes.append({'pid': pid, 'total_pages': total_pages, 'reference_string': references})
        self._paging = None
        self.log_event("PAGING", f"Reference string for {pid} added")
        return True, f"Process {pid} added"

    def clear_paging_processes(self):
        self.paging_processes = []
        self._paging = None
        self.log_event("PAGING", "Paging workload cleared")

    def log_event(self, category, message, metadata=None):
        return self.timeline.append(
            category=category.upper(),
            message=message,
            metadata=metadata or {},
        )

    def get_timeline(self, limit=None):
        return self.timeline.latest(limit)
