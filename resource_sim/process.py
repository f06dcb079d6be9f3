from enum import Enum

from .workload import read_field, read_pid, to_int


class ProcessState(Enum):
    NEW = "NEW"
    READY = "READY"
    RUNNING = "RUNNING"
    TERMINATED = "TERMINATED"


class Process:
    def __init__(self, pid, arrival_time=0, burst_time=1, priority=0):
        self.pid = pid
        self.arrival_time = arrival_time
        self.burst_time = burst_time
        self.remaining_time = burst_time
        self.priority = priority
        self.completion_time = None
        self.waiting_time = None
        self.turnaround_time = None
        self.state = ProcessState.NEW
        self.state_flow = []

    def __repr__(self):
        return (f"Process(pid={self.pid}, state={self.state.value}, "
                f"remaining={self.remaining_time}/{self.burst_time}, priority={self.priority})")

    @classmethod
    def from_spec(cls, spec, index=0):
        """Build a pristine process from a dict or object, coercing bad numbers."""
        return cls(
            pid=read_pid(spec, index),
            arrival_time=to_int(read_field(spec, 'arrival_time', 'arrivalTime'), 0, minimum=0),
            burst_time=to_int(read_field(spec, 'burst_time', 'burstTime'), 1, minimum=1),
            priority=to_int(read_field(spec, 'priority'), 0),
        )

    def clone(self):
        return Process(self.pid, self.arrival_time, self.burst_time, self.priority)

    def record_state(self, new_state, time, note=None):
        self.state = new_state
        self.state_flow.append({
            'time': time,
            'state': new_state.value,
            'note': note
        })

    def finalize(self):
        if self.completion_time is None:
            return False
        self.turnaround_time = self.completion_time - self.arrival_time
        self.waiting_time = self.turnaround_time - self.burst_time
        return True

    def as_dict(self):
        return {
            'pid': self.pid,
            'arrival_time': self.arrival_time,
            'burst_time': self.burst_time,
            'remaining_time': self.remaining_time,
            'priority': self.priority,
            'state': self.state.value,
            'completion_time': self.completion_time,
            'waiting_time': self.waiting_time,
            'turnaround_time': self.turnaround_time,
        }

    def ready_view(self):
        return {
            'pid': self.pid,
            'arrival_time': self.arrival_time,
            'burst_time': self.burst_time,
            'remaining_time': self.remaining_time,
            'priority': self.priority,
        }
