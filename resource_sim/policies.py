"""CPU dispatch policies.

Each policy is a small object answering two questions for the engine:
which ready process runs next (``select_next``) and whether the running
process must give up the CPU (``should_preempt``). Ordering ties always
fall back to arrival time and then to ready-queue insertion order.
"""

from abc import ABC, abstractmethod
from enum import Enum


class SchedulingAlgorithm(Enum):
    FCFS = "FCFS"
    SJF = "SJF"
    SRTF = "SRTF"
    PRIORITY = "PRIORITY"
    RR = "RR"


class SchedulingPolicy(ABC):
    algorithm = None
    preemptive = False
    time_sliced = False

    def order(self, ready):
        """Return the ready processes in the order this policy would pick them."""
        return list(ready)

    def select_next(self, ready):
        ordered = self.order(ready)
        return ordered[0] if ordered else None

    def should_preempt(self, running, ready, quantum_counter):
        return False

    @abstractmethod
    def dispatch_reason(self, process):
        """Explain why ``process`` was picked."""

    @abstractmethod
    def dispatch_rule(self):
        """Describe the general dispatch rule."""

    def preempt_reason(self, running, candidate):
        return "A better candidate is available."


class FcfsPolicy(SchedulingPolicy):
    algorithm = SchedulingAlgorithm.FCFS

    def dispatch_reason(self, process):
        return f"{process.pid} arrived first (First Come First Serve)"

    def dispatch_rule(self):
        return "In FCFS, the process that arrived first gets the CPU. Simple queue order."


class _KeyedPolicy(SchedulingPolicy):
    def sort_key(self, process):
        raise NotImplementedError

    def order(self, ready):
        return sorted(ready, key=lambda p: (self.sort_key(p), p.arrival_time))

    def dispatch_rule(self):
        return f"{self.algorithm.value} algorithm chooses the next process based on its policy."


class SjfPolicy(_KeyedPolicy):
    algorithm = SchedulingAlgorithm.SJF

    def sort_key(self, process):
        return process.burst_time

    def dispatch_reason(self, process):
        return f"{process.pid} selected: has shortest burst time ({process.burst_time} units)"


class SrtfPolicy(_KeyedPolicy):
    algorithm = SchedulingAlgorithm.SRTF
    preemptive = True

    def sort_key(self, process):
        return process.remaining_time

    def should_preempt(self, running, ready, quantum_counter):
        best = self.select_next(ready)
        return best is not None and best.remaining_time < running.remaining_time

    def dispatch_reason(self, process):
        return f"{process.pid} selected: has shortest remaining time ({process.remaining_time} units)"

    def preempt_reason(self, running, candidate):
        return (f"{candidate.pid} has a shorter remaining time ({candidate.remaining_time}) than "
                f"{running.pid} ({running.remaining_time}). SRTF always picks the process closest to completion.")


class PriorityPolicy(_KeyedPolicy):
    algorithm = SchedulingAlgorithm.PRIORITY
    preemptive = True

    def sort_key(self, process):
        return process.priority

    def should_preempt(self, running, ready, quantum_counter):
        best = self.select_next(ready)
        return best is not None and best.priority < running.priority

    def dispatch_reason(self, process):
        return f"{process.pid} selected: has highest priority (priority={process.priority}, lower is better)"

    def preempt_reason(self, running, candidate):
        return (f"{candidate.pid} (priority={candidate.priority}) outranks {running.pid} "
                f"(priority={running.priority}). Priority scheduling always runs the lowest number.")


class RoundRobinPolicy(SchedulingPolicy):
    algorithm = SchedulingAlgorithm.RR
    preemptive = True
    time_sliced = True

    def __init__(self, quantum=1):
        self.quantum = quantum

    def should_preempt(self, running, ready, quantum_counter):
        return quantum_counter >= self.quantum

    def dispatch_reason(self, process):
        return f"{process.pid} is first in queue (Round Robin uses FIFO order)"

    def dispatch_rule(self):
        return "In RR, processes take turns in the order they arrived. No priority given to any process."

    def preempt_reason(self, running, candidate):
        return (f"Time quantum of {self.quantum} units expired. In Round Robin, fairness is "
                f"maintained by giving each process equal time.")


POLICIES = {
    SchedulingAlgorithm.FCFS: FcfsPolicy,
    SchedulingAlgorithm.SJF: SjfPolicy,
    SchedulingAlgorithm.SRTF: SrtfPolicy,
    SchedulingAlgorithm.PRIORITY: PriorityPolicy,
    SchedulingAlgorithm.RR: RoundRobinPolicy,
}


def resolve_algorithm(algorithm):
    if isinstance(algorithm, SchedulingAlgorithm):
        return algorithm
    try:
        return SchedulingAlgorithm(str(algorithm).strip().upper())
    except ValueError:
        msg = f"unknown scheduling algorithm: {algorithm!r}"
        raise ValueError(msg) from None


def get_policy(algorithm, quantum=1):
    algorithm = resolve_algorithm(algorithm)
    if algorithm is SchedulingAlgorithm.RR:
        return RoundRobinPolicy(quantum)
    return POLICIES[algorithm]()
