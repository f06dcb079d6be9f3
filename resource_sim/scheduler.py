"""Discrete-time CPU scheduling engine.

The engine advances a virtual clock one unit per ``step()``. Within a step
the order is fixed: arrivals, preemption check, dispatch, idle or execute,
completion, then the round robin quantum check. Every transition is written
to an unbounded trace with a plain-language explanation.
"""

import logging
from enum import Enum

from .policies import get_policy
from .process import Process, ProcessState
from .timeline import EventLog
from .workload import to_int


logger = logging.getLogger(__name__)

DEFAULT_MAX_TICKS = 10000


class TraceEvent(Enum):
    ARRIVAL = "ARRIVAL"
    DISPATCH = "DISPATCH"
    PREEMPT = "PREEMPT"
    IDLE = "IDLE"
    COMPLETE = "COMPLETE"
    TICK = "TICK"


class SchedulingEngine:
    def __init__(self, processes, algorithm, quantum=1):
        self.quantum = to_int(quantum, 1, minimum=1)
        self.policy = get_policy(algorithm, self.quantum)
        self.algorithm = self.policy.algorithm
        self._original = [Process.from_spec(spec, index) for index, spec in enumerate(processes or [])]
        self.trace = EventLog()
        self.reset()

    def reset(self):
        self.time = 0
        self.ready = []
        self.running = None
        self.completed_count = 0
        self.quantum_counter = 0
        self.context_switches = 0
        self.idle_time = 0
        self.gantt = []
        self._last_dispatched = None
        self.trace.clear()
        self.processes = [process.clone() for process in self._original]
        for process in self.processes:
            process.record_state(ProcessState.NEW, 0, "Created")

    def is_done(self):
        return self.completed_count == len(self.processes)

    def find_process(self, pid):
        for process in self.processes:
            if process.pid == pid:
                return process
        return None

    def get_process_flow(self, pid):
        process = self.find_process(pid)
        if process is None:
            return None
        return [dict(entry) for entry in process.state_flow]

    def _push_trace(self, event, process=None, transitions=None, explanation='', decision=''):
        self.trace.append(
            time=self.time,
            event=event.value,
            pid=process.pid if process else None,
            running=self.running.pid if self.running else None,
            ready=[p.pid for p in self.policy.order(self.ready)],
            transitions=transitions or [],
            explanation=explanation,
            decision=decision,
        )

    def _admit_arrivals(self):
        for process in self.processes:
            if process.state is ProcessState.NEW and process.arrival_time == self.time:
                process.record_state(ProcessState.READY, self.time, "Arrived")
                self.ready.append(process)
                self._push_trace(
                    TraceEvent.ARRIVAL, process,
                    transitions=[f"{process.pid} -> READY"],
                    explanation=(f"{process.pid} has arrived at time {self.time} and moved to the ready "
                                 f"queue. It will now compete for CPU time."),
                    decision=("New processes enter the READY state and join the queue. They wait for "
                              "the scheduler to select them."),
                )

    def _dispatch_next(self):
        chosen = self.policy.select_next(self.ready)
        if chosen is None:
            return False
        self.ready.remove(chosen)
        self.running = chosen
        self.quantum_counter = 0
        if self._last_dispatched is not chosen:
            self.context_switches += 1
        self._last_dispatched = chosen
        chosen.record_state(ProcessState.RUNNING, self.time, "Dispatched")
        self._push_trace(
            TraceEvent.DISPATCH, chosen,
            transitions=[f"{chosen.pid} -> RUNNING"],
            explanation=self.policy.dispatch_reason(chosen),
            decision=self.policy.dispatch_rule(),
        )
        return True

    def _preempt_running(self, reason, candidate=None):
        process = self.running
        explanation = self.policy.preempt_reason(process, candidate)
        process.record_state(ProcessState.READY, self.time, f"Preempted ({reason})")
        self.ready.append(process)
        self.running = None
        self.quantum_counter = 0
        self._push_trace(
            TraceEvent.PREEMPT, process,
            transitions=[f"{process.pid} -> READY ({reason})"],
            explanation=explanation,
            decision=(f"{self.algorithm.value} is a preemptive algorithm. When a better candidate "
                      f"arrives or becomes available, the current process is interrupted."),
        )

    def _extend_gantt(self, pid):
        if self.gantt and self.gantt[-1]['pid'] == pid and self.gantt[-1]['end'] == self.time:
            self.gantt[-1]['end'] += 1
        else:
            self.gantt.append({'pid': pid, 'start': self.time, 'end': self.time + 1})

    def _advance(self):
        if self.is_done():
            return

        self._admit_arrivals()

        if self.running and not self.policy.time_sliced:
            if self.policy.should_preempt(self.running, self.ready, self.quantum_counter):
                self._preempt_running('better candidate', self.policy.select_next(self.ready))

        if not self.running:
            self._dispatch_next()

        if not self.running:
            self._push_trace(
                TraceEvent.IDLE,
                explanation="No processes in ready queue. CPU is idle and waiting for the next process to arrive.",
                decision="When the ready queue is empty, the CPU has nothing to execute. This is wasted CPU time.",
            )
            self.idle_time += 1
            self.time += 1
            return

        process = self.running
        self._extend_gantt(process.pid)
        process.remaining_time -= 1
        self.quantum_counter += 1

        if process.remaining_time == 0:
            process.completion_time = self.time + 1
            self.running = None
            self.completed_count += 1
            self.quantum_counter = 0
            self.time += 1
            process.record_state(ProcessState.TERMINATED, self.time, "Completed")
            self._push_trace(
                TraceEvent.COMPLETE, process,
                transitions=[f"{process.pid} -> TERMINATED"],
                explanation=f"{process.pid} has finished all its work. Completion time = {self.time}",
                decision="When remaining time hits 0, the process is done. It leaves the system and frees the CPU.",
            )
            return

        if self.policy.time_sliced and self.policy.should_preempt(process, self.ready, self.quantum_counter):
            self.time += 1
            # arrivals at the expiry instant queue ahead of the expired process
            self._admit_arrivals()
            self._preempt_running('quantum expired')
            return

        self._push_trace(
            TraceEvent.TICK, process,
            explanation=f"{process.pid} executed for 1 time unit. Remaining time: {process.remaining_time} unit(s).",
            decision="The running process makes progress. Each tick reduces remaining time by 1.",
        )
        self.time += 1

    def step(self):
        self._advance()
        return self.get_snapshot()

    def run_to_end(self, max_ticks=DEFAULT_MAX_TICKS):
        guard = 0
        while not self.is_done() and guard < max_ticks:
            self._advance()
            guard += 1
        if not self.is_done():
            logger.warning("%s run stopped by the %d tick guard at t=%d with %d of %d processes complete",
                           self.algorithm.value, max_ticks, self.time, self.completed_count, len(self.processes))
        return self.finalize_metrics()

    def get_snapshot(self):
        running = None
        if self.running:
            running = {
                'pid': self.running.pid,
                'remaining_time': self.running.remaining_time,
                'burst_time': self.running.burst_time,
            }
        return {
            'time': self.time,
            'algorithm': self.algorithm.value,
            'quantum': self.quantum,
            'running': running,
            'ready': [p.ready_view() for p in self.policy.order(self.ready)],
            'gantt': [dict(segment) for segment in self.gantt],
            'trace': self.trace.records(),
            'processes': [p.as_dict() for p in self.processes],
            'context_switches': self.context_switches,
            'idle_time': self.idle_time,
            'done': self.is_done(),
        }

    def finalize_metrics(self):
        finished = [p for p in self.processes if p.finalize()]
        count = len(finished)
        waiting = sum(p.waiting_time for p in finished)
        turnaround = sum(p.turnaround_time for p in finished)
        return {
            'algorithm': self.algorithm.value,
            'processes': [p.as_dict() for p in self.processes],
            'gantt': [dict(segment) for segment in self.gantt],
            'averages': {
                'waiting': round(waiting / count, 2) if count else 0.0,
                'turnaround': round(turnaround / count, 2) if count else 0.0,
            },
            'final_clock': self.time,
            'trace': self.trace.records(),
            'complete': self.is_done(),
        }
