from .process import ProcessState, Process
from .policies import SchedulingAlgorithm, get_policy
from .scheduler import SchedulingEngine, TraceEvent
from .memory import AllocationAlgorithm, RequestStatus, Segment, MemoryRequest, AllocationEngine
from .virtual_memory import PagingAlgorithm, Frame, PagingEngine
from .timeline import EventLog
from .workbench import Workbench
from .cli import CommandLineInterface
