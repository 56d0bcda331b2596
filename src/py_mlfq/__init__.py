"""py-mlfq — a multilevel feedback queue CPU scheduling simulator.

Re-exports the most used symbols so callers can write::

    from py_mlfq import MLFQConfig, Process, Simulator
"""

from py_mlfq.config import MLFQConfig
from py_mlfq.process import InvariantViolationError, MLFQScheduler, Process, ProcessState
from py_mlfq.simulator import ProcessStats, SimulationResult, Simulator
from py_mlfq.trace import TraceEvent, TraceLog, TraceOutcome
from py_mlfq.workload import JobSpec, WorkloadError

__version__ = "0.1.0"

__all__ = [
    "InvariantViolationError",
    "JobSpec",
    "MLFQConfig",
    "MLFQScheduler",
    "Process",
    "ProcessState",
    "ProcessStats",
    "SimulationResult",
    "Simulator",
    "TraceEvent",
    "TraceLog",
    "TraceOutcome",
    "WorkloadError",
]
