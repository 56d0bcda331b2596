"""Process subsystem — execution engine and MLFQ scheduling policy.

Re-exports public symbols so callers can write::

    from py_mlfq.process import Process, MLFQScheduler
"""

from py_mlfq.process.pcb import InvariantViolationError, Process, ProcessState
from py_mlfq.process.scheduler import MLFQScheduler

__all__ = [
    "InvariantViolationError",
    "MLFQScheduler",
    "Process",
    "ProcessState",
]
