"""Multilevel Feedback Queue (MLFQ) scheduling policy.

MLFQ keeps one FIFO ready queue per priority level.  It always runs a
process from the highest non-empty level (level 0 first) and learns
from behaviour instead of needing to know job lengths up front:

- New processes start at level 0.
- Each level grants a fixed *allotment* of CPU time.  The execution
  engine drains a process's allotment as it runs; once it reaches zero
  the process is demoted one level and given that level's allotment.
- A process that blocks for I/O keeps its level (and its remaining
  allotment), so interactive jobs stay near the top.
- A periodic *boost* moves everyone back to level 0 so long-running
  jobs cannot starve.

The policy only decides *who* runs and with *what quantum*.  The
simulator owns the clock and decides *when* blocked processes return.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from py_mlfq.logging import Logger, LogLevel

if TYPE_CHECKING:
    from py_mlfq.config import MLFQConfig
    from py_mlfq.process.pcb import Process

_SOURCE = "mlfq"


class MLFQScheduler:
    """Ready queues, levels, and allotments for every tracked process.

    Levels are tracked in a PID → level dict so that blocked processes
    (which live outside the ready queues) keep their level while away.
    """

    def __init__(self, config: MLFQConfig, *, logger: Logger | None = None) -> None:
        """Create an empty scheduler.

        Args:
            config: Queue count, quanta, allotments, and I/O bump setting.
            logger: Optional log receiving demotion and boost events.

        """
        self._config = config
        self._queues: list[deque[Process]] = [deque() for _ in range(config.num_queues)]
        self._levels: dict[int, int] = {}
        self._blocked: dict[int, Process] = {}
        self._logger = logger if logger is not None else Logger()
        self._demotions = 0
        self._boosts = 0

    @property
    def config(self) -> MLFQConfig:
        """Return the scheduler configuration."""
        return self._config

    @property
    def ready_count(self) -> int:
        """Return the number of processes waiting in any ready queue."""
        return sum(len(q) for q in self._queues)

    @property
    def blocked_processes(self) -> list[Process]:
        """Return the processes currently parked on I/O."""
        return list(self._blocked.values())

    @property
    def demotions(self) -> int:
        """Return how many demotions have happened."""
        return self._demotions

    @property
    def boosts(self) -> int:
        """Return how many priority boosts have happened."""
        return self._boosts

    def level(self, *, pid: int) -> int:
        """Return the current level for *pid*.

        Raises:
            KeyError: If the process was never admitted.

        """
        return self._levels[pid]

    def quantum_for(self, level: int) -> int:
        """Return the time quantum granted at *level*."""
        return self._config.quantum(level)

    def queue_snapshot(self, level: int) -> list[Process]:
        """Return the processes waiting at *level*, front first."""
        return list(self._queues[level])

    def admit(self, process: Process, *, time: int = 0) -> None:
        """Add a newly arrived process at the top level.

        Raises:
            ValueError: If the PID is already tracked.

        """
        if process.pid in self._levels:
            msg = f"Process {process.pid} is already scheduled"
            raise ValueError(msg)
        self._levels[process.pid] = 0
        process.set_allotment(self._config.allotment(0))
        self._queues[0].append(process)
        self._logger.log(LogLevel.INFO, f"admitted process {process.pid}", source=_SOURCE, time=time)

    def select(self) -> tuple[Process, int] | None:
        """Remove and return the next process with its level, or None."""
        for level, queue in enumerate(self._queues):
            if queue:
                return queue.popleft(), level
        return None

    def requeue(self, process: Process, *, time: int = 0) -> None:
        """Put a process back after it has been dispatched.

        Finished processes are forgotten.  A process whose allotment is
        used up is demoted (even if it just blocked).  Blocked processes
        are parked until ``wake()``; everyone else goes to the back of
        their level.
        """
        if process.is_finished():
            del self._levels[process.pid]
            self._logger.log(
                LogLevel.DEBUG, f"process {process.pid} finished", source=_SOURCE, time=time
            )
            return

        level = self._levels[process.pid]
        if process.allotment == 0:
            level = min(level + 1, self._config.num_queues - 1)
            self._levels[process.pid] = level
            process.set_allotment(self._config.allotment(level))
            self._demotions += 1
            self._logger.log(
                LogLevel.INFO,
                f"process {process.pid} demoted to queue {level}",
                source=_SOURCE,
                time=time,
            )

        if process.is_blocked():
            self._blocked[process.pid] = process
        else:
            self._queues[level].append(process)

    def wake(self, process: Process, *, time: int = 0) -> None:
        """Return a process from I/O to its level's ready queue.

        With ``io_bump`` enabled it jumps to the front of the queue.

        Raises:
            ValueError: If the process is not parked on I/O.

        """
        if self._blocked.pop(process.pid, None) is None:
            msg = f"Process {process.pid} is not waiting on I/O"
            raise ValueError(msg)
        queue = self._queues[self._levels[process.pid]]
        if self._config.io_bump:
            queue.appendleft(process)
        else:
            queue.append(process)
        self._logger.log(
            LogLevel.DEBUG, f"process {process.pid} finished I/O", source=_SOURCE, time=time
        )

    def boost(self, *, time: int = 0) -> None:
        """Move every tracked process to level 0 with a fresh allotment.

        Ready processes keep their relative order (higher levels first).
        Blocked processes stay parked but will return to level 0.
        """
        top = self._config.allotment(0)
        merged: deque[Process] = deque()
        for queue in self._queues:
            merged.extend(queue)
            queue.clear()
        self._queues[0] = merged
        for pid in self._levels:
            self._levels[pid] = 0
        for process in merged:
            process.set_allotment(top)
        for process in self._blocked.values():
            process.set_allotment(top)
        self._boosts += 1
        self._logger.log(LogLevel.INFO, "priority boost", source=_SOURCE, time=time)
