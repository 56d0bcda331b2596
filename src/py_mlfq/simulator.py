"""Discrete-event MLFQ simulator — the dispatch driver.

The simulator owns the clock.  Each step it:

1. Admits every job whose arrival time has come.
2. Returns every blocked process whose I/O has completed.
3. Applies any priority boosts that fell due.
4. Asks the scheduler for the next process and dispatches it for one
   quantum at the current time.
5. Advances the clock by the CPU time the process actually used and
   hands it back to the scheduler.

When nothing is ready the clock jumps straight to the next arrival or
I/O completion.  The run ends when every process has finished.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from py_mlfq.config import MLFQConfig
from py_mlfq.logging import Logger, LogLevel
from py_mlfq.process.scheduler import MLFQScheduler
from py_mlfq.trace import TraceLog

if TYPE_CHECKING:
    from collections.abc import Sequence

    from py_mlfq.process.pcb import Process
    from py_mlfq.trace import TraceEvent, TraceSink
    from py_mlfq.workload import JobSpec

_SOURCE = "sim"


@dataclass(frozen=True)
class ProcessStats:
    """Final metrics for one process."""

    pid: int
    arrival_time: int
    workload: int
    response_time: int
    turnaround_time: int

    @property
    def completion_time(self) -> int:
        """Return the simulated time the process finished."""
        return self.arrival_time + self.turnaround_time


@dataclass(frozen=True)
class SimulationResult:
    """Everything a finished run produced."""

    stats: tuple[ProcessStats, ...]
    end_time: int
    dispatches: int
    demotions: int
    boosts: int
    trace: tuple[str, ...]

    @property
    def average_response_time(self) -> float:
        """Return the mean response time (0.0 for an empty run)."""
        if not self.stats:
            return 0.0
        return sum(s.response_time for s in self.stats) / len(self.stats)

    @property
    def average_turnaround_time(self) -> float:
        """Return the mean turnaround time (0.0 for an empty run)."""
        if not self.stats:
            return 0.0
        return sum(s.turnaround_time for s in self.stats) / len(self.stats)

    def summary(self) -> str:
        """Return a human-readable table of per-process metrics."""
        lines = ["PID  ARRIVAL  WORK  RESPONSE  TURNAROUND"]
        lines.extend(
            f"{s.pid:<4} {s.arrival_time:<8} {s.workload:<5} "
            f"{s.response_time:<9} {s.turnaround_time}"
            for s in self.stats
        )
        lines.append(
            f"Average response time: {self.average_response_time:.2f}, "
            f"average turnaround time: {self.average_turnaround_time:.2f}"
        )
        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serialisable dictionary."""
        return {
            "stats": [
                {
                    "pid": s.pid,
                    "arrival_time": s.arrival_time,
                    "workload": s.workload,
                    "response_time": s.response_time,
                    "turnaround_time": s.turnaround_time,
                }
                for s in self.stats
            ],
            "end_time": self.end_time,
            "dispatches": self.dispatches,
            "demotions": self.demotions,
            "boosts": self.boosts,
            "average_response_time": self.average_response_time,
            "average_turnaround_time": self.average_turnaround_time,
            "trace": list(self.trace),
        }


class _TraceTee:
    """Forward events to the simulator's own log and an optional extra sink."""

    def __init__(self, log: TraceLog, extra: TraceSink | None) -> None:
        self._log = log
        self._extra = extra

    def record(self, event: TraceEvent) -> None:
        self._log.record(event)
        if self._extra is not None:
            self._extra.record(event)


class Simulator:
    """Drive a set of jobs through an MLFQ scheduler to completion."""

    def __init__(
        self,
        jobs: Sequence[JobSpec],
        config: MLFQConfig | None = None,
        *,
        trace: TraceSink | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create a simulator for *jobs*.

        Args:
            jobs: The workload; PIDs must be unique.
            config: Scheduler settings (defaults to ``MLFQConfig()``).
            trace: Optional extra sink that also receives every trace event.
            logger: Optional log for scheduler and driver events.

        Raises:
            ValueError: If two jobs share a PID.

        """
        pids = [job.pid for job in jobs]
        if len(set(pids)) != len(pids):
            msg = "Job PIDs must be unique"
            raise ValueError(msg)
        self._config = config if config is not None else MLFQConfig()
        self._logger = logger if logger is not None else Logger()
        self._trace_log = TraceLog()
        self._sink = _TraceTee(self._trace_log, trace)
        self._scheduler = MLFQScheduler(self._config, logger=self._logger)
        self._processes: list[Process] = [job.to_process() for job in jobs]
        # Arrival order, ties broken by PID.
        self._pending: list[Process] = sorted(
            self._processes, key=lambda p: (p.start_time, p.pid), reverse=True
        )
        self._clock = 0
        self._dispatches = 0
        self._next_boost = self._config.boost_interval

    @property
    def clock(self) -> int:
        """Return the current simulated time."""
        return self._clock

    @property
    def processes(self) -> list[Process]:
        """Return every process in the run, in job order."""
        return list(self._processes)

    @property
    def scheduler(self) -> MLFQScheduler:
        """Return the scheduling policy."""
        return self._scheduler

    @property
    def trace_log(self) -> TraceLog:
        """Return the trace of every dispatch so far."""
        return self._trace_log

    @property
    def logger(self) -> Logger:
        """Return the driver's event log."""
        return self._logger

    def done(self) -> bool:
        """Return True once every process has finished."""
        return all(p.is_finished() for p in self._processes)

    def run(self) -> SimulationResult:
        """Run until every process finishes and return the results."""
        while not self.done():
            self.step()
        self._logger.log(LogLevel.INFO, "all processes finished", source=_SOURCE, time=self._clock)
        return self.result()

    def step(self) -> int:
        """Perform one dispatch (idling forward first if needed).

        Returns:
            The CPU time consumed by the dispatched process.

        Raises:
            RuntimeError: If nothing can ever run again.

        """
        self._admit_arrivals()
        self._wake_blocked()
        self._apply_boosts()

        picked = self._scheduler.select()
        while picked is None:
            self._idle()
            self._admit_arrivals()
            self._wake_blocked()
            self._apply_boosts()
            picked = self._scheduler.select()

        process, level = picked
        quantum = self._scheduler.quantum_for(level)
        consumed = process.dispatch(quantum, self._clock, level, trace=self._sink)
        self._dispatches += 1
        self._clock += consumed
        self._scheduler.requeue(process, time=self._clock)
        return consumed

    def result(self) -> SimulationResult:
        """Collect metrics for the finished processes."""
        stats = tuple(
            ProcessStats(
                pid=p.pid,
                arrival_time=p.start_time,
                workload=p.workload,
                response_time=p.response_time,
                turnaround_time=p.turnaround_time,
            )
            for p in self._processes
            if p.is_finished()
        )
        return SimulationResult(
            stats=stats,
            end_time=self._clock,
            dispatches=self._dispatches,
            demotions=self._scheduler.demotions,
            boosts=self._scheduler.boosts,
            trace=tuple(self._trace_log.lines()),
        )

    def _admit_arrivals(self) -> None:
        while self._pending and self._pending[-1].start_time <= self._clock:
            self._scheduler.admit(self._pending.pop(), time=self._clock)

    def _wake_blocked(self) -> None:
        due = [
            p
            for p in self._scheduler.blocked_processes
            if p.next_schedule_time is not None and p.next_schedule_time <= self._clock
        ]
        due.sort(key=lambda p: (p.next_schedule_time, p.pid))
        for process in due:
            self._scheduler.wake(process, time=self._clock)

    def _apply_boosts(self) -> None:
        interval = self._config.boost_interval
        if interval <= 0:
            return
        while self._clock >= self._next_boost:
            self._scheduler.boost(time=self._next_boost)
            self._next_boost += interval

    def _idle(self) -> None:
        """Advance the clock to the next arrival or I/O completion."""
        upcoming = [
            p.next_schedule_time
            for p in self._scheduler.blocked_processes
            if p.next_schedule_time is not None
        ]
        if self._pending:
            upcoming.append(self._pending[-1].start_time)
        if not upcoming:
            msg = f"Simulation stalled at time {self._clock}: no runnable process"
            raise RuntimeError(msg)
        target = max(min(upcoming), self._clock)
        if target == self._clock:
            msg = f"Simulation stalled at time {self._clock}: wake-up did not make progress"
            raise RuntimeError(msg)
        self._logger.log(LogLevel.DEBUG, f"cpu idle until {target}", source=_SOURCE, time=self._clock)
        self._clock = target
