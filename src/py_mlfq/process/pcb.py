"""Process and Process Control Block (PCB) — the execution engine.

A process here is a unit of simulated CPU work.  The PCB tracks how much
work it needs, how much it has done, how often it stops for I/O, and the
two timing metrics every scheduling textbook reports:

- **Response time** — arrival until the first dispatch.
- **Turnaround time** — arrival until completion.

Each call to ``dispatch()`` represents the process holding the CPU for
up to one quantum.  The engine decides how much of the quantum is
actually used — it stops early at the next I/O boundary or when the
workload completes — and returns the consumed time to the driver.

State machine::

    READY → RUNNING → FINISHED
              ↓  ↑
            BLOCKED

Quantum exhaustion leaves the process in RUNNING.  Which processes are
waiting for the CPU is decided by queue membership in the driver, not
by the state field.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from py_mlfq.trace import TraceEvent, TraceOutcome

if TYPE_CHECKING:
    from py_mlfq.trace import TraceSink


class ProcessState(StrEnum):
    """Lifecycle states of a process.

    - READY: created, never dispatched.
    - RUNNING: dispatched at least once and not blocked or finished.
    - BLOCKED: performing I/O until ``next_schedule_time``.
    - FINISHED: workload complete (terminal).
    """

    READY = "ready"
    RUNNING = "running"
    BLOCKED = "blocked"
    FINISHED = "finished"


class InvariantViolationError(RuntimeError):
    """Raised when the driver breaks the dispatch contract.

    This is never a recoverable condition: it means the caller has a
    bug (e.g. re-dispatching a finished process).
    """


def _require_non_negative(name: str, value: int) -> None:
    if value < 0:
        msg = f"{name} must be non-negative, got {value}"
        raise ValueError(msg)


class Process:
    """A simulated process (the Process Control Block).

    All mutation goes through ``dispatch()``, except ``allotment``
    which the scheduling policy resets between dispatches.
    """

    def __init__(
        self,
        pid: int,
        io_interval: int,
        io_length: int,
        workload: int,
        arrival_time: int,
    ) -> None:
        """Create a new process in the READY state.

        Args:
            pid: Unique process identifier.
            io_interval: CPU time between I/O requests (0 = never blocks).
            io_length: Duration of each I/O request.
            workload: Total CPU time needed to finish.
            arrival_time: Simulated time the process enters the system.

        Raises:
            ValueError: If any argument is negative.

        """
        for name, value in (
            ("pid", pid),
            ("io_interval", io_interval),
            ("io_length", io_length),
            ("workload", workload),
            ("arrival_time", arrival_time),
        ):
            _require_non_negative(name, value)

        self._pid = pid
        self._io_interval = io_interval
        self._io_length = io_length
        self._workload = workload
        self._work_done = 0
        self._start_time = arrival_time
        self._next_schedule_time: int | None = arrival_time
        self._turnaround_time = 0
        self._response_time = 0
        self._responded = False
        self._allotment = 0
        self._state = ProcessState.READY

    @property
    def pid(self) -> int:
        """Return the unique process identifier."""
        return self._pid

    @property
    def io_interval(self) -> int:
        """Return the CPU time between I/O requests (0 = no I/O)."""
        return self._io_interval

    @property
    def io_length(self) -> int:
        """Return the duration of each I/O request."""
        return self._io_length

    @property
    def workload(self) -> int:
        """Return the total CPU time the process needs."""
        return self._workload

    @property
    def work_done(self) -> int:
        """Return the CPU time consumed so far."""
        return self._work_done

    @property
    def work_left(self) -> int:
        """Return the CPU time still needed to finish."""
        return self._workload - self._work_done

    @property
    def start_time(self) -> int:
        """Return the arrival time."""
        return self._start_time

    @property
    def next_schedule_time(self) -> int | None:
        """Return the earliest time the process may run again.

        None once the process has finished.
        """
        return self._next_schedule_time

    @property
    def turnaround_time(self) -> int:
        """Return completion time minus arrival (0 until finished)."""
        return self._turnaround_time

    @property
    def response_time(self) -> int:
        """Return first dispatch time minus arrival (0 until dispatched)."""
        return self._response_time

    @property
    def has_responded(self) -> bool:
        """Return True once the first dispatch has been recorded."""
        return self._responded

    @property
    def state(self) -> ProcessState:
        """Return the current process state."""
        return self._state

    @property
    def allotment(self) -> int:
        """Return the remaining CPU budget at the current priority level."""
        return self._allotment

    @allotment.setter
    def allotment(self, value: int) -> None:
        self.set_allotment(value)

    def set_allotment(self, value: int) -> None:
        """Reset the allotment (used by the policy between dispatches).

        Raises:
            ValueError: If *value* is negative.

        """
        _require_non_negative("allotment", value)
        self._allotment = value

    def is_blocked(self) -> bool:
        """Return True if the process is waiting on I/O."""
        return self._state is ProcessState.BLOCKED

    def is_finished(self) -> bool:
        """Return True if the workload is complete."""
        return self._state is ProcessState.FINISHED

    def dispatch(
        self,
        quantum: int,
        at: int,
        queue: int,
        *,
        trace: TraceSink | None = None,
    ) -> int:
        """Run the process for up to *quantum* time units starting at *at*.

        The process stops early when it reaches its next I/O boundary
        (and still has work left after it) or when its workload
        completes.  Exactly one outcome event is sent to *trace*,
        preceded by a start/resume event when leaving READY or BLOCKED.

        Args:
            quantum: Maximum CPU time granted (must be positive).
            at: Simulated time the dispatch begins.
            queue: Identifier of the queue the process was picked from.
            trace: Optional sink receiving ``TraceEvent`` records.

        Returns:
            The CPU time actually consumed (always positive).

        Raises:
            InvariantViolationError: If the process is finished, the
                quantum is not positive, or the first dispatch happens
                before arrival.

        """
        if self._state is ProcessState.FINISHED:
            msg = f"Run a finished process {self._pid}"
            raise InvariantViolationError(msg)
        if quantum <= 0:
            msg = f"Quantum must be positive, got {quantum} for process {self._pid}"
            raise InvariantViolationError(msg)
        if self.work_left <= 0:
            msg = f"Process {self._pid} has no work left to run"
            raise InvariantViolationError(msg)

        if not self._responded:
            if at < self._start_time:
                msg = f"Process {self._pid} dispatched at {at} before arrival at {self._start_time}"
                raise InvariantViolationError(msg)
            self._response_time = at - self._start_time
            self._responded = True

        match self._state:
            case ProcessState.READY:
                self._state = ProcessState.RUNNING
                self._emit(trace, TraceOutcome.START, at, queue)
            case ProcessState.BLOCKED:
                self._state = ProcessState.RUNNING
                self._emit(trace, TraceOutcome.RESUME, at, queue)
            case ProcessState.RUNNING:
                pass
            case _:
                msg = f"Process {self._pid} is in an invalid state {self._state}"
                raise InvariantViolationError(msg)

        return self._run(quantum, at, queue, trace)

    def _run(self, quantum: int, at: int, queue: int, trace: TraceSink | None) -> int:
        """Consume CPU time from the RUNNING state and record the outcome."""
        work_left = self.work_left

        if self._io_interval > 0:
            # Distance to the next I/O boundary; a full interval when on one.
            work_before_io = self._io_interval - (self._work_done % self._io_interval)
            if work_before_io < work_left and work_before_io <= quantum:
                run_time = work_before_io
                self._work_done += run_time
                self._next_schedule_time = at + self._io_length
                self._state = ProcessState.BLOCKED
            else:
                run_time = self._finish_or_preempt(quantum, at, work_left)
        else:
            run_time = self._finish_or_preempt(quantum, at, work_left)

        if run_time <= 0:
            msg = f"Process {self._pid} consumed no CPU time"
            raise InvariantViolationError(msg)

        self._allotment = max(0, self._allotment - run_time)

        end = at + run_time
        match self._state:
            case ProcessState.RUNNING:
                self._emit(trace, TraceOutcome.RAN, end, queue, ran_for=run_time)
            case ProcessState.BLOCKED:
                self._emit(
                    trace,
                    TraceOutcome.BLOCKED,
                    end,
                    queue,
                    ran_for=run_time,
                    io_length=self._io_length,
                )
            case ProcessState.FINISHED:
                self._emit(trace, TraceOutcome.FINISHED, end, queue, ran_for=run_time)
            case _:
                msg = f"Process {self._pid} is in an invalid state {self._state}"
                raise InvariantViolationError(msg)

        return run_time

    def _finish_or_preempt(self, quantum: int, at: int, work_left: int) -> int:
        """Apply the completion or quantum-exhaustion case; return run time."""
        if work_left <= quantum:
            self._work_done += work_left
            self._next_schedule_time = None
            self._turnaround_time = at - self._start_time + work_left
            self._state = ProcessState.FINISHED
            if self._work_done != self._workload:
                msg = f"Process {self._pid} finished with {self._work_done}/{self._workload} work"
                raise InvariantViolationError(msg)
            return work_left
        self._work_done += quantum
        self._next_schedule_time = at + quantum
        return quantum

    def _emit(
        self,
        trace: TraceSink | None,
        outcome: TraceOutcome,
        time: int,
        queue: int,
        *,
        ran_for: int = 0,
        io_length: int = 0,
    ) -> None:
        if trace is None:
            return
        trace.record(
            TraceEvent(
                time=time,
                queue=queue,
                pid=self._pid,
                outcome=outcome,
                ran_for=ran_for,
                io_length=io_length,
            )
        )

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return (
            f"Process(pid={self._pid}, state={self._state}, "
            f"work={self._work_done}/{self._workload})"
        )
