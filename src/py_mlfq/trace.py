"""Dispatch trace — structured events emitted by the execution engine.

Every dispatch produces one or two events: an optional START/RESUME
event when the process leaves READY or BLOCKED, then exactly one outcome
event (RAN, BLOCKED, or FINISHED) stamped with the time the dispatch
ended.  Rendered with ``str()``, each event becomes the familiar trace
line::

    [15:<0>] Process 2 has run for 5, then blocked. It will perform I/O for 3

The engine never prints.  It hands events to whatever *sink* the driver
passes in — anything with a ``record(event)`` method.  ``TraceLog`` is
the in-memory sink used by the simulator and the tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol


class TraceOutcome(StrEnum):
    """What a trace event describes."""

    START = "start"
    RESUME = "resume"
    RAN = "ran"
    BLOCKED = "blocked"
    FINISHED = "finished"


@dataclass(frozen=True)
class TraceEvent:
    """A single dispatch trace record.

    Attributes:
        time: Simulated timestamp of the event.
        queue: Queue the process was dispatched from.
        pid: The process the event describes.
        outcome: Which transition happened.
        ran_for: CPU time consumed (outcome events only).
        io_length: I/O duration (BLOCKED events only).

    """

    time: int
    queue: int
    pid: int
    outcome: TraceOutcome
    ran_for: int = 0
    io_length: int = 0

    @property
    def description(self) -> str:
        """Return the outcome-specific tail of the trace line."""
        match self.outcome:
            case TraceOutcome.START:
                return "start running."
            case TraceOutcome.RESUME:
                return "resume running from I/O."
            case TraceOutcome.RAN:
                return f"has run for {self.ran_for}."
            case TraceOutcome.BLOCKED:
                return (
                    f"has run for {self.ran_for}, then blocked. "
                    f"It will perform I/O for {self.io_length}"
                )
            case TraceOutcome.FINISHED:
                return f"has run for {self.ran_for}, then finished."
            case _:
                msg = f"Unknown trace outcome {self.outcome!r} for process {self.pid}"
                raise ValueError(msg)

    def __str__(self) -> str:
        """Format as ``[time:<queue>] Process pid description``."""
        return f"[{self.time}:<{self.queue}>] Process {self.pid} {self.description}"


class TraceSink(Protocol):
    """Anything that can receive trace events."""

    def record(self, event: TraceEvent) -> None:
        """Accept one trace event."""
        ...  # pragma: no cover


class TraceLog:
    """Append-only in-memory trace sink with filtering."""

    def __init__(self) -> None:
        """Create an empty trace log."""
        self._events: list[TraceEvent] = []

    @property
    def events(self) -> list[TraceEvent]:
        """Return all events in the order they were recorded."""
        return list(self._events)

    def record(self, event: TraceEvent) -> None:
        """Append *event* to the log."""
        self._events.append(event)

    def filter(
        self,
        *,
        pid: int | None = None,
        outcome: TraceOutcome | None = None,
    ) -> list[TraceEvent]:
        """Return events matching the given criteria.

        Args:
            pid: If set, only events for this process.
            outcome: If set, only events with this outcome.

        """
        result = self._events
        if pid is not None:
            result = [e for e in result if e.pid == pid]
        if outcome is not None:
            result = [e for e in result if e.outcome is outcome]
        return list(result)

    def lines(self) -> list[str]:
        """Return every event rendered as a trace line."""
        return [str(e) for e in self._events]

    def clear(self) -> None:
        """Remove all events."""
        self._events.clear()

    def __len__(self) -> int:
        """Return the number of recorded events."""
        return len(self._events)
