"""Workload descriptions — the jobs fed to the simulator.

A job is described by its arrival time, total CPU work, and I/O
pattern.  Jobs can come from three places:

- a compact string, ``"arrival,workload,io_interval[,io_length]:..."``
  (one job per ``:``-separated field, PIDs assigned from 0);
- a JSON file holding a list of job objects;
- a seeded random generator, for reproducible experiments.
"""

from __future__ import annotations

import json
import random
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from py_mlfq.config import DEFAULT_IO_LENGTH
from py_mlfq.process.pcb import Process

_MIN_JOB_FIELDS = 3
_MAX_JOB_FIELDS = 4


class WorkloadError(ValueError):
    """Raised when a workload description is malformed."""


@dataclass(frozen=True)
class JobSpec:
    """Static description of one job."""

    pid: int
    arrival_time: int
    workload: int
    io_interval: int = 0
    io_length: int = 0

    def __post_init__(self) -> None:
        """Reject negative fields and empty workloads."""
        for name in ("pid", "arrival_time", "io_interval", "io_length"):
            value = getattr(self, name)
            if value < 0:
                msg = f"Job {self.pid}: {name} must be non-negative, got {value}"
                raise WorkloadError(msg)
        if self.workload <= 0:
            msg = f"Job {self.pid}: workload must be positive, got {self.workload}"
            raise WorkloadError(msg)

    def to_process(self) -> Process:
        """Create a fresh READY process for this job."""
        return Process(
            pid=self.pid,
            io_interval=self.io_interval,
            io_length=self.io_length,
            workload=self.workload,
            arrival_time=self.arrival_time,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, default_pid: int = 0) -> JobSpec:
        """Build a job from a JSON object (``pid`` is optional)."""
        if "workload" not in data:
            msg = f"Job {default_pid} is missing field 'workload'"
            raise WorkloadError(msg)
        try:
            pid = int(data.get("pid", default_pid))
            arrival_time = int(data.get("arrival_time", 0))
            workload = int(data["workload"])
            io_interval = int(data.get("io_interval", 0))
            io_length = int(data.get("io_length", 0))
        except (TypeError, ValueError) as e:
            msg = f"Job {default_pid} has a non-integer field: {e}"
            raise WorkloadError(msg) from e
        return cls(
            pid=pid,
            arrival_time=arrival_time,
            workload=workload,
            io_interval=io_interval,
            io_length=io_length,
        )

    def to_dict(self) -> dict[str, int]:
        """Return a JSON-serialisable dictionary."""
        return asdict(self)


def _check_unique(jobs: list[JobSpec]) -> list[JobSpec]:
    seen: set[int] = set()
    for job in jobs:
        if job.pid in seen:
            msg = f"Duplicate pid {job.pid}"
            raise WorkloadError(msg)
        seen.add(job.pid)
    return jobs


def parse_jobs(text: str, *, io_length: int = DEFAULT_IO_LENGTH) -> list[JobSpec]:
    """Parse ``"arrival,workload,io_interval[,io_length]:..."``.

    Args:
        text: Colon-separated job descriptions.
        io_length: I/O duration for jobs that omit the fourth field.

    Returns:
        Jobs in the order given, with PIDs 0, 1, 2, ...

    Raises:
        WorkloadError: If any field is missing or not an integer.

    """
    jobs: list[JobSpec] = []
    for pid, chunk in enumerate(part.strip() for part in text.split(":")):
        if not chunk:
            msg = f"Empty job description at position {pid}"
            raise WorkloadError(msg)
        fields = [f.strip() for f in chunk.split(",")]
        if not _MIN_JOB_FIELDS <= len(fields) <= _MAX_JOB_FIELDS:
            msg = f"Job {pid}: expected arrival,workload,io_interval[,io_length], got {chunk!r}"
            raise WorkloadError(msg)
        try:
            values = [int(f) for f in fields]
        except ValueError as e:
            msg = f"Job {pid}: fields must be integers, got {chunk!r}"
            raise WorkloadError(msg) from e
        arrival, work, interval = values[:_MIN_JOB_FIELDS]
        length = values[_MIN_JOB_FIELDS] if len(values) == _MAX_JOB_FIELDS else io_length
        jobs.append(
            JobSpec(
                pid=pid,
                arrival_time=arrival,
                workload=work,
                io_interval=interval,
                io_length=length,
            )
        )
    return jobs


def random_jobs(
    count: int,
    *,
    seed: int = 0,
    max_workload: int = 100,
    max_io_interval: int = 10,
    io_length: int = DEFAULT_IO_LENGTH,
    max_arrival: int = 0,
) -> list[JobSpec]:
    """Generate *count* reproducible random jobs.

    Args:
        count: Number of jobs.
        seed: Random seed; the same seed always yields the same jobs.
        max_workload: Upper bound (inclusive) for each workload.
        max_io_interval: Upper bound for the I/O interval (0 = no I/O).
        io_length: I/O duration assigned to every job.
        max_arrival: Upper bound for arrival times (0 = all at time 0).

    """
    if count < 0:
        msg = f"count must be non-negative, got {count}"
        raise WorkloadError(msg)
    if max_workload < 1:
        msg = f"max_workload must be positive, got {max_workload}"
        raise WorkloadError(msg)
    rng = random.Random(seed)
    return [
        JobSpec(
            pid=pid,
            arrival_time=rng.randint(0, max_arrival) if max_arrival > 0 else 0,
            workload=rng.randint(1, max_workload),
            io_interval=rng.randint(0, max_io_interval) if max_io_interval > 0 else 0,
            io_length=io_length,
        )
        for pid in range(count)
    ]


def jobs_from_list(data: list[Any]) -> list[JobSpec]:
    """Build jobs from a list of JSON objects, defaulting PIDs to positions."""
    if not isinstance(data, list):
        msg = "Workload must be a list of job objects"
        raise WorkloadError(msg)
    jobs: list[JobSpec] = []
    for pid, item in enumerate(data):
        if not isinstance(item, dict):
            msg = f"Job {pid} must be an object, got {type(item).__name__}"
            raise WorkloadError(msg)
        jobs.append(JobSpec.from_dict(item, default_pid=pid))
    return _check_unique(jobs)


def load_jobs(path: Path) -> list[JobSpec]:
    """Load jobs from a JSON file containing a list of job objects.

    Raises:
        FileNotFoundError: If the path does not exist.
        WorkloadError: If the content is not a valid job list.

    """
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        msg = f"{path} is not valid JSON: {e}"
        raise WorkloadError(msg) from e
    return jobs_from_list(data)


def dump_jobs(jobs: list[JobSpec], path: Path) -> None:
    """Save *jobs* to a JSON file."""
    path.write_text(json.dumps([job.to_dict() for job in jobs], indent=2))
