"""Tests for workload parsing, generation, and persistence."""

from pathlib import Path

import pytest

from py_mlfq.process import ProcessState
from py_mlfq.workload import (
    JobSpec,
    WorkloadError,
    dump_jobs,
    jobs_from_list,
    load_jobs,
    parse_jobs,
    random_jobs,
)

DEFAULT_IO = 5


class TestJobSpec:
    """Verify job validation and conversion."""

    def test_to_process(self) -> None:
        """A job becomes a fresh READY process."""
        job = JobSpec(pid=2, arrival_time=4, workload=30, io_interval=6, io_length=2)
        process = job.to_process()
        assert process.pid == 2
        assert process.start_time == 4
        assert process.workload == 30
        assert process.io_interval == 6
        assert process.io_length == 2
        assert process.state is ProcessState.READY

    def test_zero_workload_rejected(self) -> None:
        """A job must need some CPU time."""
        with pytest.raises(WorkloadError, match="workload"):
            JobSpec(pid=0, arrival_time=0, workload=0)

    def test_negative_field_rejected(self) -> None:
        """Negative fields are invalid."""
        with pytest.raises(WorkloadError, match="io_length"):
            JobSpec(pid=0, arrival_time=0, workload=5, io_length=-1)

    def test_workload_error_is_value_error(self) -> None:
        """Front ends can catch ValueError."""
        assert issubclass(WorkloadError, ValueError)


class TestParseJobs:
    """Verify the compact job string format."""

    def test_three_fields_use_default_io_length(self) -> None:
        """arrival,workload,io_interval takes the default I/O length."""
        jobs = parse_jobs("0,37,0:5,12,5", io_length=DEFAULT_IO)
        assert jobs == [
            JobSpec(pid=0, arrival_time=0, workload=37, io_interval=0, io_length=DEFAULT_IO),
            JobSpec(pid=1, arrival_time=5, workload=12, io_interval=5, io_length=DEFAULT_IO),
        ]

    def test_four_fields(self) -> None:
        """An explicit fourth field sets the I/O length."""
        jobs = parse_jobs("0, 12, 5, 3")
        assert jobs[0].io_length == 3

    @pytest.mark.parametrize("text", ["", "0,10", "0,10,0,1,2", "a,10,0", "0,10,0::1,2,0"])
    def test_malformed(self, text: str) -> None:
        """Missing, extra, or non-integer fields are rejected."""
        with pytest.raises(WorkloadError):
            parse_jobs(text)


class TestRandomJobs:
    """Verify seeded generation."""

    def test_same_seed_same_jobs(self) -> None:
        """Generation is reproducible."""
        assert random_jobs(5, seed=42) == random_jobs(5, seed=42)

    def test_bounds(self) -> None:
        """Generated values respect the requested bounds."""
        jobs = random_jobs(50, seed=1, max_workload=20, max_io_interval=4, io_length=7)
        assert [job.pid for job in jobs] == list(range(50))
        for job in jobs:
            assert 1 <= job.workload <= 20
            assert 0 <= job.io_interval <= 4
            assert job.io_length == 7
            assert job.arrival_time == 0

    def test_no_io(self) -> None:
        """max_io_interval=0 yields CPU-bound jobs."""
        jobs = random_jobs(10, seed=3, max_io_interval=0)
        assert all(job.io_interval == 0 for job in jobs)

    def test_negative_count(self) -> None:
        """A negative job count is invalid."""
        with pytest.raises(WorkloadError):
            random_jobs(-1)


class TestJobFiles:
    """Verify JSON workloads."""

    def test_round_trip(self, tmp_path: Path) -> None:
        """dump_jobs/load_jobs preserve every job."""
        path = tmp_path / "jobs.json"
        jobs = parse_jobs("0,10,0:3,20,4,2")
        dump_jobs(jobs, path)
        assert load_jobs(path) == jobs

    def test_pid_defaults_to_position(self) -> None:
        """Objects without a pid are numbered by position."""
        jobs = jobs_from_list([{"workload": 5}, {"workload": 6, "arrival_time": 2}])
        assert [job.pid for job in jobs] == [0, 1]
        assert jobs[1].arrival_time == 2

    def test_duplicate_pid(self) -> None:
        """Two jobs may not share a PID."""
        with pytest.raises(WorkloadError, match="Duplicate"):
            jobs_from_list([{"pid": 1, "workload": 5}, {"pid": 1, "workload": 6}])

    def test_missing_workload(self) -> None:
        """The workload field is required."""
        with pytest.raises(WorkloadError, match="workload"):
            jobs_from_list([{"arrival_time": 1}])

    def test_non_integer_field(self) -> None:
        """Fields must be integers."""
        with pytest.raises(WorkloadError, match="non-integer"):
            jobs_from_list([{"workload": "lots"}])

    def test_not_a_list(self) -> None:
        """The top level must be a list."""
        with pytest.raises(WorkloadError):
            jobs_from_list({"workload": 5})  # type: ignore[arg-type]

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Broken JSON is reported as a workload error."""
        path = tmp_path / "jobs.json"
        path.write_text("[{")
        with pytest.raises(WorkloadError, match="not valid JSON"):
            load_jobs(path)
