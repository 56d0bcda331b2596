"""Command-line front end for the MLFQ simulator.

Runs one simulation and prints the dispatch trace followed by a
per-process summary::

    py-mlfq --jobs "0,37,0:0,12,5,3" --quantum 10
    py-mlfq --random 5 --seed 42 --queues 3 --boost 100

The helpers (``build_parser``, ``build_config``, ``build_jobs``) are
pure and testable.  ``main()`` is the I/O entrypoint.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from py_mlfq.config import MLFQConfig, load_config
from py_mlfq.simulator import Simulator
from py_mlfq.workload import load_jobs, parse_jobs, random_jobs

if TYPE_CHECKING:
    from collections.abc import Sequence

    from py_mlfq.workload import JobSpec

EXIT_OK = 0
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``py-mlfq``."""
    parser = argparse.ArgumentParser(
        prog="py-mlfq",
        description="Simulate processes under a multilevel feedback queue scheduler.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--jobs",
        help='job list "arrival,workload,io_interval[,io_length]:..."',
    )
    source.add_argument("--jobs-file", type=Path, help="JSON file with a list of jobs")
    source.add_argument("--random", type=int, metavar="N", help="generate N random jobs")

    parser.add_argument("--seed", type=int, default=0, help="seed for --random")
    parser.add_argument("--max-workload", type=int, default=100, help="largest random workload")
    parser.add_argument("--max-io-interval", type=int, default=10, help="largest random I/O interval")

    parser.add_argument("--config", type=Path, help="JSON scheduler config file")
    parser.add_argument("--queues", type=int, default=None, help="number of queues")
    parser.add_argument("--quantum", type=int, default=None, help="quantum at every level")
    parser.add_argument("--allotment", type=int, default=None, help="allotment at every level")
    parser.add_argument("--boost", type=int, default=None, help="priority boost interval (0 = off)")
    parser.add_argument("--io-length", type=int, default=None, help="default I/O duration")
    parser.add_argument(
        "--io-bump",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="put processes returning from I/O at the front of their queue",
    )
    parser.add_argument("--quiet", action="store_true", help="print only the summary")
    parser.add_argument("--log", action="store_true", help="also print the scheduler log")
    return parser


def build_config(args: argparse.Namespace) -> MLFQConfig:
    """Merge a config file (if any) with command-line overrides.

    Per-level settings that are not overridden keep the file's values.
    Without a config file or ``--allotment``, allotments follow the
    quantum.  Changing ``--queues`` repeats the level-0 value.

    Raises:
        ValueError: If the resulting settings are invalid.

    """
    base = load_config(args.config) if args.config is not None else MLFQConfig()
    num_queues = args.queues if args.queues is not None else base.num_queues

    def levels(override: int | None, current: tuple[int, ...]) -> tuple[int, ...]:
        if override is not None:
            return (override,) * num_queues
        if args.queues is None:
            return current
        return (current[0],) * num_queues

    quantums = levels(args.quantum, base.quantums)
    if args.config is None and args.allotment is None:
        allotments = quantums
    else:
        allotments = levels(args.allotment, base.allotments)
    return MLFQConfig(
        num_queues=num_queues,
        quantums=quantums,
        allotments=allotments,
        boost_interval=args.boost if args.boost is not None else base.boost_interval,
        io_bump=args.io_bump if args.io_bump is not None else base.io_bump,
        io_length=args.io_length if args.io_length is not None else base.io_length,
    )


def build_jobs(args: argparse.Namespace, config: MLFQConfig) -> list[JobSpec]:
    """Build the workload selected on the command line.

    Raises:
        ValueError: If no workload was given or it is malformed.

    """
    if args.jobs is not None:
        return parse_jobs(args.jobs, io_length=config.io_length)
    if args.jobs_file is not None:
        return load_jobs(args.jobs_file)
    if args.random is not None:
        return random_jobs(
            args.random,
            seed=args.seed,
            max_workload=args.max_workload,
            max_io_interval=args.max_io_interval,
            io_length=config.io_length,
        )
    msg = "No workload given: use --jobs, --jobs-file, or --random"
    raise ValueError(msg)


def main(argv: Sequence[str] | None = None, *, out: TextIO | None = None) -> int:
    """Run the simulator from the command line.

    This is the ``py-mlfq`` console entry point.

    Returns:
        ``EXIT_OK`` on success, ``EXIT_USAGE`` on invalid input.

    """
    stream = out if out is not None else sys.stdout
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = build_config(args)
        jobs = build_jobs(args, config)
    except (OSError, ValueError) as e:
        print(f"py-mlfq: error: {e}", file=sys.stderr)
        return EXIT_USAGE

    simulator = Simulator(jobs, config)
    result = simulator.run()

    if not args.quiet:
        for line in result.trace:
            print(line, file=stream)
        print(file=stream)
    if args.log:
        for line in simulator.logger.lines():
            print(line, file=stream)
        print(file=stream)
    print(result.summary(), file=stream)
    return EXIT_OK
