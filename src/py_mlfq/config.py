"""Scheduler configuration.

An MLFQ scheduler is described by a handful of knobs:

- **num_queues** — how many priority levels exist.
- **quantums** — the time slice granted at each level (level 0 first).
- **allotments** — how much CPU time a process may use at a level
  before it is demoted.  Defaults to one quantum per level.
- **boost_interval** — every this many time units, every process is
  moved back to level 0 (0 disables boosting).
- **io_bump** — whether a process returning from I/O goes to the
  *front* of its queue instead of the back.
- **io_length** — default I/O duration for jobs that don't state one.

Configs are immutable and can be round-tripped through JSON.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_NUM_QUEUES = 3
DEFAULT_QUANTUM = 10
DEFAULT_IO_LENGTH = 5


@dataclass(frozen=True)
class MLFQConfig:
    """Immutable MLFQ scheduler settings.

    Raises:
        ValueError: On construction, if the settings are inconsistent.

    """

    num_queues: int = DEFAULT_NUM_QUEUES
    quantums: tuple[int, ...] = (DEFAULT_QUANTUM,) * DEFAULT_NUM_QUEUES
    allotments: tuple[int, ...] = ()
    boost_interval: int = 0
    io_bump: bool = False
    io_length: int = DEFAULT_IO_LENGTH

    def __post_init__(self) -> None:
        """Fill default allotments and validate every setting."""
        if self.num_queues < 1:
            msg = f"num_queues must be at least 1, got {self.num_queues}"
            raise ValueError(msg)
        object.__setattr__(self, "quantums", tuple(self.quantums))
        if not self.allotments:
            object.__setattr__(self, "allotments", self.quantums)
        else:
            object.__setattr__(self, "allotments", tuple(self.allotments))

        for name in ("quantums", "allotments"):
            values: tuple[int, ...] = getattr(self, name)
            if len(values) != self.num_queues:
                msg = f"{name} needs {self.num_queues} entries, got {len(values)}"
                raise ValueError(msg)
            if any(v <= 0 for v in values):
                msg = f"{name} must all be positive, got {values}"
                raise ValueError(msg)
        if self.boost_interval < 0:
            msg = f"boost_interval must be non-negative, got {self.boost_interval}"
            raise ValueError(msg)
        if self.io_length < 0:
            msg = f"io_length must be non-negative, got {self.io_length}"
            raise ValueError(msg)

    @classmethod
    def uniform(
        cls,
        *,
        num_queues: int = DEFAULT_NUM_QUEUES,
        quantum: int = DEFAULT_QUANTUM,
        allotment: int | None = None,
        boost_interval: int = 0,
        io_bump: bool = False,
        io_length: int = DEFAULT_IO_LENGTH,
    ) -> MLFQConfig:
        """Build a config with the same quantum and allotment at every level."""
        return cls(
            num_queues=num_queues,
            quantums=(quantum,) * num_queues,
            allotments=(allotment if allotment is not None else quantum,) * num_queues,
            boost_interval=boost_interval,
            io_bump=io_bump,
            io_length=io_length,
        )

    def quantum(self, level: int) -> int:
        """Return the time quantum for *level*."""
        return self.quantums[level]

    def allotment(self, level: int) -> int:
        """Return the allotment for *level*."""
        return self.allotments[level]

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable dictionary."""
        return {
            "num_queues": self.num_queues,
            "quantums": list(self.quantums),
            "allotments": list(self.allotments),
            "boost_interval": self.boost_interval,
            "io_bump": self.io_bump,
            "io_length": self.io_length,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MLFQConfig:
        """Build a config from a dictionary.

        ``quantum`` / ``allotment`` scalars are accepted in place of the
        per-level lists.  Missing keys take their defaults.

        Raises:
            ValueError: On unknown keys or invalid values.

        """
        known = {
            "num_queues",
            "quantums",
            "allotments",
            "quantum",
            "allotment",
            "boost_interval",
            "io_bump",
            "io_length",
        }
        unknown = set(data) - known
        if unknown:
            msg = f"Unknown config keys: {', '.join(sorted(unknown))}"
            raise ValueError(msg)

        num_queues = int(data.get("num_queues", DEFAULT_NUM_QUEUES))
        if "quantums" in data:
            quantums = tuple(int(q) for q in data["quantums"])
        else:
            quantums = (int(data.get("quantum", DEFAULT_QUANTUM)),) * num_queues
        if "allotments" in data:
            allotments = tuple(int(a) for a in data["allotments"])
        elif "allotment" in data:
            allotments = (int(data["allotment"]),) * num_queues
        else:
            allotments = ()
        io_bump = data.get("io_bump", False)
        if not isinstance(io_bump, bool):
            msg = f"io_bump must be true or false, got {io_bump!r}"
            raise ValueError(msg)  # noqa: TRY004
        return cls(
            num_queues=num_queues,
            quantums=quantums,
            allotments=allotments,
            boost_interval=int(data.get("boost_interval", 0)),
            io_bump=io_bump,
            io_length=int(data.get("io_length", DEFAULT_IO_LENGTH)),
        )


def load_config(path: Path) -> MLFQConfig:
    """Load a config from a JSON file.

    Raises:
        FileNotFoundError: If the path does not exist.
        ValueError: If the file is not valid JSON or the settings are invalid.

    """
    data = json.loads(path.read_text())
    if not isinstance(data, dict):
        msg = f"Config file {path} must contain a JSON object"
        raise ValueError(msg)
    return MLFQConfig.from_dict(data)


def dump_config(config: MLFQConfig, path: Path) -> None:
    """Save *config* to a JSON file."""
    path.write_text(json.dumps(config.to_dict(), indent=2))
