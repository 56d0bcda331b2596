"""Tests for scheduler configuration."""

import json
from pathlib import Path

import pytest

from py_mlfq.config import (
    DEFAULT_IO_LENGTH,
    DEFAULT_NUM_QUEUES,
    DEFAULT_QUANTUM,
    MLFQConfig,
    dump_config,
    load_config,
)


class TestDefaults:
    """Verify the default configuration."""

    def test_default_levels(self) -> None:
        """Defaults give three queues with equal quanta."""
        config = MLFQConfig()
        assert config.num_queues == DEFAULT_NUM_QUEUES
        assert config.quantums == (DEFAULT_QUANTUM,) * DEFAULT_NUM_QUEUES
        assert config.boost_interval == 0
        assert not config.io_bump
        assert config.io_length == DEFAULT_IO_LENGTH

    def test_allotments_default_to_quantums(self) -> None:
        """Without explicit allotments each level allows one quantum."""
        config = MLFQConfig(num_queues=2, quantums=(4, 8))
        assert config.allotments == (4, 8)
        assert config.allotment(1) == 8
        assert config.quantum(0) == 4

    def test_uniform(self) -> None:
        """uniform() repeats quantum and allotment at every level."""
        config = MLFQConfig.uniform(num_queues=4, quantum=5, allotment=15, boost_interval=100)
        assert config.quantums == (5, 5, 5, 5)
        assert config.allotments == (15, 15, 15, 15)
        assert config.boost_interval == 100

    def test_lists_are_normalised_to_tuples(self) -> None:
        """Per-level settings are stored as tuples."""
        config = MLFQConfig(num_queues=2, quantums=[3, 6])  # type: ignore[arg-type]
        assert config.quantums == (3, 6)


class TestValidation:
    """Inconsistent settings are rejected."""

    def test_zero_queues(self) -> None:
        """At least one queue is required."""
        with pytest.raises(ValueError, match="num_queues"):
            MLFQConfig(num_queues=0, quantums=())

    def test_length_mismatch(self) -> None:
        """Per-level tuples must match the queue count."""
        with pytest.raises(ValueError, match="quantums"):
            MLFQConfig(num_queues=3, quantums=(1, 2))

    def test_non_positive_quantum(self) -> None:
        """Quanta must be positive."""
        with pytest.raises(ValueError, match="positive"):
            MLFQConfig(num_queues=2, quantums=(5, 0))

    def test_negative_boost(self) -> None:
        """The boost interval cannot be negative."""
        with pytest.raises(ValueError, match="boost_interval"):
            MLFQConfig(boost_interval=-1)


class TestSerialisation:
    """Configs round-trip through dictionaries and JSON files."""

    def test_from_dict_scalars(self) -> None:
        """Scalar quantum/allotment expand to every level."""
        config = MLFQConfig.from_dict({"num_queues": 2, "quantum": 4, "allotment": 12})
        assert config.quantums == (4, 4)
        assert config.allotments == (12, 12)

    def test_from_dict_unknown_key(self) -> None:
        """Typos are reported instead of ignored."""
        with pytest.raises(ValueError, match="quantom"):
            MLFQConfig.from_dict({"quantom": 3})

    @pytest.mark.parametrize("value", ["false", "true", 1, 0, None])
    def test_io_bump_must_be_boolean(self, value: object) -> None:
        """Strings and numbers are not silently read as a boolean."""
        with pytest.raises(ValueError, match="io_bump"):
            MLFQConfig.from_dict({"io_bump": value})

    def test_io_bump_boolean_accepted(self) -> None:
        """JSON booleans set the flag."""
        assert MLFQConfig.from_dict({"io_bump": True}).io_bump
        assert not MLFQConfig.from_dict({"io_bump": False}).io_bump

    def test_dict_round_trip(self) -> None:
        """to_dict/from_dict preserve every field."""
        config = MLFQConfig(
            num_queues=2, quantums=(2, 4), allotments=(6, 8), boost_interval=50, io_bump=True
        )
        assert MLFQConfig.from_dict(config.to_dict()) == config

    def test_file_round_trip(self, tmp_path: Path) -> None:
        """dump_config/load_config preserve the config."""
        path = tmp_path / "mlfq.json"
        config = MLFQConfig.uniform(num_queues=2, quantum=3, io_length=9)
        dump_config(config, path)
        assert load_config(path) == config

    def test_load_rejects_non_object(self, tmp_path: Path) -> None:
        """A config file must contain a JSON object."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([1, 2, 3]))
        with pytest.raises(ValueError, match="JSON object"):
            load_config(path)
