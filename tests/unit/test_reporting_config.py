"""Unit tests for the snapshot generator configuration."""

from __future__ import annotations

import textwrap
import typing as typ
from pathlib import Path

import pytest

from ghsummary.reporting.config import (
    ConfigError,
    GeneratorConfig,
    load_generator_config,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@pytest.fixture
def write_config(tmp_path: Path) -> cabc.Callable[[str], Path]:
    """Return a helper writing YAML text to a temporary config file."""

    def _write(text: str) -> Path:
        path = tmp_path / "config.yml"
        path.write_text(textwrap.dedent(text), encoding="utf-8")
        return path

    return _write


class TestDefaults:
    """Tests for GeneratorConfig defaults."""

    def test_defaults(self) -> None:
        """Defaults match the documented generator settings."""
        config = GeneratorConfig()

        assert config.default_user is None
        assert config.activity.days == 31
        assert config.activity.include_private_stats is False
        assert config.activity.include_types == []
        assert config.schedule.timezone == "America/Toronto"
        assert config.schedule.frequency == "bimonthly"
        assert config.data_dir == Path("_data")
        assert config.privacy.aggregate_only is True

    def test_aggregation_config(self) -> None:
        """The aggregation knobs follow the configuration."""
        aggregation = GeneratorConfig().aggregation_config()

        assert aggregation.timezone == "America/Toronto"
        assert aggregation.window_days == 31
        assert aggregation.aggregate_only is True
        assert aggregation.include_types is None


class TestLoadGeneratorConfig:
    """Tests for load_generator_config."""

    def test_loads_full_file(self, write_config: cabc.Callable[[str], Path]) -> None:
        """Every section is read from YAML."""
        path = write_config(
            """
            default_user: octocat
            activity:
              days: 14
              include_private_stats: true
              include_types: [commit, Pull Request]
            schedule:
              timezone: Europe/Paris
              frequency: monthly
            cache:
              data_dir: site/_data
            privacy:
              aggregate_only: false
            """
        )

        config = load_generator_config(path)

        assert config.default_user == "octocat"
        assert config.activity.days == 14
        assert config.activity.include_private_stats is True
        assert config.schedule.frequency == "monthly"
        assert config.data_dir == Path("site/_data")
        aggregation = config.aggregation_config()
        assert aggregation.include_types == frozenset({"commit", "pull request"})
        assert aggregation.aggregate_only is False
        assert aggregation.timezone == "Europe/Paris"

    def test_partial_file_keeps_defaults(
        self, write_config: cabc.Callable[[str], Path]
    ) -> None:
        """Missing sections fall back to their defaults."""
        config = load_generator_config(write_config("default_user: octocat\n"))

        assert config.schedule.timezone == "America/Toronto"
        assert config.privacy.aggregate_only is True

    def test_empty_file_is_all_defaults(
        self, write_config: cabc.Callable[[str], Path]
    ) -> None:
        """An empty file yields the default configuration."""
        assert load_generator_config(write_config("")) == GeneratorConfig()

    @pytest.mark.parametrize(
        ("text", "message"),
        [
            ("activity:\n  days: 0\n", "schema validation failed"),
            ("schedule:\n  frequency: weekly\n", "schema validation failed"),
            ("schedule:\n  timezone: Nowhere/Special\n", "timezone is unknown"),
            ("cache:\n  data_dir: '  '\n", "data_dir must not be empty"),
            ("default_user: [a, b\n", "failed to parse YAML"),
        ],
    )
    def test_rejects_invalid_files(
        self,
        write_config: cabc.Callable[[str], Path],
        text: str,
        message: str,
    ) -> None:
        """Schema and value problems raise ConfigError."""
        with pytest.raises(ConfigError, match=message):
            load_generator_config(write_config(text))

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ConfigError."""
        with pytest.raises(ConfigError, match="failed to parse YAML"):
            load_generator_config(tmp_path / "absent.yml")
