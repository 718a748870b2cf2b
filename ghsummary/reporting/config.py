"""Snapshot generator configuration loaded from YAML.

Usage
-----
>>> config = load_generator_config("config.yml")
>>> config.schedule.timezone
'America/Toronto'

An example file::

    default_user: octocat
    activity:
      days: 31
      include_private_stats: false
      include_types: [commit, pull request]
    schedule:
      timezone: America/Toronto
      frequency: bimonthly
    cache:
      data_dir: _data
    privacy:
      aggregate_only: true

"""

from __future__ import annotations

import typing as typ
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ghsummary.activity.aggregation import AggregationConfig, parse_type_allowlist

YAML_VERSION = (1, 2)

Frequency = typ.Literal["bimonthly", "monthly"]


class ConfigError(ValueError):
    """Raised when a generator configuration file cannot be used."""

    def __init__(self, issues: list[str]) -> None:
        """Keep the individual issues alongside the joined message."""
        super().__init__("\n".join(issues))
        self.issues = issues


class ActivitySettings(msgspec.Struct, kw_only=True, frozen=True):
    """Lookback window and event selection."""

    days: typ.Annotated[int, msgspec.Meta(ge=1)] = 31
    include_private_stats: bool = False
    include_types: list[str] = msgspec.field(default_factory=list)


class ScheduleSettings(msgspec.Struct, kw_only=True, frozen=True):
    """Timezone for day keys and the regeneration cadence."""

    timezone: str = "America/Toronto"
    frequency: Frequency = "bimonthly"


class CacheSettings(msgspec.Struct, kw_only=True, frozen=True):
    """Where snapshot files are written."""

    data_dir: str = "_data"


class PrivacySettings(msgspec.Struct, kw_only=True, frozen=True):
    """Redaction of private repository activity."""

    aggregate_only: bool = True


class GeneratorConfig(msgspec.Struct, kw_only=True, frozen=True):
    """Top-level generator configuration.

    Attributes
    ----------
    default_user : str, optional
        Login summarised when none is given on the command line.
    activity : ActivitySettings
        Window length, private-event inclusion and type allowlist.
    schedule : ScheduleSettings
        Timezone and ``bimonthly``/``monthly`` cadence.
    cache : CacheSettings
        Output directory for ``activity.json`` and ``metadata.json``.
    privacy : PrivacySettings
        Aggregate-only redaction switch.

    """

    default_user: str | None = None
    activity: ActivitySettings = msgspec.field(default_factory=ActivitySettings)
    schedule: ScheduleSettings = msgspec.field(default_factory=ScheduleSettings)
    cache: CacheSettings = msgspec.field(default_factory=CacheSettings)
    privacy: PrivacySettings = msgspec.field(default_factory=PrivacySettings)

    @property
    def data_dir(self) -> Path:
        """Return the snapshot directory as a path."""
        return Path(self.cache.data_dir)

    def aggregation_config(self) -> AggregationConfig:
        """Build the aggregation knobs described by this configuration."""
        return AggregationConfig(
            timezone=self.schedule.timezone,
            window_days=self.activity.days,
            aggregate_only=self.privacy.aggregate_only,
            include_types=parse_type_allowlist(self.activity.include_types),
        )


def validate_generator_config(config: GeneratorConfig) -> GeneratorConfig:
    """Check values the schema cannot express, returning ``config``."""
    issues: list[str] = []
    try:
        ZoneInfo(config.schedule.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        issues.append(f"schedule.timezone is unknown: {config.schedule.timezone!r}")
    if not config.cache.data_dir.strip():
        issues.append("cache.data_dir must not be empty")
    if config.default_user is not None and not config.default_user.strip():
        issues.append("default_user must not be blank")
    if issues:
        raise ConfigError(issues)
    return config


def load_generator_config(path: Path | str) -> GeneratorConfig:
    """Parse a YAML generator configuration using a YAML 1.2 loader.

    An empty file yields the defaults.

    Raises
    ------
    ConfigError
        If the file cannot be read or parsed, or fails schema validation.

    """
    yaml = _yaml()
    path_obj = Path(path)

    try:
        loaded = yaml.load(path_obj.read_text(encoding="utf-8"))
    except (OSError, YAMLError) as exc:
        raise ConfigError([f"failed to parse YAML: {exc}"]) from exc

    if loaded is None:
        loaded = {}

    try:
        config = msgspec.convert(loaded, type=GeneratorConfig)
    except msgspec.ValidationError as exc:
        raise ConfigError([f"schema validation failed: {exc}"]) from exc

    return validate_generator_config(config)


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml
