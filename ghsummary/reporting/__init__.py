"""Console rendering, JSON snapshots and generator configuration."""

from __future__ import annotations

from .config import ConfigError, GeneratorConfig, load_generator_config
from .console import (
    OrgReport,
    render_detailed,
    render_org_report,
    render_overview,
    render_summary,
)
from .snapshot import (
    ActivitySnapshot,
    SnapshotMetadata,
    SnapshotSink,
    build_metadata,
    build_snapshot,
    next_scheduled_date,
)

__all__ = [
    "ActivitySnapshot",
    "ConfigError",
    "GeneratorConfig",
    "OrgReport",
    "SnapshotMetadata",
    "SnapshotSink",
    "build_metadata",
    "build_snapshot",
    "load_generator_config",
    "next_scheduled_date",
    "render_detailed",
    "render_org_report",
    "render_overview",
    "render_summary",
]
