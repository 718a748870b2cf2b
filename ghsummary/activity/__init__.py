"""Event classification and aggregation."""

from __future__ import annotations

from .aggregation import (
    AggregationConfig,
    aggregate_events,
    day_key,
    extract_detail,
    format_day_key,
    parse_type_allowlist,
    rank_counts,
    summarize_members,
)
from .classification import ACTIVITY_TYPES, classify_event_kind, classify_events
from .models import (
    PRIVATE_REPOS,
    ActivityAggregate,
    ClassifiedEvent,
    CommitDetail,
    DayBucket,
    EventDetail,
    MemberActivity,
    OrgSummary,
    RankedCount,
    Summary,
)

__all__ = [
    "ACTIVITY_TYPES",
    "PRIVATE_REPOS",
    "ActivityAggregate",
    "AggregationConfig",
    "ClassifiedEvent",
    "CommitDetail",
    "DayBucket",
    "EventDetail",
    "MemberActivity",
    "OrgSummary",
    "RankedCount",
    "Summary",
    "aggregate_events",
    "classify_event_kind",
    "classify_events",
    "day_key",
    "extract_detail",
    "format_day_key",
    "parse_type_allowlist",
    "rank_counts",
    "summarize_members",
]
