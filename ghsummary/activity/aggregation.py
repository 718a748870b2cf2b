"""Fold classified events into day, repository and type aggregates.

All accumulators live inside a single :func:`aggregate_events` call, so
concurrent callers never share counting state.

Usage
-----
>>> config = AggregationConfig(timezone="Europe/Paris", window_days=7)
>>> aggregate = aggregate_events(classify_events(result.events), config)
>>> print(render_summary(aggregate))

"""

from __future__ import annotations

import collections
import dataclasses
import datetime as dt
import typing as typ
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ghsummary.github.models import (
    DiscussionPayload,
    IssuePayload,
    PullRequestPayload,
    PushPayload,
)

from .models import (
    PRIVATE_REPOS,
    ActivityAggregate,
    CommitDetail,
    DayBucket,
    EventDetail,
    OrgSummary,
    RankedCount,
    Summary,
)

if typ.TYPE_CHECKING:
    from ghsummary.github.models import CommitRef

    from .models import ClassifiedEvent, MemberActivity

# English names keep day keys independent of the process locale.
_WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
_NO_MESSAGE = "(no message)"
_SHORT_SHA_LENGTH = 7


def parse_type_allowlist(
    raw: str | typ.Iterable[str] | None,
) -> frozenset[str] | None:
    """Normalise an activity-type allowlist.

    Accepts a comma-separated string (``"commit, issue"``) or an iterable of
    names. Returns ``None`` when nothing remains, meaning "no filter".
    """
    if raw is None:
        return None
    names = raw.split(",") if isinstance(raw, str) else raw
    cleaned = frozenset(name.strip().lower() for name in names if name.strip())
    return cleaned or None


@dataclasses.dataclass(frozen=True, slots=True)
class AggregationConfig:
    """Knobs controlling aggregation.

    Attributes
    ----------
    timezone
        IANA zone used to compute day keys.
    window_days
        Configured lookback window; the divisor for ``average_per_day``.
    aggregate_only
        Collapse private repositories into ``"private-repos"`` and drop their
        detail records.
    include_types
        Optional activity-type allowlist; other events are not counted.
    top_repositories
        Length of the repository ranking in the summary.

    """

    timezone: str = "UTC"
    window_days: int = 31
    aggregate_only: bool = False
    include_types: frozenset[str] | None = None
    top_repositories: int = 10

    def __post_init__(self) -> None:
        """Validate the window and timezone and normalise the allowlist."""
        if self.window_days < 1:
            msg = f"window_days must be positive, got: {self.window_days}"
            raise ValueError(msg)
        if self.top_repositories < 0:
            msg = (
                "top_repositories must not be negative, "
                f"got: {self.top_repositories}"
            )
            raise ValueError(msg)
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            msg = f"Unknown timezone: {self.timezone!r}"
            raise ValueError(msg) from exc
        object.__setattr__(
            self, "include_types", parse_type_allowlist(self.include_types)
        )

    @property
    def zone(self) -> ZoneInfo:
        """Return the configured zone."""
        return ZoneInfo(self.timezone)

    def allows(self, activity_type: str) -> bool:
        """Return True when ``activity_type`` passes the allowlist."""
        return self.include_types is None or activity_type in self.include_types


def format_day_key(local_date: dt.date) -> str:
    """Return the ``"<Weekday>, YYYY-MM-DD"`` key for a calendar date.

    >>> format_day_key(dt.date(2024, 1, 1))
    'Monday, 2024-01-01'

    """
    return f"{_WEEKDAYS[local_date.weekday()]}, {local_date.isoformat()}"


def day_key(instant: dt.datetime, zone: dt.tzinfo) -> str:
    """Return the day key of ``instant`` as observed in ``zone``."""
    return format_day_key(instant.astimezone(zone).date())


def rank_counts(
    counts: typ.Mapping[str, int], limit: int | None = None
) -> tuple[RankedCount, ...]:
    """Rank keys by descending count, breaking ties by key.

    >>> rank_counts({"b": 2, "a": 2, "c": 5})
    (RankedCount(key='c', count=5), RankedCount(key='a', count=2), RankedCount(key='b', count=2))

    """  # noqa: E501
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    if limit is not None:
        ordered = ordered[:limit]
    return tuple(RankedCount(key=key, count=count) for key, count in ordered)


def _commit_detail(commit: CommitRef) -> CommitDetail:
    first_line = (commit.message or "").split("\n", 1)[0].strip()
    return CommitDetail(
        message=first_line or _NO_MESSAGE,
        sha=commit.sha[:_SHORT_SHA_LENGTH] if commit.sha else None,
        url=commit.url,
    )


def extract_detail(classified: ClassifiedEvent) -> EventDetail:
    """Build the detail record for one event.

    Push events list their commits; issue, pull request and discussion
    payloads contribute title, URL and number. Missing fields stay unset.
    """
    event = classified.event
    match event.payload:
        case PushPayload(commits=commits):
            return EventDetail(
                activity_type=classified.activity_type,
                repo=event.repo,
                timestamp=event.created_at,
                commits=tuple(_commit_detail(commit) for commit in commits),
            )
        case IssuePayload() | PullRequestPayload() | DiscussionPayload() as item:
            return EventDetail(
                activity_type=classified.activity_type,
                repo=event.repo,
                timestamp=event.created_at,
                title=item.title,
                url=item.url,
                number=item.number,
            )
        case _:
            return EventDetail(
                activity_type=classified.activity_type,
                repo=event.repo,
                timestamp=event.created_at,
            )


@dataclasses.dataclass(slots=True)
class _DayAccumulator:
    key: str
    local_date: dt.date
    total: int = 0
    by_type: collections.Counter[str] = dataclasses.field(
        default_factory=collections.Counter
    )
    by_repo: collections.Counter[str] = dataclasses.field(
        default_factory=collections.Counter
    )
    events: list[EventDetail] = dataclasses.field(default_factory=list)

    def add(self, activity_type: str, repo: str, detail: EventDetail | None) -> None:
        self.total += 1
        self.by_type[activity_type] += 1
        self.by_repo[repo] += 1
        if detail is not None:
            self.events.append(detail)

    def freeze(self) -> DayBucket:
        return DayBucket(
            date=self.key,
            local_date=self.local_date,
            total=self.total,
            by_type=dict(self.by_type),
            by_repo=dict(self.by_repo),
            events=tuple(self.events),
        )


def _summary(
    days: tuple[DayBucket, ...],
    repo_totals: collections.Counter[str],
    type_totals: collections.Counter[str],
    config: AggregationConfig,
) -> Summary:
    total = sum(type_totals.values())
    return Summary(
        total_events=total,
        days_with_activity=len(days),
        window_days=config.window_days,
        average_per_day=total / config.window_days,
        average_per_active_day=total / len(days) if days else 0.0,
        top_repositories=rank_counts(repo_totals, config.top_repositories),
        activity_by_type=rank_counts(type_totals),
    )


def aggregate_events(
    events: typ.Iterable[ClassifiedEvent], config: AggregationConfig
) -> ActivityAggregate:
    """Fold classified events into an :class:`ActivityAggregate`.

    Events outside the allowlist are dropped before counting. With
    ``aggregate_only`` set, private-repository events count towards
    ``"private-repos"`` and produce no detail record. Detail records keep the
    order in which events were supplied.
    """
    zone = config.zone
    days: dict[str, _DayAccumulator] = {}
    repo_totals: collections.Counter[str] = collections.Counter()
    type_totals: collections.Counter[str] = collections.Counter()

    for classified in events:
        activity_type = classified.activity_type
        if not config.allows(activity_type):
            continue

        event = classified.event
        local_date = event.created_at.astimezone(zone).date()
        key = format_day_key(local_date)
        day = days.get(key)
        if day is None:
            day = days[key] = _DayAccumulator(key=key, local_date=local_date)

        redacted = config.aggregate_only and event.is_private
        repo = PRIVATE_REPOS if redacted else event.repo
        day.add(activity_type, repo, None if redacted else extract_detail(classified))
        repo_totals[repo] += 1
        type_totals[activity_type] += 1

    buckets = tuple(
        sorted((day.freeze() for day in days.values()), key=lambda b: b.local_date)
    )
    return ActivityAggregate(
        summary=_summary(buckets, repo_totals, type_totals, config),
        days=buckets,
        repository_totals=dict(repo_totals),
        type_totals=dict(type_totals),
    )


def summarize_members(
    members: typ.Sequence[MemberActivity],
    *,
    window_days: int,
    limit: int = 10,
) -> OrgSummary:
    """Merge member aggregates into organisation-wide rankings.

    Each member aggregate is built independently; this only reads their
    totals, so the merge is order-independent apart from tie-breaking, which
    is by key.
    """
    contributors: collections.Counter[str] = collections.Counter()
    projects: collections.Counter[str] = collections.Counter()
    for member in members:
        contributors[member.login] += member.aggregate.summary.total_events
        projects.update(member.aggregate.repository_totals)

    total = sum(contributors.values())
    return OrgSummary(
        total_events=total,
        window_days=window_days,
        average_per_day=total / window_days if window_days > 0 else 0.0,
        top_contributors=rank_counts(contributors, limit),
        top_projects=rank_counts(projects, limit),
    )
