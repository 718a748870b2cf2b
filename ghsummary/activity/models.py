"""Aggregate structures produced from classified GitHub events."""

from __future__ import annotations

import datetime as dt  # noqa: TC003

import msgspec

from ghsummary.github.models import RawEvent  # noqa: TC001

PRIVATE_REPOS = "private-repos"


class ClassifiedEvent(msgspec.Struct, kw_only=True, frozen=True):
    """A raw event annotated with its activity type."""

    event: RawEvent
    activity_type: str


class CommitDetail(msgspec.Struct, kw_only=True, frozen=True):
    """One commit of a push, reduced for display.

    Attributes
    ----------
    message
        First line of the commit message, or ``"(no message)"``.
    sha
        Seven-character abbreviated hash when known.
    url
        Commit API URL when known.

    """

    message: str
    sha: str | None = None
    url: str | None = None


class EventDetail(msgspec.Struct, kw_only=True, frozen=True):
    """Detail record for one non-redacted event.

    Fields other than ``activity_type``, ``repo`` and ``timestamp`` are
    omitted (``None`` or empty) when the payload did not carry them.
    """

    activity_type: str
    repo: str
    timestamp: dt.datetime
    title: str | None = None
    url: str | None = None
    number: int | None = None
    commits: tuple[CommitDetail, ...] = ()


class DayBucket(msgspec.Struct, kw_only=True, frozen=True):
    """Activity for one local calendar day.

    Attributes
    ----------
    date
        Grouping key, ``"<Weekday>, YYYY-MM-DD"`` in the configured timezone.
    local_date
        The calendar date behind ``date``.
    total
        Events counted on this day; equals the sum of ``by_type`` and of
        ``by_repo``.
    by_type
        Event count per activity type.
    by_repo
        Event count per repository (``"private-repos"`` when redacted).
    events
        Detail records in extraction order; redacted events are absent.

    """

    date: str
    local_date: dt.date
    total: int
    by_type: dict[str, int]
    by_repo: dict[str, int]
    events: tuple[EventDetail, ...] = ()


class RankedCount(msgspec.Struct, kw_only=True, frozen=True):
    """A key and its count in a ranking."""

    key: str
    count: int


class Summary(msgspec.Struct, kw_only=True, frozen=True):
    """Headline figures for an aggregation window.

    ``average_per_day`` divides by the configured window length;
    ``average_per_active_day`` divides by the days that had activity.
    """

    total_events: int
    days_with_activity: int
    window_days: int
    average_per_day: float
    average_per_active_day: float
    top_repositories: tuple[RankedCount, ...] = ()
    activity_by_type: tuple[RankedCount, ...] = ()


class ActivityAggregate(msgspec.Struct, kw_only=True, frozen=True):
    """Summary plus day buckets (ascending) and full per-key totals."""

    summary: Summary
    days: tuple[DayBucket, ...] = ()
    repository_totals: dict[str, int] = msgspec.field(default_factory=dict)
    type_totals: dict[str, int] = msgspec.field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """Return True when no event survived filtering."""
        return not self.days


class MemberActivity(msgspec.Struct, kw_only=True, frozen=True):
    """One organisation member's aggregate."""

    login: str
    aggregate: ActivityAggregate


class OrgSummary(msgspec.Struct, kw_only=True, frozen=True):
    """Organisation-wide figures merged from member aggregates."""

    total_events: int
    window_days: int
    average_per_day: float
    top_contributors: tuple[RankedCount, ...] = ()
    top_projects: tuple[RankedCount, ...] = ()
