r"""JSON snapshots of an activity aggregate for static dashboards.

The generator writes two documents into its data directory::

    {data_dir}/activity.json
    {data_dir}/metadata.json

Usage
-----
>>> snapshot = build_snapshot("octocat", aggregate, generated_at=utcnow())
>>> metadata = build_metadata("octocat", now=utcnow(), frequency="bimonthly")
>>> asyncio.run(SnapshotSink(Path("_data")).write(snapshot, metadata))

"""

from __future__ import annotations

import asyncio
import calendar
import datetime as dt
import typing as typ

import msgspec

if typ.TYPE_CHECKING:
    from pathlib import Path

    from ghsummary.activity.models import ActivityAggregate, DayBucket, EventDetail

ACTIVITY_FILENAME = "activity.json"
METADATA_FILENAME = "metadata.json"
_BIMONTHLY_DAY = 15


class SnapshotCommit(msgspec.Struct, kw_only=True, frozen=True, omit_defaults=True):
    """Commit line of a push event."""

    message: str
    sha: str | None = None


class SnapshotEvent(
    msgspec.Struct, kw_only=True, frozen=True, omit_defaults=True, rename="camel"
):
    """Detail record of one retained event."""

    activity_type: str = msgspec.field(name="type")
    repo: str
    timestamp: dt.datetime
    commits: list[SnapshotCommit] | None = None
    title: str | None = None
    number: int | None = None
    url: str | None = None


class SnapshotDay(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Counts and detail records for one local day."""

    date: str
    total: int
    by_type: dict[str, int]
    by_repo: dict[str, int]
    events: list[SnapshotEvent]


class RepositoryCount(msgspec.Struct, kw_only=True, frozen=True):
    """Entry of the repository ranking."""

    repo: str
    count: int


class TypeCount(msgspec.Struct, kw_only=True, frozen=True):
    """Entry of the activity-type ranking."""

    activity_type: str = msgspec.field(name="type")
    count: int


class SnapshotPeriod(msgspec.Struct, kw_only=True, frozen=True):
    """Window covered by the snapshot."""

    days: int
    start: dt.date
    end: dt.date


class SnapshotSummary(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Headline figures; ``average_per_day`` is rounded to one decimal."""

    total_events: int
    total_days_with_activity: int
    average_per_day: float
    top_repositories: list[RepositoryCount]
    activity_by_type: list[TypeCount]


class ActivitySnapshot(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Contents of ``activity.json``."""

    user: str
    generated: dt.datetime
    period: SnapshotPeriod
    summary: SnapshotSummary
    daily_activity: list[SnapshotDay]


class SnapshotMetadata(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Contents of ``metadata.json``."""

    last_update: dt.datetime
    user: str
    next_scheduled: dt.date


def _snapshot_event(detail: EventDetail) -> SnapshotEvent:
    commits = (
        [
            SnapshotCommit(message=commit.message, sha=commit.sha)
            for commit in detail.commits
        ]
        if detail.commits
        else None
    )
    return SnapshotEvent(
        activity_type=detail.activity_type,
        repo=detail.repo,
        timestamp=detail.timestamp,
        commits=commits,
        title=detail.title,
        number=detail.number,
        url=detail.url,
    )


def _snapshot_day(day: DayBucket) -> SnapshotDay:
    return SnapshotDay(
        date=day.date,
        total=day.total,
        by_type=dict(day.by_type),
        by_repo=dict(day.by_repo),
        events=[_snapshot_event(detail) for detail in day.events],
    )


def build_snapshot(
    user: str, aggregate: ActivityAggregate, *, generated_at: dt.datetime
) -> ActivitySnapshot:
    """Convert an aggregate into the ``activity.json`` document.

    Parameters
    ----------
    user
        Login the aggregate describes.
    aggregate
        Output of :func:`ghsummary.activity.aggregate_events`.
    generated_at
        Timezone-aware generation instant; the period ends on its UTC date and
        starts ``window_days`` earlier.

    """
    summary = aggregate.summary
    generated = generated_at.astimezone(dt.UTC)
    start = generated - dt.timedelta(days=summary.window_days)
    return ActivitySnapshot(
        user=user,
        generated=generated,
        period=SnapshotPeriod(
            days=summary.window_days, start=start.date(), end=generated.date()
        ),
        summary=SnapshotSummary(
            total_events=summary.total_events,
            total_days_with_activity=summary.days_with_activity,
            average_per_day=round(summary.average_per_day, 1),
            top_repositories=[
                RepositoryCount(repo=ranked.key, count=ranked.count)
                for ranked in summary.top_repositories
            ],
            activity_by_type=[
                TypeCount(activity_type=ranked.key, count=ranked.count)
                for ranked in summary.activity_by_type
            ],
        ),
        daily_activity=[_snapshot_day(day) for day in aggregate.days],
    )


def _last_day_of_month(year: int, month: int) -> dt.date:
    return dt.date(year, month, calendar.monthrange(year, month)[1])


def _next_month(today: dt.date) -> tuple[int, int]:
    if today.month == 12:  # noqa: PLR2004
        return today.year + 1, 1
    return today.year, today.month + 1


def next_scheduled_date(frequency: str, today: dt.date) -> dt.date:
    """Return the next regeneration date after ``today``.

    ``bimonthly`` runs on the 15th and on the last day of each month;
    anything else is treated as ``monthly``, running on the last day.

    >>> next_scheduled_date("bimonthly", dt.date(2024, 2, 20))
    datetime.date(2024, 2, 29)
    >>> next_scheduled_date("monthly", dt.date(2024, 1, 31))
    datetime.date(2024, 2, 29)

    """
    month_end = _last_day_of_month(today.year, today.month)
    next_year, next_month = _next_month(today)
    if frequency == "bimonthly":
        fifteenth = today.replace(day=_BIMONTHLY_DAY)
        if today < fifteenth:
            return fifteenth
        if today < month_end:
            return month_end
        return dt.date(next_year, next_month, _BIMONTHLY_DAY)
    if today < month_end:
        return month_end
    return _last_day_of_month(next_year, next_month)


def build_metadata(user: str, *, now: dt.datetime, frequency: str) -> SnapshotMetadata:
    """Return the ``metadata.json`` document for a run at ``now``."""
    last_update = now.astimezone(dt.UTC)
    return SnapshotMetadata(
        last_update=last_update,
        user=user,
        next_scheduled=next_scheduled_date(frequency, last_update.date()),
    )


def encode_document(document: msgspec.Struct) -> bytes:
    """Encode a snapshot document as indented JSON."""
    return msgspec.json.format(msgspec.json.encode(document), indent=2)


class SnapshotSink:
    """Write snapshot documents into a data directory.

    Parameters
    ----------
    data_dir
        Directory receiving ``activity.json`` and ``metadata.json``; created
        when missing.

    """

    def __init__(self, data_dir: Path) -> None:
        """Initialise the sink with its output directory."""
        self._data_dir = data_dir

    @property
    def data_dir(self) -> Path:
        """Return the output directory."""
        return self._data_dir

    async def write(
        self, snapshot: ActivitySnapshot, metadata: SnapshotMetadata
    ) -> tuple[Path, Path]:
        """Write both documents, returning their paths."""
        await asyncio.to_thread(self._data_dir.mkdir, parents=True, exist_ok=True)

        activity_path = self._data_dir / ACTIVITY_FILENAME
        metadata_path = self._data_dir / METADATA_FILENAME

        await asyncio.to_thread(activity_path.write_bytes, encode_document(snapshot))
        await asyncio.to_thread(metadata_path.write_bytes, encode_document(metadata))
        return activity_path, metadata_path
