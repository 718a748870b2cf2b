"""Plain-text renderers for activity aggregates.

Renderers only read the aggregate they are given and build their output from
a list of lines, so identical input always renders identical text.

Usage
-----
>>> from ghsummary.reporting.console import render_summary
>>> print(render_summary(aggregate))

"""

from __future__ import annotations

import dataclasses
import typing as typ

from ghsummary.activity.aggregation import rank_counts
from ghsummary.activity.models import PRIVATE_REPOS
from ghsummary.common.slug import repo_url

if typ.TYPE_CHECKING:
    from ghsummary.activity.models import (
        ActivityAggregate,
        DayBucket,
        EventDetail,
        MemberActivity,
        OrgSummary,
        Summary,
    )

_BARE_COMMIT = "commit"


def _no_activity(window_days: int) -> str:
    return f"No activity found in the last {window_days} days."


def _format_average(value: float) -> str:
    return f"{value:.1f}"


def _render_day_summary(
    lines: list[str],
    day: DayBucket,
    *,
    top_types: int,
    top_repositories: int,
) -> None:
    """Append the date line, top types and top repositories for one day."""
    types = ", ".join(
        f"{ranked.count} {ranked.key}"
        for ranked in rank_counts(day.by_type, top_types)
    )
    repos = ", ".join(
        ranked.key for ranked in rank_counts(day.by_repo, top_repositories)
    )
    lines.append(day.date)
    lines.append(f"  {day.total} events: {types}")
    lines.append(f"  Repositories: {repos}")
    lines.append("")


def detail_lines(detail: EventDetail) -> list[str]:
    """Return the display lines for one detail record, without indentation.

    Pushes yield one ``commit: <message>`` line per commit, or a bare
    ``commit`` when the push listed none. Other records yield
    ``<type>[: <title>]`` and, when known, the URL on its own line.
    """
    if detail.commits:
        return [f"commit: {commit.message}" for commit in detail.commits]
    if detail.activity_type == _BARE_COMMIT:
        return [_BARE_COMMIT]
    headline = detail.activity_type
    if detail.title:
        headline = f"{headline}: {detail.title}"
    lines = [headline]
    if detail.url:
        lines.append(detail.url)
    return lines


def _render_day_detailed(lines: list[str], day: DayBucket) -> None:
    """Append every detail record of one day, grouped by repository."""
    by_repo: dict[str, list[EventDetail]] = {}
    for detail in day.events:
        by_repo.setdefault(detail.repo, []).append(detail)

    lines.append(day.date)
    for repo in sorted(by_repo):
        for detail in by_repo[repo]:
            if detail.commits:
                lines.extend(f"  {repo} {line}" for line in detail_lines(detail))
                continue
            headline, *rest = detail_lines(detail)
            lines.append(f"  {repo} {headline}")
            lines.extend(f"    {line}" for line in rest)
    withheld = day.total - len(day.events)
    if withheld:
        lines.append(f"  {withheld} events in private repositories")
    lines.append("")


def _render_ranking(
    lines: list[str],
    heading: str,
    ranking: typ.Iterable[tuple[str, int]],
    *,
    link: typ.Callable[[str], str] | None = None,
) -> None:
    entries = list(ranking)
    if not entries:
        return
    lines.append(heading)
    for position, (key, count) in enumerate(entries, start=1):
        lines.append(f"  {position}. {key}: {count} events")
        if link is not None and key != PRIVATE_REPOS:
            lines.append(f"     {link(key)}")


def render_overview(summary: Summary, *, title: str = "Activity Summary") -> str:
    """Render the headline figures of an aggregation window."""
    if summary.total_events == 0:
        return _no_activity(summary.window_days)
    lines = [
        f"=== {title} ===",
        f"Total events in the last {summary.window_days} days: "
        f"{summary.total_events}",
        f"Days with activity: {summary.days_with_activity}",
        f"Average events per day: {_format_average(summary.average_per_day)}",
    ]
    _render_ranking(
        lines,
        "Top repositories:",
        ((ranked.key, ranked.count) for ranked in summary.top_repositories),
    )
    if summary.activity_by_type:
        lines.append("Activity by type:")
        lines.extend(
            f"  {ranked.key}: {ranked.count}" for ranked in summary.activity_by_type
        )
    return "\n".join(lines)


def render_summary(
    aggregate: ActivityAggregate,
    *,
    top_types: int = 3,
    top_repositories: int = 2,
) -> str:
    """Render one block per day with top types and repositories.

    Parameters
    ----------
    aggregate
        Output of :func:`ghsummary.activity.aggregate_events`.
    top_types
        Number of activity types listed per day.
    top_repositories
        Number of repositories listed per day.

    Returns
    -------
    str
        Day blocks in ascending date order followed by the overview, or a
        single "No activity found" line.

    """
    if aggregate.is_empty:
        return _no_activity(aggregate.summary.window_days)
    lines: list[str] = []
    for day in aggregate.days:
        _render_day_summary(
            lines, day, top_types=top_types, top_repositories=top_repositories
        )
    lines.append(render_overview(aggregate.summary))
    return "\n".join(lines)


def render_detailed(aggregate: ActivityAggregate) -> str:
    """Render every retained event, grouped by day and repository."""
    if aggregate.is_empty:
        return _no_activity(aggregate.summary.window_days)
    lines: list[str] = []
    for day in aggregate.days:
        _render_day_detailed(lines, day)
    return "\n".join(lines).rstrip("\n")


@dataclasses.dataclass(frozen=True, slots=True)
class OrgReport:
    """Inputs for an organisation report.

    Attributes
    ----------
    org
        Display name of the organisation.
    members
        Member aggregates in member-list order.
    summary
        Organisation-wide figures from
        :func:`ghsummary.activity.summarize_members`.
    detailed
        Render member sections in detailed rather than summary mode.
    failures
        ``(login, message)`` pairs for members whose activity could not be
        fetched.

    """

    org: str
    members: tuple[MemberActivity, ...]
    summary: OrgSummary
    detailed: bool = False
    failures: tuple[tuple[str, str], ...] = ()


def _render_member(lines: list[str], member: MemberActivity, *, detailed: bool) -> None:
    lines.append(f"--- {member.login} ---")
    aggregate = member.aggregate
    if aggregate.is_empty:
        lines.append(_no_activity(aggregate.summary.window_days))
        lines.append("")
        return
    for day in aggregate.days:
        if detailed:
            _render_day_detailed(lines, day)
        else:
            _render_day_summary(lines, day, top_types=3, top_repositories=2)


def _failure_line(login: str, message: str) -> str:
    return f"Warning: skipped {login}: {message}"


def render_org_report(report: OrgReport) -> str:
    """Render member sections followed by the organisation overview.

    Members whose fetch failed are listed as warning lines, after the member
    sections or ahead of the no-activity message.
    """
    summary = report.summary
    failure_lines = [
        _failure_line(login, message) for login, message in report.failures
    ]
    if summary.total_events == 0:
        return "\n".join(
            [
                *failure_lines,
                f"No activity found for {report.org} "
                f"in the last {summary.window_days} days.",
            ]
        )

    lines = [f"=== {report.org} ===", ""]
    for member in report.members:
        _render_member(lines, member, detailed=report.detailed)
    if failure_lines:
        lines.extend(failure_lines)
        lines.append("")

    lines.append(f"=== {report.org} Overview ===")
    lines.append(
        f"Total events in the last {summary.window_days} days: "
        f"{summary.total_events}"
    )
    lines.append(f"Members: {len(report.members)}")
    lines.append(f"Average events per day: {_format_average(summary.average_per_day)}")
    _render_ranking(
        lines,
        "Top contributors:",
        ((ranked.key, ranked.count) for ranked in summary.top_contributors),
    )
    _render_ranking(
        lines,
        "Top projects:",
        ((ranked.key, ranked.count) for ranked in summary.top_projects),
        link=repo_url,
    )
    return "\n".join(lines)
