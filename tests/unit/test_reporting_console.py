"""Unit tests for the plain-text renderers."""

from __future__ import annotations

import datetime as dt

from ghsummary.activity import (
    ActivityAggregate,
    AggregationConfig,
    MemberActivity,
    aggregate_events,
    summarize_members,
)
from ghsummary.reporting.console import (
    OrgReport,
    render_detailed,
    render_org_report,
    render_overview,
    render_summary,
)
from tests.helpers.github_events import classified, event_item, issue_item, push_item

_JAN_1 = dt.datetime(2024, 1, 1, 12, tzinfo=dt.UTC)
_JAN_2 = _JAN_1 + dt.timedelta(days=1)


def _aggregate(*items: dict[str, object], **config: object) -> ActivityAggregate:
    return aggregate_events(classified(*items), AggregationConfig(**config))


class TestRenderDetailed:
    """Tests for render_detailed."""

    def test_single_push(self) -> None:
        """A single push renders its commit under the day key."""
        aggregate = _aggregate(push_item(_JAN_1, "fix bug"))

        assert render_detailed(aggregate) == (
            "Monday, 2024-01-01\n  octo/reef commit: fix bug"
        )

    def test_items_render_title_and_url(self) -> None:
        """Issue-like events show the title and an indented URL."""
        aggregate = _aggregate(issue_item(_JAN_1, number=7, title="Leaky valve"))

        assert render_detailed(aggregate).splitlines() == [
            "Monday, 2024-01-01",
            "  octo/reef issue: Leaky valve",
            "    https://github.com/octo/reef/issues/7",
        ]

    def test_push_without_commits_is_bare(self) -> None:
        """A push listing no commits renders a bare commit line."""
        aggregate = _aggregate(push_item(_JAN_1))

        assert render_detailed(aggregate).splitlines()[1] == "  octo/reef commit"

    def test_events_without_items_show_the_type(self) -> None:
        """Other kinds render just their activity type."""
        aggregate = _aggregate(event_item("WatchEvent", _JAN_1))

        assert render_detailed(aggregate).splitlines()[1] == "  octo/reef watch"

    def test_repositories_are_sorted_within_a_day(self) -> None:
        """Repositories are listed alphabetically, events in input order."""
        aggregate = _aggregate(
            push_item(_JAN_1, "z first", repo="octo/zebra"),
            push_item(_JAN_1, "a second", repo="octo/anchor"),
            push_item(_JAN_1, "a third", repo="octo/anchor"),
        )

        assert render_detailed(aggregate).splitlines() == [
            "Monday, 2024-01-01",
            "  octo/anchor commit: a second",
            "  octo/anchor commit: a third",
            "  octo/zebra commit: z first",
        ]

    def test_redacted_events_are_counted(self) -> None:
        """Private events hidden by aggregate-only mode are summarised."""
        aggregate = _aggregate(
            push_item(_JAN_1, "secret", repo="octo/vault", public=False),
            aggregate_only=True,
        )

        assert render_detailed(aggregate).splitlines() == [
            "Monday, 2024-01-01",
            "  1 events in private repositories",
        ]

    def test_days_are_separated(self) -> None:
        """Each day is followed by a blank line except the last."""
        aggregate = _aggregate(push_item(_JAN_2, "later"), push_item(_JAN_1, "early"))

        assert render_detailed(aggregate) == (
            "Monday, 2024-01-01\n"
            "  octo/reef commit: early\n"
            "\n"
            "Tuesday, 2024-01-02\n"
            "  octo/reef commit: later"
        )

    def test_no_activity(self) -> None:
        """An empty aggregate renders the no-activity message."""
        aggregate = _aggregate(window_days=7)

        assert render_detailed(aggregate) == "No activity found in the last 7 days."


class TestRenderSummary:
    """Tests for render_summary."""

    def test_day_lines_and_overview(self) -> None:
        """Each day lists its top types and repositories, then the overview."""
        aggregate = _aggregate(
            push_item(_JAN_1, "a"),
            push_item(_JAN_1, "b", repo="octo/kelp"),
            issue_item(_JAN_1),
            window_days=1,
        )

        assert render_summary(aggregate).splitlines() == [
            "Monday, 2024-01-01",
            "  3 events: 2 commit, 1 issue",
            "  Repositories: octo/reef, octo/kelp",
            "",
            "=== Activity Summary ===",
            "Total events in the last 1 days: 3",
            "Days with activity: 1",
            "Average events per day: 3.0",
            "Top repositories:",
            "  1. octo/reef: 2 events",
            "  2. octo/kelp: 1 events",
            "Activity by type:",
            "  commit: 2",
            "  issue: 1",
        ]

    def test_limits_types_and_repositories(self) -> None:
        """Only the top three types and top two repositories are listed."""
        aggregate = _aggregate(
            push_item(_JAN_1, "a", repo="o/a"),
            issue_item(_JAN_1, repo="o/b"),
            event_item("WatchEvent", _JAN_1, repo="o/c"),
            event_item("ForkEvent", _JAN_1, repo="o/d"),
        )

        lines = render_summary(aggregate).splitlines()

        assert lines[1] == "  4 events: 1 commit, 1 fork, 1 issue"
        assert lines[2] == "  Repositories: o/a, o/b"

    def test_no_activity(self) -> None:
        """An empty aggregate renders the no-activity message only."""
        assert render_summary(_aggregate()) == "No activity found in the last 31 days."

    def test_rendering_is_repeatable(self) -> None:
        """Rendering the same aggregate twice gives identical text."""
        aggregate = _aggregate(push_item(_JAN_1, "a"), issue_item(_JAN_2))
        assert render_summary(aggregate) == render_summary(aggregate)


def test_overview_rounds_average() -> None:
    """The average is printed with one decimal."""
    aggregate = _aggregate(push_item(_JAN_1, "a"), window_days=3)

    overview = render_overview(aggregate.summary)

    assert "Average events per day: 0.3" in overview.splitlines()


def test_org_report() -> None:
    """Member sections precede the organisation overview."""
    config = {"window_days": 10}
    alice = _aggregate(
        push_item(_JAN_1, "a", repo="civic/site"),
        push_item(_JAN_1, "b", repo="civic/site"),
        **config,
    )
    bob = _aggregate(**config)
    members = (
        MemberActivity(login="alice", aggregate=alice),
        MemberActivity(login="bob", aggregate=bob),
    )
    report = OrgReport(
        org="Civic",
        members=members,
        summary=summarize_members(members, window_days=10),
    )

    assert render_org_report(report).splitlines() == [
        "=== Civic ===",
        "",
        "--- alice ---",
        "Monday, 2024-01-01",
        "  2 events: 2 commit",
        "  Repositories: civic/site",
        "",
        "--- bob ---",
        "No activity found in the last 10 days.",
        "",
        "=== Civic Overview ===",
        "Total events in the last 10 days: 2",
        "Members: 2",
        "Average events per day: 0.2",
        "Top contributors:",
        "  1. alice: 2 events",
        "  2. bob: 0 events",
        "Top projects:",
        "  1. civic/site: 2 events",
        "     https://github.com/civic/site",
    ]


def test_org_report_without_activity() -> None:
    """An organisation with no events renders one line."""
    report = OrgReport(
        org="Civic", members=(), summary=summarize_members((), window_days=5)
    )

    assert render_org_report(report) == (
        "No activity found for Civic in the last 5 days."
    )


def test_org_report_lists_skipped_members() -> None:
    """Members whose fetch failed appear as warnings before the overview."""
    alice = _aggregate(push_item(_JAN_1, "a", repo="civic/site"), window_days=10)
    members = (MemberActivity(login="alice", aggregate=alice),)
    report = OrgReport(
        org="Civic",
        members=members,
        summary=summarize_members(members, window_days=10),
        failures=(("bob", "GitHub API HTTP 502 for /users/bob/events/public"),),
    )

    lines = render_org_report(report).splitlines()

    warning = "Warning: skipped bob: GitHub API HTTP 502 for /users/bob/events/public"
    assert warning in lines
    assert lines.index(warning) < lines.index("=== Civic Overview ===")
    assert "Members: 1" in lines


def test_org_report_without_activity_keeps_warnings() -> None:
    """Skipped members are still reported when nothing else was found."""
    report = OrgReport(
        org="Civic",
        members=(),
        summary=summarize_members((), window_days=5),
        failures=(("bob", "boom"),),
    )

    assert render_org_report(report).splitlines() == [
        "Warning: skipped bob: boom",
        "No activity found for Civic in the last 5 days.",
    ]
