"""Unit tests for event-kind classification."""

from __future__ import annotations

import datetime as dt

import pytest

from ghsummary.activity import ACTIVITY_TYPES, classify_event_kind, classify_events
from ghsummary.github import RawEvent

_NOW = dt.datetime(2024, 1, 1, tzinfo=dt.UTC)


class TestClassifyEventKind:
    """Tests for classify_event_kind."""

    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            ("PushEvent", "commit"),
            ("IssuesEvent", "issue"),
            ("IssueCommentEvent", "issue comment"),
            ("PullRequestEvent", "pull request"),
            ("PullRequestReviewEvent", "pr review"),
            ("PullRequestReviewCommentEvent", "pr review comment"),
            ("CommitCommentEvent", "commit comment"),
            ("DiscussionEvent", "discussion"),
            ("DiscussionCommentEvent", "discussion comment"),
            ("GollumEvent", "wiki"),
            ("CreateEvent", "create"),
            ("DeleteEvent", "delete"),
            ("ReleaseEvent", "release"),
        ],
    )
    def test_known_kinds_use_the_table(self, kind: str, expected: str) -> None:
        """Every table entry maps to its label."""
        assert classify_event_kind(kind) == expected, (
            f"Expected {kind} to classify as {expected!r}"
        )

    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            ("WatchEvent", "watch"),
            ("ForkEvent", "fork"),
            ("MemberEvent", "member"),
            ("SponsorshipThing", "sponsorshipthing"),
            ("Event", "event"),
        ],
    )
    def test_unknown_kinds_fall_back_to_lowercase_stem(
        self, kind: str, expected: str
    ) -> None:
        """Unknown kinds drop a trailing Event and are lowercased."""
        assert classify_event_kind(kind) == expected

    def test_table_covers_expected_kinds(self) -> None:
        """The table lists the thirteen mapped event kinds."""
        assert len(ACTIVITY_TYPES) == 13, "Unexpected classification table size"

    @pytest.mark.parametrize("kind", [*ACTIVITY_TYPES, "WatchEvent", "ForkEvent"])
    def test_classification_is_deterministic(self, kind: str) -> None:
        """Repeated classification yields the same label."""
        assert classify_event_kind(kind) == classify_event_kind(kind)


def test_classify_events_preserves_order() -> None:
    """classify_events annotates each event without reordering."""
    events = [
        RawEvent(id="1", kind="IssuesEvent", created_at=_NOW),
        RawEvent(id="2", kind="PushEvent", created_at=_NOW),
        RawEvent(id="3", kind="WatchEvent", created_at=_NOW),
    ]

    result = classify_events(events)

    assert [item.activity_type for item in result] == ["issue", "commit", "watch"]
    assert [item.event.id for item in result] == ["1", "2", "3"]
