"""Map GitHub event kinds onto human-readable activity types."""

from __future__ import annotations

import typing as typ

from .models import ClassifiedEvent

if typ.TYPE_CHECKING:
    from ghsummary.github.models import RawEvent

_EVENT_SUFFIX = "Event"

ACTIVITY_TYPES: dict[str, str] = {
    "PushEvent": "commit",
    "IssuesEvent": "issue",
    "IssueCommentEvent": "issue comment",
    "PullRequestEvent": "pull request",
    "PullRequestReviewEvent": "pr review",
    "PullRequestReviewCommentEvent": "pr review comment",
    "CommitCommentEvent": "commit comment",
    "DiscussionEvent": "discussion",
    "DiscussionCommentEvent": "discussion comment",
    "GollumEvent": "wiki",
    "CreateEvent": "create",
    "DeleteEvent": "delete",
    "ReleaseEvent": "release",
}


def classify_event_kind(kind: str) -> str:
    """Return the activity type for a raw event kind.

    Known kinds use :data:`ACTIVITY_TYPES`. Anything else has a trailing
    ``Event`` removed and is lowercased, so ``WatchEvent`` becomes ``watch``.

    >>> classify_event_kind("PullRequestReviewEvent")
    'pr review'
    >>> classify_event_kind("ForkEvent")
    'fork'

    """
    if (label := ACTIVITY_TYPES.get(kind)) is not None:
        return label
    stem = kind.removesuffix(_EVENT_SUFFIX)
    return (stem or kind).lower()


def classify_events(events: typ.Iterable[RawEvent]) -> list[ClassifiedEvent]:
    """Annotate each event with its activity type, preserving order."""
    return [
        ClassifiedEvent(event=event, activity_type=classify_event_kind(event.kind))
        for event in events
    ]
