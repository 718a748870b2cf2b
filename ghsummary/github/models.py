"""Typed models for raw GitHub events.

The events API returns loosely structured payloads whose shape depends on the
event kind. Only the sub-fields needed for detail extraction are kept, in a
tagged union so callers match on the variant instead of probing dictionaries.
"""

from __future__ import annotations

import datetime as dt  # noqa: TC003
import typing as typ

import msgspec

from ghsummary.common.slug import is_repo_slug

UNKNOWN_REPO = "unknown"


class CommitRef(msgspec.Struct, kw_only=True, frozen=True):
    """One commit listed in a push payload."""

    sha: str | None = None
    message: str | None = None
    url: str | None = None


class PushPayload(msgspec.Struct, kw_only=True, frozen=True, tag="push"):
    """Payload of a ``PushEvent``."""

    commits: tuple[CommitRef, ...] = ()


class IssuePayload(msgspec.Struct, kw_only=True, frozen=True, tag="issue"):
    """Payload carrying an ``issue`` sub-object."""

    number: int | None = None
    title: str | None = None
    url: str | None = None


class PullRequestPayload(
    msgspec.Struct, kw_only=True, frozen=True, tag="pull_request"
):
    """Payload carrying a ``pull_request`` sub-object."""

    number: int | None = None
    title: str | None = None
    url: str | None = None


class DiscussionPayload(msgspec.Struct, kw_only=True, frozen=True, tag="discussion"):
    """Payload carrying a ``discussion`` sub-object."""

    number: int | None = None
    title: str | None = None
    url: str | None = None


class OtherPayload(msgspec.Struct, kw_only=True, frozen=True, tag="other"):
    """Payload with nothing used for detail extraction."""


EventPayload = (
    PushPayload | IssuePayload | PullRequestPayload | DiscussionPayload | OtherPayload
)

ItemPayload = IssuePayload | PullRequestPayload | DiscussionPayload


class RawEvent(msgspec.Struct, kw_only=True, frozen=True):
    """A GitHub event as received from the events API.

    Attributes
    ----------
    id
        GitHub event identifier, used for de-duplication across endpoints.
    kind
        Event type string such as ``PushEvent``.
    created_at
        Creation instant in UTC.
    repo
        Repository slug, ``"unknown"`` when the API omitted it.
    is_public
        The API ``public`` flag.
    payload
        Kind-specific payload variant.

    """

    id: str
    kind: str
    created_at: dt.datetime
    repo: str = UNKNOWN_REPO
    is_public: bool = True
    payload: EventPayload = msgspec.field(default_factory=OtherPayload)

    @property
    def is_private(self) -> bool:
        """Return True when the event happened in a private repository."""
        return not self.is_public and is_repo_slug(self.repo)


def _sub_object(raw: dict[str, typ.Any], key: str) -> dict[str, typ.Any] | None:
    value = raw.get(key)
    return value if isinstance(value, dict) else None


def _opt_str(raw: dict[str, typ.Any], key: str) -> str | None:
    value = raw.get(key)
    return value if isinstance(value, str) else None


def _opt_int(raw: dict[str, typ.Any], key: str) -> int | None:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _commit_ref(raw: object) -> CommitRef | None:
    if not isinstance(raw, dict):
        return None
    return CommitRef(
        sha=_opt_str(raw, "sha"),
        message=_opt_str(raw, "message"),
        url=_opt_str(raw, "url"),
    )


def _item_fields(raw: dict[str, typ.Any]) -> dict[str, typ.Any]:
    return {
        "number": _opt_int(raw, "number"),
        "title": _opt_str(raw, "title"),
        "url": _opt_str(raw, "html_url"),
    }


def parse_payload(kind: str, raw: object) -> EventPayload:
    """Select the payload variant for an event.

    Push events keep their commit list. For other kinds a ``discussion``
    sub-object takes precedence over ``pull_request``, which takes precedence
    over ``issue``; review and comment events therefore resolve to the item
    they are attached to.
    """
    if not isinstance(raw, dict):
        return PushPayload() if kind == "PushEvent" else OtherPayload()

    if kind == "PushEvent":
        commits = raw.get("commits")
        refs = (
            tuple(ref for ref in map(_commit_ref, commits) if ref is not None)
            if isinstance(commits, list)
            else ()
        )
        return PushPayload(commits=refs)

    if (discussion := _sub_object(raw, "discussion")) is not None:
        return DiscussionPayload(**_item_fields(discussion))
    if (pull_request := _sub_object(raw, "pull_request")) is not None:
        return PullRequestPayload(**_item_fields(pull_request))
    if (issue := _sub_object(raw, "issue")) is not None:
        return IssuePayload(**_item_fields(issue))
    return OtherPayload()
