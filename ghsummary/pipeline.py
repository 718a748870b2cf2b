"""Fetch, classify, aggregate and render in one call per scope.

Each function takes an open :class:`GitHubEventsClient` so callers control
the HTTP client lifetime; the CLI opens one per command.
"""

from __future__ import annotations

import dataclasses
import typing as typ

from ghsummary.activity import (
    MemberActivity,
    aggregate_events,
    classify_events,
    summarize_members,
)
from ghsummary.common.slug import normalise_org_name
from ghsummary.common.time import utcnow, window_start
from ghsummary.github import GitHubOrgMembersProvider, fetch_org_events
from ghsummary.logging import get_logger, log_info, log_warning
from ghsummary.reporting.console import OrgReport
from ghsummary.reporting.snapshot import SnapshotSink, build_metadata, build_snapshot

if typ.TYPE_CHECKING:
    import datetime as dt
    from pathlib import Path

    from ghsummary.activity import ActivityAggregate, AggregationConfig, Summary
    from ghsummary.github import GitHubEventsClient, MemberListProvider
    from ghsummary.reporting.config import GeneratorConfig

logger = get_logger(__name__)


class MissingActorError(ValueError):
    """Raised when no user or organisation was supplied."""

    @classmethod
    def for_option(cls, option: str) -> MissingActorError:
        """Build the error for a missing command-line option."""
        return cls(f"{option} is required")


class NoVisibleMembersError(ValueError):
    """Raised when an organisation lists no members the caller can see."""

    @classmethod
    def for_org(cls, org: str) -> NoVisibleMembersError:
        """Build the error with guidance on names and token scopes."""
        return cls(
            f"No visible members found in {org}. Check the organization name; "
            "private members are only listed when GITHUB_TOKEN has the "
            "read:org scope."
        )


async def summarize_user(
    client: GitHubEventsClient,
    login: str,
    *,
    config: AggregationConfig,
    include_private: bool = False,
    now: dt.datetime | None = None,
) -> ActivityAggregate:
    """Fetch one user's events for the configured window and aggregate them.

    Raises
    ------
    MissingActorError
        If ``login`` is blank.
    GitHubFetchError
        If the user does not exist or the API fails.

    """
    login = login.strip()
    if not login:
        raise MissingActorError.for_option("--user")
    since = window_start(config.window_days, now=now)
    result = await client.fetch_actor_events(
        login, since=since, include_private=include_private
    )
    for warning in result.warnings:
        log_warning(logger, "Partial results for %s: %s", login, warning.message)
    return aggregate_events(classify_events(result.events), config)


async def summarize_org(  # noqa: PLR0913
    client: GitHubEventsClient,
    org: str,
    *,
    config: AggregationConfig,
    include_private: bool = False,
    detailed: bool = False,
    members_provider: MemberListProvider | None = None,
    now: dt.datetime | None = None,
) -> OrgReport:
    """Aggregate every member of ``org`` and merge the rankings.

    ``org`` may be a name or a github.com URL. When no provider is given the
    organisation is verified and its members listed through the API.

    Raises
    ------
    MissingActorError
        If nothing usable remains of ``org``.
    NoVisibleMembersError
        If the organisation lists no visible members.
    OrgNotFoundError
        If the organisation does not exist.
    OrgFetchError
        If every member fetch failed. Partial failures are reported on
        :attr:`OrgReport.failures`.

    """
    display, api_name = normalise_org_name(org)
    if not api_name:
        raise MissingActorError.for_option("--org")

    if members_provider is None:
        provider = GitHubOrgMembersProvider(client)
        display = await provider.verify_org(api_name)
        members_provider = provider
    members = await members_provider.list_members(api_name)
    if not members:
        raise NoVisibleMembersError.for_org(display)

    since = window_start(config.window_days, now=now)
    fetched = await fetch_org_events(
        client,
        members,
        since=since,
        org=api_name,
        include_private=include_private,
    )
    activities = tuple(
        MemberActivity(
            login=result.actor,
            aggregate=aggregate_events(classify_events(result.events), config),
        )
        for result in fetched.members
    )
    return OrgReport(
        org=display,
        members=activities,
        summary=summarize_members(activities, window_days=config.window_days),
        detailed=detailed,
        failures=tuple((login, str(exc)) for login, exc in fetched.failures),
    )


@dataclasses.dataclass(frozen=True, slots=True)
class SnapshotOutcome:
    """Paths written by :func:`generate_snapshot` and the summary they hold."""

    activity_path: Path
    metadata_path: Path
    summary: Summary


async def generate_snapshot(
    client: GitHubEventsClient,
    config: GeneratorConfig,
    *,
    user: str | None = None,
    now: dt.datetime | None = None,
    sink: SnapshotSink | None = None,
) -> SnapshotOutcome:
    """Write ``activity.json`` and ``metadata.json`` for one user.

    ``user`` overrides ``config.default_user``.

    Raises
    ------
    MissingActorError
        If neither ``user`` nor ``default_user`` is set.

    """
    login = (user or config.default_user or "").strip()
    if not login:
        raise MissingActorError.for_option("--user or default_user")
    moment = now if now is not None else utcnow()
    aggregate = await summarize_user(
        client,
        login,
        config=config.aggregation_config(),
        include_private=config.activity.include_private_stats,
        now=moment,
    )
    snapshot = build_snapshot(login, aggregate, generated_at=moment)
    metadata = build_metadata(login, now=moment, frequency=config.schedule.frequency)
    target = sink if sink is not None else SnapshotSink(config.data_dir)
    activity_path, metadata_path = await target.write(snapshot, metadata)
    log_info(
        logger,
        "Wrote snapshot for %s (%d events) to %s",
        login,
        aggregate.summary.total_events,
        target.data_dir,
    )
    return SnapshotOutcome(
        activity_path=activity_path,
        metadata_path=metadata_path,
        summary=aggregate.summary,
    )
