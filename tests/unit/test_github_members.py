"""Unit tests for organisation member discovery and concurrent fetches."""

from __future__ import annotations

import asyncio
import datetime as dt

import pytest

from ghsummary.github import (
    ActorNotFoundError,
    FetchResult,
    GitHubAPIError,
    GitHubOrgMembersProvider,
    OrgFetchError,
    OrgNotFoundError,
    fetch_org_events,
)
from tests.helpers.github_events import (
    API_URL,
    GitHubStub,
    error,
    issue_item,
    json_page,
)

_NOW = dt.datetime(2024, 1, 31, 12, tzinfo=dt.UTC)
_SINCE = _NOW - dt.timedelta(days=7)


def _logins(*names: str) -> list[dict[str, object]]:
    return [{"login": name} for name in names]


class TestVerifyOrg:
    """Tests for GitHubOrgMembersProvider.verify_org."""

    @pytest.mark.asyncio
    async def test_returns_display_name(self) -> None:
        """The organisation name is preferred over its login."""
        stub = GitHubStub().add(
            "/orgs/civic", json_page({"login": "civic", "name": "Civic Actions"})
        )
        async with stub.client() as client:
            name = await GitHubOrgMembersProvider(client).verify_org("civic")

        assert name == "Civic Actions"

    @pytest.mark.asyncio
    async def test_missing_org_raises(self) -> None:
        """404 means the organisation does not exist."""
        stub = GitHubStub()
        async with stub.client() as client:
            with pytest.raises(OrgNotFoundError, match="civic"):
                await GitHubOrgMembersProvider(client).verify_org("civic")

    @pytest.mark.asyncio
    async def test_forbidden_skips_verification(self) -> None:
        """403 leaves the name unchanged instead of failing."""
        stub = GitHubStub().add("/orgs/civic", error(403))
        async with stub.client() as client:
            name = await GitHubOrgMembersProvider(client).verify_org("civic")

        assert name == "civic"

    @pytest.mark.asyncio
    async def test_server_error_raises(self) -> None:
        """Other failures raise GitHubAPIError."""
        stub = GitHubStub().add("/orgs/civic", error(502))
        async with stub.client() as client:
            with pytest.raises(GitHubAPIError):
                await GitHubOrgMembersProvider(client).verify_org("civic")


class TestListMembers:
    """Tests for GitHubOrgMembersProvider.list_members."""

    @pytest.mark.asyncio
    async def test_merges_members_and_team_members(self) -> None:
        """Team members not in the member list are appended once."""
        stub = (
            GitHubStub()
            .add(
                "/orgs/civic/members",
                json_page(
                    _logins("alice", "bob"),
                    next_url=f"{API_URL}/orgs/civic/members?page=2",
                ),
                json_page(_logins("carol")),
            )
            .add("/orgs/civic/teams", json_page([{"id": 11}, {"id": 12}]))
            .add("/teams/11/members", json_page(_logins("bob", "dave")))
            .add("/teams/12/members", json_page(_logins("erin", "alice")))
        )
        async with stub.client() as client:
            members = await GitHubOrgMembersProvider(client).list_members("civic")

        assert members == ["alice", "bob", "carol", "dave", "erin"]
        assert stub.requests[0].params["role"] == "all"

    @pytest.mark.asyncio
    async def test_hidden_listings_degrade_to_empty(self) -> None:
        """401/403 on listing endpoints give an empty member list."""
        stub = (
            GitHubStub()
            .add("/orgs/civic/members", error(401))
            .add("/orgs/civic/teams", error(403))
        )
        async with stub.client() as client:
            members = await GitHubOrgMembersProvider(client).list_members("civic")

        assert members == []


class TestFetchOrgEvents:
    """Tests for fetch_org_events."""

    @pytest.mark.asyncio
    async def test_results_follow_member_order(self) -> None:
        """Per-member results are returned in member order."""
        stub = (
            GitHubStub()
            .add("/users/alice/events/orgs/civic", json_page([]))
            .add(
                "/users/alice/events/public",
                json_page([issue_item(_NOW - dt.timedelta(hours=1))]),
            )
            .add("/users/bob/events/orgs/civic", json_page([]))
            .add("/users/bob/events/public", json_page([]))
        )
        async with stub.client() as client:
            result = await fetch_org_events(
                client, ["bob", "alice"], since=_SINCE, org="civic"
            )

        assert result.org == "civic"
        assert [member.actor for member in result.members] == ["bob", "alice"]
        assert [len(member.events) for member in result.members] == [0, 1]

    @pytest.mark.asyncio
    async def test_failing_members_do_not_abort_the_others(self) -> None:
        """Failed members are reported alongside the successful results."""
        stub = (
            GitHubStub()
            .add("/users/alice/events/orgs/civic", json_page([]))
            .add(
                "/users/alice/events/public",
                json_page([issue_item(_NOW - dt.timedelta(hours=1))]),
            )
            .add("/users/bob/events/orgs/civic", json_page([]))
            .add("/users/bob/events/public", error(500))
        )
        async with stub.client() as client:
            result = await fetch_org_events(
                client, ["alice", "bob", "ghost"], since=_SINCE, org="civic"
            )

        assert [member.actor for member in result.members] == ["alice"]
        assert len(result.members[0].events) == 1
        failures = dict(result.failures)
        assert list(failures) == ["bob", "ghost"], "Expected failures in member order"
        assert isinstance(failures["bob"], GitHubAPIError)
        assert isinstance(failures["ghost"], ActorNotFoundError)

    @pytest.mark.asyncio
    async def test_raises_when_every_member_fails(self) -> None:
        """OrgFetchError wraps every failure when no member succeeded."""
        stub = (
            GitHubStub()
            .add("/users/bob/events/orgs/civic", json_page([]))
            .add("/users/bob/events/public", error(502))
        )
        async with stub.client() as client:
            with pytest.raises(OrgFetchError) as excinfo:
                await fetch_org_events(
                    client, ["bob", "ghost"], since=_SINCE, org="civic"
                )

        assert [login for login, _ in excinfo.value.failures] == ["bob", "ghost"]

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self) -> None:
        """No more than max_concurrency member fetches run at once."""
        active = 0
        peak = 0

        class _SlowClient:
            async def fetch_actor_events(
                self,
                actor: str,
                *,
                since: dt.datetime,
                org: str | None = None,
                include_private: bool = False,
            ) -> FetchResult:
                nonlocal active, peak
                active += 1
                peak = max(peak, active)
                await asyncio.sleep(0.01)
                active -= 1
                return FetchResult(actor=actor, events=())

        result = await fetch_org_events(
            _SlowClient(),  # type: ignore[arg-type]
            [f"user{index}" for index in range(6)],
            since=_SINCE,
            org="civic",
            max_concurrency=2,
        )

        assert len(result.members) == 6
        assert peak <= 2, f"Expected at most 2 concurrent fetches, saw {peak}"
