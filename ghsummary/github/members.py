"""Organisation member discovery and concurrent member fetches."""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import dataclasses
import typing as typ
from urllib.parse import quote

from ghsummary.logging import get_logger, log_info, log_warning

from .client import next_page_url
from .errors import GitHubAPIError, OrgFetchError, OrgNotFoundError

if typ.TYPE_CHECKING:
    import datetime as dt

    import httpx

    from .client import FetchResult, GitHubEventsClient

logger = get_logger(__name__)

_HTTP_NOT_FOUND = 404
_DEGRADED_STATUSES = frozenset({401, 403, 404})
_MAX_CONCURRENT_MEMBERS = 4


class MemberListProvider(typ.Protocol):
    """Source of member logins for an organisation."""

    async def list_members(self, org: str) -> list[str]:
        """Return member logins in a stable order."""
        ...


def _is_success(response: httpx.Response) -> bool:
    return 200 <= response.status_code < 300  # noqa: PLR2004


class GitHubOrgMembersProvider:
    """List organisation members through the members and teams APIs.

    Members hidden from the caller (private membership without a token, or a
    token without ``read:org``) are simply absent; 401/403/404 answers on the
    listing endpoints degrade to empty lists with a warning.
    """

    def __init__(self, client: GitHubEventsClient) -> None:
        """Initialise with the events client used for HTTP access."""
        self._client = client

    async def verify_org(self, org: str) -> str:
        """Check that ``org`` exists and return its display name.

        Raises
        ------
        OrgNotFoundError
            If GitHub answers 404 for the organisation.
        GitHubAPIError
            For other failures except 401/403, which only skip verification.

        """
        path = f"/orgs/{quote(org, safe='')}"
        response = await self._client.get(self._client.url_for(path), endpoint=path)
        if response.status_code == _HTTP_NOT_FOUND:
            raise OrgNotFoundError.for_org(org)
        if response.status_code in _DEGRADED_STATUSES:
            log_warning(
                logger,
                "Could not verify organization %s (%d)",
                org,
                response.status_code,
            )
            return org
        if not _is_success(response):
            raise GitHubAPIError.http_error(response.status_code, path)
        try:
            info = response.json()
        except ValueError:
            return org
        if not isinstance(info, dict):
            return org
        name = info.get("name") or info.get("login")
        return name if isinstance(name, str) else org

    async def _iter_list_pages(
        self, path: str, params: dict[str, typ.Any] | None = None
    ) -> cabc.AsyncIterator[list[dict[str, typ.Any]]]:
        """Yield JSON object lists from a paginated listing endpoint."""
        config = self._client.config
        url: str | None = self._client.url_for(path)
        query: dict[str, typ.Any] | None = {
            "per_page": config.per_page,
            **(params or {}),
        }
        pages = 0
        while url is not None and pages < config.max_pages:
            if pages:
                await self._client.pause_between_pages()
            pages += 1
            response = await self._client.get(url, params=query, endpoint=path)
            query = None
            if response.status_code in _DEGRADED_STATUSES:
                log_warning(
                    logger, "Limited access to %s (%d)", path, response.status_code
                )
                return
            if not _is_success(response):
                raise GitHubAPIError.http_error(response.status_code, path)
            try:
                items = response.json()
            except ValueError:
                return
            if not isinstance(items, list) or not items:
                return
            yield [item for item in items if isinstance(item, dict)]
            url = next_page_url(response)

    async def _team_ids(self, org: str) -> list[int]:
        team_ids: list[int] = []
        path = f"/orgs/{quote(org, safe='')}/teams"
        async for teams in self._iter_list_pages(path):
            team_ids.extend(
                team["id"] for team in teams if isinstance(team.get("id"), int)
            )
        return team_ids

    async def list_members(self, org: str) -> list[str]:
        """Return org members followed by team members not already listed."""
        logins: dict[str, None] = {}

        def _collect(items: list[dict[str, typ.Any]]) -> None:
            for item in items:
                login = item.get("login")
                if isinstance(login, str) and login:
                    logins.setdefault(login, None)

        members_path = f"/orgs/{quote(org, safe='')}/members"
        async for page in self._iter_list_pages(members_path, {"role": "all"}):
            _collect(page)
        for team_id in await self._team_ids(org):
            async for page in self._iter_list_pages(f"/teams/{team_id}/members"):
                _collect(page)

        log_info(logger, "Found %d members in %s", len(logins), org)
        return list(logins)


@dataclasses.dataclass(frozen=True, slots=True)
class OrgFetchResult:
    """Per-member fetch results in member order.

    ``failures`` holds ``(login, exception)`` pairs for members whose fetch
    was aborted; their activity is absent from ``members``.
    """

    org: str
    members: tuple[FetchResult, ...]
    failures: tuple[tuple[str, Exception], ...] = ()


async def fetch_org_events(  # noqa: PLR0913
    client: GitHubEventsClient,
    members: typ.Sequence[str],
    *,
    since: dt.datetime,
    org: str,
    include_private: bool = False,
    max_concurrency: int = _MAX_CONCURRENT_MEMBERS,
) -> OrgFetchResult:
    """Fetch every member's events concurrently.

    Each member is fetched by its own task into its own result, bounded by a
    semaphore; results are merged after all tasks finish.

    A failing member does not abort the others: its error is logged and kept
    in :attr:`OrgFetchResult.failures`.

    Raises
    ------
    OrgFetchError
        If every member fetch failed; wraps every failure.

    """
    semaphore = asyncio.Semaphore(max_concurrency)

    async def bounded_fetch(login: str) -> FetchResult:
        async with semaphore:
            return await client.fetch_actor_events(
                login, since=since, org=org, include_private=include_private
            )

    gathered = await asyncio.gather(
        *(bounded_fetch(login) for login in members), return_exceptions=True
    )

    results: list[FetchResult] = []
    failures: list[tuple[str, Exception]] = []
    for login, outcome in zip(members, gathered, strict=True):
        if isinstance(outcome, Exception):
            failures.append((login, outcome))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results.append(outcome)

    for login, exc in failures:
        log_warning(logger, "Skipping %s in %s: %s", login, org, exc)
    if failures and not results:
        raise OrgFetchError(failures)
    return OrgFetchResult(org=org, members=tuple(results), failures=tuple(failures))
