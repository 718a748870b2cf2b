"""GitHub REST events client.

Events are fetched newest first from one or more endpoints per actor, stopping
each endpoint once the time-window cutoff has been crossed, the API runs out of
``rel="next"`` links, or the page-count ceiling is reached.
"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import dataclasses
import datetime as dt
import enum
import os
import typing as typ
from urllib.parse import quote

import httpx

from ghsummary.common.time import parse_github_datetime

from .errors import ActorNotFoundError, GitHubAPIError, GitHubFetchError
from .models import UNKNOWN_REPO, RawEvent, parse_payload
from .observability import FetchEventLogger

_HTTP_UNAUTHORIZED = 401
_HTTP_FORBIDDEN = 403
_HTTP_NOT_FOUND = 404
_HTTP_SUCCESS_RANGE = range(200, 300)

_DEFAULT_API_URL = "https://api.github.com"
_DEFAULT_MAX_PAGES = 30
_MAX_PAGES_CEILING = 30
_DEFAULT_PAGE_DELAY_S = 0.5

N = typ.TypeVar("N", int, float)


def _parse_env_number(env_var: str, default: N, kind: type[N]) -> N:
    """Read a non-negative number from the environment."""
    raw = os.environ.get(env_var, "").strip()
    if not raw:
        return default
    try:
        value = kind(raw)
    except ValueError as exc:
        msg = f"{env_var} must be a {kind.__name__}, got: {raw!r}"
        raise ValueError(msg) from exc
    if value < 0:
        msg = f"{env_var} must not be negative, got: {value}"
        raise ValueError(msg)
    return value


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubEventsConfig:
    """Configuration for the GitHub REST events client.

    Attributes
    ----------
    token
        Optional bearer token. Without one the public rate limit applies and
        private events are unavailable.
    api_url
        REST API root.
    per_page
        Items requested per page (the API maximum is 100).
    max_pages
        Page-count ceiling per endpoint, applied regardless of Link headers.
        ``from_env`` accepts at most 30.
    page_delay_s
        Pause between consecutive page requests for one endpoint.

    """

    token: str | None = None
    api_url: str = _DEFAULT_API_URL
    timeout_s: float = 20.0
    user_agent: str = "ghsummary/0.1"
    per_page: int = 100
    max_pages: int = _DEFAULT_MAX_PAGES
    page_delay_s: float = _DEFAULT_PAGE_DELAY_S

    @classmethod
    def from_env(cls) -> GitHubEventsConfig:
        """Build configuration from the process environment.

        Reads ``GITHUB_TOKEN`` (optional), ``GHSUMMARY_API_URL``,
        ``GHSUMMARY_MAX_PAGES`` and ``GHSUMMARY_PAGE_DELAY_S``.

        Raises
        ------
        ValueError
            If a numeric variable cannot be parsed, is negative, or
            ``GHSUMMARY_MAX_PAGES`` exceeds the page ceiling of 30.

        """
        token = os.environ.get("GITHUB_TOKEN", "").strip() or None
        api_url = os.environ.get("GHSUMMARY_API_URL", "").strip() or _DEFAULT_API_URL
        max_pages = _parse_env_number("GHSUMMARY_MAX_PAGES", _DEFAULT_MAX_PAGES, int)
        if not 1 <= max_pages <= _MAX_PAGES_CEILING:
            msg = (
                f"GHSUMMARY_MAX_PAGES must be between 1 and {_MAX_PAGES_CEILING}, "
                f"got: {max_pages}"
            )
            raise ValueError(msg)
        page_delay_s = _parse_env_number(
            "GHSUMMARY_PAGE_DELAY_S", _DEFAULT_PAGE_DELAY_S, float
        )
        return cls(
            token=token,
            api_url=api_url.rstrip("/"),
            max_pages=max_pages,
            page_delay_s=page_delay_s,
        )


class EndpointScope(enum.StrEnum):
    """Which events feed an endpoint serves."""

    ORG = "org"
    PUBLIC = "public"
    ALL = "all"


@dataclasses.dataclass(frozen=True, slots=True)
class EventEndpoint:
    """One entry in an actor's endpoint fallback chain."""

    actor: str
    scope: EndpointScope
    path: str


def event_endpoints(
    actor: str, *, org: str | None = None, include_private: bool = False
) -> list[EventEndpoint]:
    """Return the endpoint fallback chain for an actor.

    The org-scoped feed comes first when an organisation is given, then the
    public feed, then the full feed (private and public) when requested.
    """
    user = quote(actor, safe="")
    chain: list[EventEndpoint] = []
    if org:
        chain.append(
            EventEndpoint(
                actor=actor,
                scope=EndpointScope.ORG,
                path=f"/users/{user}/events/orgs/{quote(org, safe='')}",
            )
        )
    chain.append(
        EventEndpoint(
            actor=actor, scope=EndpointScope.PUBLIC, path=f"/users/{user}/events/public"
        )
    )
    if include_private:
        chain.append(
            EventEndpoint(
                actor=actor, scope=EndpointScope.ALL, path=f"/users/{user}/events"
            )
        )
    return chain


class WarningKind(enum.StrEnum):
    """Recoverable conditions that end an endpoint early."""

    ACCESS_LIMITED = "access_limited"
    MALFORMED_RESPONSE = "malformed_response"


@dataclasses.dataclass(frozen=True, slots=True)
class FetchWarning:
    """A degraded endpoint, reported instead of raising."""

    kind: WarningKind
    endpoint: str
    message: str
    status_code: int | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class EventPage:
    """One page of an endpoint after the cutoff filter.

    ``item_count`` counts the raw items in the response, including any that
    could not be parsed; ``events`` holds parsed events at or after the
    cutoff. A page carrying a ``warning`` is always the last page of its
    endpoint.
    """

    endpoint: str
    number: int
    events: tuple[RawEvent, ...] = ()
    item_count: int = 0
    crossed_cutoff: bool = False
    warning: FetchWarning | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class FetchResult:
    """All events fetched for one actor, newest first, without duplicates."""

    actor: str
    events: tuple[RawEvent, ...]
    warnings: tuple[FetchWarning, ...] = ()


def _ensure_tzaware(value: dt.datetime, *, field: str) -> dt.datetime:
    if value.tzinfo is None:
        msg = f"{field} must be timezone-aware"
        raise ValueError(msg)
    return value.astimezone(dt.UTC)


def _repo_name(item: dict[str, typ.Any]) -> str:
    repo = item.get("repo")
    if isinstance(repo, dict):
        name = repo.get("name")
        if isinstance(name, str) and name:
            return name
    return UNKNOWN_REPO


def event_from_item(item: object) -> RawEvent | None:
    """Convert one API event object into a :class:`RawEvent`.

    Items without a kind or a parseable ``created_at`` are unusable for
    classification and bucketing, so they are skipped by returning ``None``.
    """
    if not isinstance(item, dict):
        return None
    kind = item.get("type")
    created_raw = item.get("created_at")
    if not isinstance(kind, str) or not kind or not isinstance(created_raw, str):
        return None
    try:
        created_at = parse_github_datetime(created_raw)
    except ValueError:
        return None

    repo = _repo_name(item)
    raw_id = item.get("id")
    event_id = (
        str(raw_id)
        if isinstance(raw_id, str | int)
        else f"{kind}:{created_raw}:{repo}"
    )
    public = item.get("public")
    return RawEvent(
        id=event_id,
        kind=kind,
        created_at=created_at,
        repo=repo,
        is_public=public if isinstance(public, bool) else True,
        payload=parse_payload(kind, item.get("payload")),
    )


def next_page_url(response: httpx.Response) -> str | None:
    """Return the ``rel="next"`` URL from a response's Link header."""
    next_link = response.links.get("next")
    if not next_link:
        return None
    url = next_link.get("url")
    return url or None


def _json_array(response: httpx.Response) -> list[typ.Any] | None:
    """Return the decoded JSON array, or None when the body is not one."""
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, list) else None


class GitHubEventsClient:
    """Fetch actor events from the GitHub REST API."""

    def __init__(
        self,
        config: GitHubEventsConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        event_logger: FetchEventLogger | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s, follow_redirects=True
        )
        self._events = event_logger or FetchEventLogger()
        self._headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": config.user_agent,
        }
        if config.token:
            self._headers["Authorization"] = f"Bearer {config.token}"

    @property
    def config(self) -> GitHubEventsConfig:
        """Return the client configuration."""
        return self._config

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> typ.Self:
        """Return the client for use in ``async with`` blocks."""
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        """Close owned HTTP resources on exit."""
        await self.aclose()

    def url_for(self, path: str) -> str:
        """Return an absolute API URL for ``path``."""
        return f"{self._config.api_url}{path}"

    async def get(
        self,
        url: str,
        *,
        params: dict[str, typ.Any] | None = None,
        endpoint: str | None = None,
    ) -> httpx.Response:
        """Issue an authenticated GET, wrapping transport failures.

        Raises
        ------
        GitHubAPIError
            If the request fails before a response arrives.

        """
        try:
            return await self._client.get(url, params=params, headers=self._headers)
        except httpx.HTTPError as exc:
            raise GitHubAPIError.transport_error(endpoint or url, exc) from exc

    async def pause_between_pages(self) -> None:
        """Wait the configured inter-page delay."""
        if self._config.page_delay_s > 0:
            await asyncio.sleep(self._config.page_delay_s)

    def _degraded(
        self, response: httpx.Response, endpoint: EventEndpoint
    ) -> FetchWarning | None:
        """Classify a response status, raising for terminal failures."""
        status = response.status_code
        if status in _HTTP_SUCCESS_RANGE:
            return None
        org_hidden = status == _HTTP_NOT_FOUND and endpoint.scope is EndpointScope.ORG
        if status in (_HTTP_UNAUTHORIZED, _HTTP_FORBIDDEN) or org_hidden:
            return FetchWarning(
                kind=WarningKind.ACCESS_LIMITED,
                endpoint=endpoint.path,
                status_code=status,
                message=f"Limited access to {endpoint.path} ({status})",
            )
        if status == _HTTP_NOT_FOUND:
            raise ActorNotFoundError.for_actor(endpoint.actor)
        raise GitHubAPIError.http_error(status, endpoint.path)

    async def iter_pages(
        self, endpoint: EventEndpoint, *, since: dt.datetime
    ) -> cabc.AsyncIterator[EventPage]:
        """Yield cutoff-filtered pages for one endpoint, newest first.

        Pagination stops after an empty page, after the first page where fewer
        events pass the cutoff than the page returned items (the feed is
        reverse-chronological, so all later pages are older still), when no
        ``rel="next"`` link remains, or once ``max_pages`` requests have been
        made.

        Raises
        ------
        ActorNotFoundError
            If the actor's public or full feed answers 404.
        GitHubAPIError
            For any other non-2xx response or a transport failure.

        """
        since_utc = _ensure_tzaware(since, field="since")
        url: str | None = self.url_for(endpoint.path)
        params: dict[str, typ.Any] | None = {
            "per_page": self._config.per_page,
            "page": 1,
        }
        number = 0
        while url is not None:
            if number >= self._config.max_pages:
                self._events.log_endpoint_truncated(
                    endpoint.path, self._config.max_pages
                )
                return
            if number:
                await self.pause_between_pages()
            number += 1

            response = await self.get(url, params=params, endpoint=endpoint.path)
            params = None
            warning = self._degraded(response, endpoint)
            if warning is not None:
                yield EventPage(endpoint=endpoint.path, number=number, warning=warning)
                return

            items = _json_array(response)
            if items is None:
                yield EventPage(
                    endpoint=endpoint.path,
                    number=number,
                    warning=FetchWarning(
                        kind=WarningKind.MALFORMED_RESPONSE,
                        endpoint=endpoint.path,
                        status_code=response.status_code,
                        message=f"Expected a JSON array from {endpoint.path}",
                    ),
                )
                return
            if not items:
                return

            parsed = [
                event for event in map(event_from_item, items) if event is not None
            ]
            retained = tuple(event for event in parsed if event.created_at >= since_utc)
            crossed = len(retained) < len(items)
            self._events.log_page_fetched(
                endpoint.path, number, len(items), len(retained)
            )
            yield EventPage(
                endpoint=endpoint.path,
                number=number,
                events=retained,
                item_count=len(items),
                crossed_cutoff=crossed,
            )
            if crossed:
                return
            url = next_page_url(response)

    async def fetch_actor_events(
        self,
        actor: str,
        *,
        since: dt.datetime,
        org: str | None = None,
        include_private: bool = False,
    ) -> FetchResult:
        """Fetch every event for ``actor`` created at or after ``since``.

        Each endpoint of the fallback chain is walked in turn. Access-limited
        or malformed endpoints contribute the pages fetched before the
        problem and a :class:`FetchWarning`; the remaining endpoints are still
        attempted. Events seen on more than one endpoint are kept once.

        Raises
        ------
        ActorNotFoundError
            If the actor does not exist.
        GitHubAPIError
            For other non-2xx responses, aborting this actor's fetch.

        """
        endpoints = event_endpoints(actor, org=org, include_private=include_private)
        self._events.log_actor_started(actor, [e.path for e in endpoints], since)

        seen: set[str] = set()
        events: list[RawEvent] = []
        warnings: list[FetchWarning] = []
        try:
            for endpoint in endpoints:
                async for page in self.iter_pages(endpoint, since=since):
                    if page.warning is not None:
                        warnings.append(page.warning)
                        self._events.log_endpoint_degraded(page.warning)
                    for event in page.events:
                        if event.id not in seen:
                            seen.add(event.id)
                            events.append(event)
        except GitHubFetchError as exc:
            self._events.log_actor_failed(actor, exc)
            raise

        events.sort(key=lambda event: event.created_at, reverse=True)
        self._events.log_actor_completed(actor, len(events), len(warnings))
        return FetchResult(actor=actor, events=tuple(events), warnings=tuple(warnings))
