"""GitHub events client, member discovery and fetch errors."""

from __future__ import annotations

from .client import (
    EndpointScope,
    EventEndpoint,
    EventPage,
    FetchResult,
    FetchWarning,
    GitHubEventsClient,
    GitHubEventsConfig,
    WarningKind,
    event_endpoints,
)
from .errors import (
    ActorNotFoundError,
    GitHubAPIError,
    GitHubFetchError,
    OrgFetchError,
    OrgNotFoundError,
)
from .members import (
    GitHubOrgMembersProvider,
    MemberListProvider,
    OrgFetchResult,
    fetch_org_events,
)
from .models import RawEvent

__all__ = [
    "ActorNotFoundError",
    "EndpointScope",
    "EventEndpoint",
    "EventPage",
    "FetchResult",
    "FetchWarning",
    "GitHubAPIError",
    "GitHubEventsClient",
    "GitHubEventsConfig",
    "GitHubFetchError",
    "GitHubOrgMembersProvider",
    "MemberListProvider",
    "OrgFetchError",
    "OrgFetchResult",
    "OrgNotFoundError",
    "RawEvent",
    "WarningKind",
    "event_endpoints",
    "fetch_org_events",
]
