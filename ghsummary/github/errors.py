"""Errors raised while fetching GitHub activity."""

from __future__ import annotations

import typing as typ


class GitHubFetchError(RuntimeError):
    """Base class for fetch failures that abort an actor's pipeline."""


class ActorNotFoundError(GitHubFetchError):
    """Raised when GitHub reports that a user does not exist."""

    def __init__(self, message: str, *, actor: str) -> None:
        """Initialise with a message and the missing actor login."""
        self.actor = actor
        super().__init__(message)

    @classmethod
    def for_actor(cls, actor: str) -> ActorNotFoundError:
        """Return an error for a missing user login."""
        return cls(f"GitHub user not found: {actor}", actor=actor)


class OrgNotFoundError(ActorNotFoundError):
    """Raised when GitHub reports that an organisation does not exist."""

    @classmethod
    def for_org(cls, org: str) -> OrgNotFoundError:
        """Return an error for a missing organisation."""
        return cls(f"GitHub organization not found: {org}", actor=org)


class GitHubAPIError(GitHubFetchError):
    """Raised when GitHub returns a non-2xx response other than 401/403/404."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str | None = None,
    ) -> None:
        """Initialise with a message, HTTP status code and endpoint path."""
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, endpoint: str) -> GitHubAPIError:
        """Return an error for a failed REST request."""
        return cls(
            f"GitHub API HTTP {status_code} for {endpoint}",
            status_code=status_code,
            endpoint=endpoint,
        )

    @classmethod
    def transport_error(cls, endpoint: str, exc: Exception) -> GitHubAPIError:
        """Return an error for a request that never produced a response."""
        return cls(f"GitHub API request to {endpoint} failed: {exc}", endpoint=endpoint)


class OrgFetchError(GitHubFetchError):
    """Raised when every member fetch fails during an org summary.

    Attributes
    ----------
    failures
        ``(login, exception)`` pairs in member order.

    """

    failures: tuple[tuple[str, Exception], ...]

    def __init__(self, failures: typ.Sequence[tuple[str, Exception]]) -> None:
        """Initialise with the member failures collected after gathering."""
        self.failures = tuple(failures)
        logins = ", ".join(login for login, _ in self.failures)
        super().__init__(
            f"Activity fetch failed for {len(self.failures)} member(s): {logins}"
        )
