"""Structured log events for GitHub activity fetches.

Every event is emitted through femtologging with a bracketed event name
followed by ``key=value`` pairs so log aggregators can parse them.
"""

from __future__ import annotations

import enum
import typing as typ

from ghsummary.logging import get_logger, log_debug, log_error, log_info, log_warning

from .errors import ActorNotFoundError, GitHubAPIError

if typ.TYPE_CHECKING:
    import datetime as dt

    from .client import FetchWarning

logger = get_logger(__name__)

_HTTP_SERVER_ERROR_THRESHOLD = 500


class FetchEventType(enum.StrEnum):
    """Structured log event types for actor fetches."""

    ACTOR_STARTED = "fetch.actor.started"
    ACTOR_COMPLETED = "fetch.actor.completed"
    ACTOR_FAILED = "fetch.actor.failed"
    PAGE_FETCHED = "fetch.page.fetched"
    ENDPOINT_DEGRADED = "fetch.endpoint.degraded"
    ENDPOINT_TRUNCATED = "fetch.endpoint.truncated"


class ErrorCategory(enum.StrEnum):
    """Categories used when reporting a failed fetch."""

    NOT_FOUND = "not_found"
    TRANSIENT = "transient"
    CLIENT_ERROR = "client_error"
    UNKNOWN = "unknown"


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorise a fetch exception for log routing."""
    if isinstance(exc, ActorNotFoundError):
        return ErrorCategory.NOT_FOUND
    if isinstance(exc, GitHubAPIError):
        if exc.status_code is None or exc.status_code >= _HTTP_SERVER_ERROR_THRESHOLD:
            return ErrorCategory.TRANSIENT
        return ErrorCategory.CLIENT_ERROR
    return ErrorCategory.UNKNOWN


class FetchEventLogger:
    """Emit structured fetch events via femtologging."""

    def log_actor_started(
        self, actor: str, endpoints: typ.Sequence[str], since: dt.datetime
    ) -> None:
        """Log the start of an actor fetch."""
        log_info(
            logger,
            "[%s] actor=%s endpoints=%d since=%s",
            FetchEventType.ACTOR_STARTED,
            actor,
            len(endpoints),
            since.isoformat(),
        )

    def log_page_fetched(
        self, endpoint: str, page: int, items: int, retained: int
    ) -> None:
        """Log one fetched page at DEBUG level."""
        log_debug(
            logger,
            "[%s] endpoint=%s page=%d items=%d retained=%d",
            FetchEventType.PAGE_FETCHED,
            endpoint,
            page,
            items,
            retained,
        )

    def log_endpoint_degraded(self, warning: FetchWarning) -> None:
        """Log an endpoint that stopped early because of a recoverable error."""
        log_warning(
            logger,
            "[%s] endpoint=%s kind=%s status_code=%s message=%s",
            FetchEventType.ENDPOINT_DEGRADED,
            warning.endpoint,
            warning.kind,
            warning.status_code,
            warning.message,
        )

    def log_endpoint_truncated(self, endpoint: str, max_pages: int) -> None:
        """Log an endpoint that hit the page-count ceiling."""
        log_warning(
            logger,
            "[%s] endpoint=%s max_pages=%d",
            FetchEventType.ENDPOINT_TRUNCATED,
            endpoint,
            max_pages,
        )

    def log_actor_completed(self, actor: str, events: int, warnings: int) -> None:
        """Log a completed actor fetch."""
        log_info(
            logger,
            "[%s] actor=%s events=%d warnings=%d",
            FetchEventType.ACTOR_COMPLETED,
            actor,
            events,
            warnings,
        )

    def log_actor_failed(self, actor: str, error: BaseException) -> None:
        """Log a failed actor fetch with its error category."""
        log_error(
            logger,
            "[%s] actor=%s error_type=%s error_category=%s error_message=%s",
            FetchEventType.ACTOR_FAILED,
            actor,
            type(error).__name__,
            categorize_error(error),
            str(error),
        )
