"""Command-line interface for GitHub activity summaries.

Examples
--------
Summarise a user over the last week in Paris time::

    ghsummary user --user octocat --days 7 --timezone Europe/Paris

List every event of an organisation's members::

    ghsummary org --org https://github.com/orgs/civicactions --detailed

Refresh the dashboard snapshot described by ``config.yml``::

    ghsummary generate --config config.yml

"""

from __future__ import annotations

import asyncio
import enum
import os
import sys
import typing as typ
from pathlib import Path

from cyclopts import App, Parameter

from ghsummary import __version__
from ghsummary.activity import AggregationConfig, parse_type_allowlist
from ghsummary.github import GitHubEventsClient, GitHubEventsConfig, GitHubFetchError
from ghsummary.logging import (
    configure_logging,
    get_logger,
    log_exception,
    log_warning,
)
from ghsummary.pipeline import (
    MissingActorError,
    NoVisibleMembersError,
    generate_snapshot,
    summarize_org,
    summarize_user,
)
from ghsummary.reporting.config import ConfigError, load_generator_config
from ghsummary.reporting.console import (
    render_detailed,
    render_org_report,
    render_overview,
    render_summary,
)

logger = get_logger(__name__)

app = App(
    name="ghsummary",
    help="Summarise GitHub activity by day, repository and activity type",
    version=__version__,
)


class ExitCode(enum.IntEnum):
    """Process exit statuses."""

    OK = 0
    USAGE = 1
    FETCH_FAILED = 2
    INTERNAL = 3


def _configure_logging() -> None:
    raw_level = os.environ.get("GHSUMMARY_LOG_LEVEL", "WARNING")
    normalized, invalid = configure_logging(raw_level)
    if invalid:
        log_warning(
            logger,
            "Invalid GHSUMMARY_LOG_LEVEL %r, falling back to %s",
            raw_level,
            normalized,
        )


def _open_client() -> GitHubEventsClient:
    """Return a client configured from the environment."""
    return GitHubEventsClient(GitHubEventsConfig.from_env())


def _fail(code: ExitCode, message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return int(code)


def _run(
    action: typ.Callable[[GitHubEventsClient], typ.Awaitable[str | None]],
) -> int:
    """Run ``action`` with a fresh client and map failures to exit codes."""

    try:
        client = _open_client()
    except ValueError as exc:
        return _fail(ExitCode.USAGE, str(exc))

    async def _with_client() -> str | None:
        async with client:
            return await action(client)

    try:
        output = asyncio.run(_with_client())
    except (MissingActorError, NoVisibleMembersError, ConfigError) as exc:
        return _fail(ExitCode.USAGE, str(exc))
    except GitHubFetchError as exc:
        return _fail(ExitCode.FETCH_FAILED, str(exc))
    except Exception as exc:  # noqa: BLE001 - last-resort handler for the CLI
        log_exception(logger, "Unexpected failure", exc)
        return _fail(ExitCode.INTERNAL, f"unexpected failure: {exc}")

    if output:
        print(output)
    return int(ExitCode.OK)


def _aggregation_config(
    *, days: int, timezone: str, include: str | None, aggregate_only: bool = False
) -> AggregationConfig:
    return AggregationConfig(
        timezone=timezone,
        window_days=days,
        aggregate_only=aggregate_only,
        include_types=parse_type_allowlist(include),
    )


@app.command
def user(  # noqa: PLR0913
    *,
    user: typ.Annotated[str, Parameter(env_var="GHSUMMARY_USER")] = "",
    days: int = 31,
    timezone: typ.Annotated[str, Parameter(env_var="GHSUMMARY_TIMEZONE")] = "UTC",
    include_private: bool = False,
    detailed: bool = False,
    include: str | None = None,
) -> int:
    """Summarise one user's recent GitHub activity.

    Args:
        user: GitHub login to summarise.
        days: Number of days to look back.
        timezone: IANA timezone used to group events by day.
        include_private: Also read the authenticated events feed
            (requires GITHUB_TOKEN).
        detailed: List every event instead of per-day counts.
        include: Comma-separated activity types to keep, e.g. "commit,issue".

    Returns:
        Exit code (0 for success, non-zero for failure).

    """
    _configure_logging()
    if not user.strip():
        return _fail(ExitCode.USAGE, "--user <github-username> is required")
    try:
        config = _aggregation_config(days=days, timezone=timezone, include=include)
    except ValueError as exc:
        return _fail(ExitCode.USAGE, str(exc))

    async def action(client: GitHubEventsClient) -> str:
        aggregate = await summarize_user(
            client, user, config=config, include_private=include_private
        )
        return render_detailed(aggregate) if detailed else render_summary(aggregate)

    return _run(action)


@app.command
def org(  # noqa: PLR0913
    *,
    org: typ.Annotated[str, Parameter(env_var="GHSUMMARY_ORG")] = "",
    days: int = 31,
    timezone: typ.Annotated[str, Parameter(env_var="GHSUMMARY_TIMEZONE")] = "UTC",
    include_private: bool = False,
    detailed: bool = False,
    include: str | None = None,
) -> int:
    """Summarise the recent activity of an organisation's members.

    Args:
        org: Organisation name or github.com URL.
        days: Number of days to look back.
        timezone: IANA timezone used to group events by day.
        include_private: Also read each member's authenticated events feed
            (requires GITHUB_TOKEN).
        detailed: List every event instead of per-day counts.
        include: Comma-separated activity types to keep, e.g. "commit,issue".

    Returns:
        Exit code (0 for success, non-zero for failure).

    """
    _configure_logging()
    if not org.strip():
        return _fail(ExitCode.USAGE, "--org <github-organization> is required")
    try:
        config = _aggregation_config(days=days, timezone=timezone, include=include)
    except ValueError as exc:
        return _fail(ExitCode.USAGE, str(exc))

    async def action(client: GitHubEventsClient) -> str:
        report = await summarize_org(
            client,
            org,
            config=config,
            include_private=include_private,
            detailed=detailed,
        )
        return render_org_report(report)

    return _run(action)


@app.command
def generate(
    *,
    config: typ.Annotated[Path, Parameter(env_var="GHSUMMARY_CONFIG")] = Path(
        "config.yml"
    ),
    user: str | None = None,
) -> int:
    """Write activity.json and metadata.json for a dashboard.

    Args:
        config: Generator configuration file.
        user: Login to summarise instead of the configured default_user.

    Returns:
        Exit code (0 for success, non-zero for failure).

    """
    _configure_logging()
    try:
        settings = load_generator_config(config)
        settings.aggregation_config()
    except (ConfigError, ValueError) as exc:
        return _fail(ExitCode.USAGE, str(exc))

    async def action(client: GitHubEventsClient) -> str:
        outcome = await generate_snapshot(client, settings, user=user)
        return "\n".join(
            [
                render_overview(outcome.summary),
                "",
                f"Data written to {outcome.activity_path}",
                f"Metadata written to {outcome.metadata_path}",
            ]
        )

    return _run(action)


def main() -> int:
    """Entry point for the CLI."""
    return app()


if __name__ == "__main__":
    sys.exit(main())
