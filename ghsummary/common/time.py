"""Common time utilities."""

from __future__ import annotations

import datetime as dt


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def window_start(days: int, *, now: dt.datetime | None = None) -> dt.datetime:
    """Return the instant ``days`` days before ``now`` (defaults to the clock)."""
    reference = now if now is not None else utcnow()
    return reference - dt.timedelta(days=days)


def parse_github_datetime(value: str) -> dt.datetime:
    """Parse a GitHub ``created_at`` string into an aware UTC datetime.

    Raises
    ------
    ValueError
        If the value is not ISO 8601 or carries no timezone.

    """
    parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        msg = f"GitHub datetime missing timezone: {value}"
        raise ValueError(msg)
    return parsed.astimezone(dt.UTC)
