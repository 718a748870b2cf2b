"""Organisation and repository identifier helpers.

Repository identifiers are GitHub slugs in ``owner/name`` format. They are not
filesystem paths, so they are handled as plain strings rather than with
``pathlib``.
"""

from __future__ import annotations

import re

_SCHEME_AND_HOST = re.compile(r"^https?://[^/]+/")
_GITHUB_WEB = "https://github.com"


def normalise_org_name(raw: str) -> tuple[str, str]:
    """Clean an organisation argument that may be a URL.

    Accepts plain names (``CivicActions``), profile URLs
    (``https://github.com/orgs/civicactions/people``) and trailing-slash
    variants.

    Returns
    -------
    tuple[str, str]
        ``(display, api_name)`` where ``display`` keeps the original case and
        ``api_name`` is lowercased for API calls. Both are empty when nothing
        usable remains.

    Examples
    --------
    >>> normalise_org_name("https://github.com/orgs/CivicActions/")
    ('CivicActions', 'civicactions')

    """
    name = _SCHEME_AND_HOST.sub("", raw.strip())
    name = name.removeprefix("orgs/").rstrip("/")
    parts = [part for part in name.split("/") if part]
    display = parts[0] if parts else name
    return (display, display.lower())


def repo_url(repo: str) -> str:
    """Return the github.com web URL for a repository slug.

    >>> repo_url("octo/reef")
    'https://github.com/octo/reef'

    """
    return f"{_GITHUB_WEB}/{repo}"


def is_repo_slug(value: str) -> bool:
    """Return True when ``value`` looks like ``owner/name``."""
    owner, sep, name = value.partition("/")
    return bool(sep and owner and name and "/" not in name)
