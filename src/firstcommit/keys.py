"""Cache key construction.

Keys read ``kind:part:part...``. Each part is percent-encoded so a ``:`` inside
a value can never be confused with a separator, which keeps every builder
injective over its parameters.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

if TYPE_CHECKING:
    from firstcommit.models.analysis import Period


def _key(kind: str, *parts: object) -> str:
    return ":".join([kind, *(quote(str(part), safe="") for part in parts)])


def repository_key(org: str, repo: str) -> str:
    return _key("repo", org, repo)


def commits_page_key(org: str, repo: str, since: str, until: str, page: int) -> str:
    return _key("commits", org, repo, since, until, page)


def contributors_key(org: str, repo: str, period: Period) -> str:
    """``contributors:airbnb:javascript:2023:all`` or ``...:2023:06``."""
    return _key("contributors", org, repo, period.year, period.cache_part)
