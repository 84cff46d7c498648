"""Sequential, cached aggregation of paged commit listings."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from firstcommit.keys import commits_page_key

if TYPE_CHECKING:
    from firstcommit.client import GitHubClient
    from firstcommit.models.github import Commit
    from firstcommit.protocols import CacheProtocol, ClockProtocol

log = structlog.get_logger()

RECENT_WINDOW = timedelta(hours=24)


def format_timestamp(value: datetime) -> str:
    """ISO 8601 in UTC with a ``Z`` suffix, as GitHub's since/until expect."""
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def commit_page_ttl(
    since: datetime,
    now: datetime,
    *,
    recent_ttl_seconds: float = 300,
    historical_ttl_seconds: float = 3600,
) -> float:
    """Short TTL for windows starting in the last 24h, which may still grow."""
    if since > now - RECENT_WINDOW:
        return recent_ttl_seconds
    return historical_ttl_seconds


class CommitPaginator:
    """Walks commit pages one at a time until a short page or the page cap."""

    def __init__(
        self,
        github: GitHubClient,
        cache: CacheProtocol,
        *,
        clock: ClockProtocol,
        per_page: int = 100,
        max_pages: int = 1000,
        recent_ttl_seconds: float = 300,
        historical_ttl_seconds: float = 3600,
    ) -> None:
        self._github = github
        self._cache = cache
        self._clock = clock
        self._per_page = per_page
        self._max_pages = max_pages
        self._recent_ttl_seconds = recent_ttl_seconds
        self._historical_ttl_seconds = historical_ttl_seconds

    async def fetch_all_commits(
        self, org: str, repo: str, since: datetime, until: datetime
    ) -> list[Commit]:
        since_param = format_timestamp(since)
        until_param = format_timestamp(until)
        commits: list[Commit] = []
        page = 1

        # Pages are fetched strictly in order
        while True:
            batch = await self._fetch_page(org, repo, since, since_param, until_param, page)
            commits.extend(batch)
            if len(batch) < self._per_page:
                break

            page += 1
            if page > self._max_pages:
                log.warning(
                    "pagination_cap_reached",
                    org=org,
                    repo=repo,
                    since=since_param,
                    until=until_param,
                    max_pages=self._max_pages,
                    commits=len(commits),
                )
                break

        log.debug(
            "commits_fetched",
            org=org,
            repo=repo,
            since=since_param,
            until=until_param,
            pages=min(page, self._max_pages),
            commits=len(commits),
        )
        return commits

    async def _fetch_page(
        self,
        org: str,
        repo: str,
        since: datetime,
        since_param: str,
        until_param: str,
        page: int,
    ) -> list[Commit]:
        cache_key = commits_page_key(org, repo, since_param, until_param, page)
        cached = await self._cache.get(cache_key)
        if cached is not None:
            return cached

        batch = await self._github.list_commits(
            org,
            repo,
            since=since_param,
            until=until_param,
            page=page,
            per_page=self._per_page,
        )
        ttl = commit_page_ttl(
            since,
            self._clock.now(),
            recent_ttl_seconds=self._recent_ttl_seconds,
            historical_ttl_seconds=self._historical_ttl_seconds,
        )
        await self._cache.set(cache_key, batch, ttl)
        return batch
