"""New-contributor analysis.

A contributor is "new" in a period when their first commit to the repository
falls inside it. The analyzer builds the set of logins seen between repository
creation and the period start (the baseline), then counts logins in the period
that are not in it. Commits GitHub cannot link to an account carry no login
and never enter either set.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import structlog

from firstcommit.errors import ErrorCode, FirstCommitError
from firstcommit.keys import contributors_key
from firstcommit.models.analysis import build_result, parse_period

if TYPE_CHECKING:
    from collections.abc import Iterable

    from firstcommit.client import GitHubClient
    from firstcommit.models.analysis import AnalysisResult, Period
    from firstcommit.models.github import Commit
    from firstcommit.pagination import CommitPaginator
    from firstcommit.protocols import CacheProtocol

log = structlog.get_logger()

ANALYSIS_ERROR_PREFIX = "Failed to analyze contributors"


def collect_logins(commits: Iterable[Commit]) -> set[str]:
    return {commit.author_login for commit in commits if commit.author_login}


def count_new_contributors(baseline: set[str], commits: Iterable[Commit]) -> int:
    """Count logins in ``commits`` absent from ``baseline``. Mutates ``baseline``."""
    new_logins: set[str] = set()
    for commit in commits:
        login = commit.author_login
        if login and login not in baseline:
            new_logins.add(login)
            baseline.add(login)
    return len(new_logins)


class ContributorAnalyzer:
    def __init__(
        self,
        github: GitHubClient,
        paginator: CommitPaginator,
        cache: CacheProtocol,
        *,
        ttl_seconds: float | None = None,
    ) -> None:
        self._github = github
        self._paginator = paginator
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    async def analyze(
        self, org: str, repo: str, year: str, month: str | None = None
    ) -> AnalysisResult:
        """Count first-time contributors to ``org/repo`` in a year or month."""
        try:
            period = parse_period(year, month)
        except ValueError as exc:
            raise FirstCommitError(
                code=ErrorCode.INVALID_INPUT,
                message=str(exc),
                suggestion="Provide a numeric year and, optionally, a month between 1 and 12.",
                recoverable=False,
            ) from exc
        return await self.analyze_period(org, repo, period)

    async def analyze_period(self, org: str, repo: str, period: Period) -> AnalysisResult:
        cache_key = contributors_key(org, repo, period)
        cached = await self._cache.get(cache_key)
        if cached is not None:
            log.info("analysis_cache_hit", org=org, repo=repo, key=cache_key)
            return cached

        try:
            new_contributors = await self._count(org, repo, period)
        except FirstCommitError as exc:
            log.warning("analysis_failed", org=org, repo=repo, code=exc.code, message=exc.message)
            raise exc.wrap(ANALYSIS_ERROR_PREFIX) from exc

        result = build_result(org, repo, period, new_contributors)
        await self._cache.set(cache_key, result, self._ttl_seconds)
        log.info("analysis_complete", org=org, repo=repo, key=cache_key, new_contributors=new_contributors)
        return result

    def cache_stats(self) -> dict:
        stats = self._cache.stats()
        return {"keys": stats.keys, "stats": stats.model_dump()}

    async def _count(self, org: str, repo: str, period: Period) -> int:
        repository = await self._github.get_repository(org, repo)
        created_at = repository.created_at

        start, end = period.bounds()
        if start < created_at:
            start = created_at

        if start > end:
            # The whole period predates the repository
            log.info(
                "analysis_period_before_creation",
                org=org,
                repo=repo,
                created_at=created_at,
                period_end=end,
            )
            return 0

        baseline: set[str] = set()
        if start > created_at:
            # GitHub's until is inclusive; stop one second short of the period
            before = await self._paginator.fetch_all_commits(
                org, repo, created_at, start - timedelta(seconds=1)
            )
            baseline = collect_logins(before)

        during = await self._paginator.fetch_all_commits(org, repo, start, end)
        return count_new_contributors(baseline, during)
