"""Construction of the shared service graph from Settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from firstcommit.analyzer import ContributorAnalyzer
from firstcommit.cache import TTLCache
from firstcommit.client import GitHubClient
from firstcommit.governor import RateGovernor
from firstcommit.pagination import CommitPaginator
from firstcommit.state import AppState
from firstcommit.transport import RetryTransport

if TYPE_CHECKING:
    import httpx

    from firstcommit.config import Settings
    from firstcommit.protocols import ClockProtocol


def build_state(
    settings: Settings, http_client: httpx.AsyncClient, clock: ClockProtocol
) -> AppState:
    """Wire governor → transport → client → paginator → analyzer around one cache."""
    cache = TTLCache(settings.cache.ttl_seconds, clock=clock)
    governor = RateGovernor(settings.github.requests_per_hour, clock=clock)
    transport = RetryTransport(
        http_client,
        governor,
        clock=clock,
        max_attempts=settings.retry.max_attempts,
        initial_backoff_seconds=settings.retry.initial_backoff_seconds,
        max_backoff_seconds=settings.retry.max_backoff_seconds,
        max_rate_limit_wait_seconds=settings.retry.max_rate_limit_wait_seconds,
    )
    github = GitHubClient(transport, cache)
    paginator = CommitPaginator(
        github,
        cache,
        clock=clock,
        per_page=settings.github.per_page,
        max_pages=settings.github.max_pages,
        recent_ttl_seconds=settings.cache.recent_commits_ttl_seconds,
        historical_ttl_seconds=settings.cache.historical_commits_ttl_seconds,
    )
    analyzer = ContributorAnalyzer(github, paginator, cache)
    return AppState(
        settings=settings,
        clock=clock,
        http_client=http_client,
        governor=governor,
        cache=cache,
        analyzer=analyzer,
    )
