"""Shared test fixtures for the firstcommit test suite."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from firstcommit.analyzer import ContributorAnalyzer
from firstcommit.cache import TTLCache
from firstcommit.client import GitHubClient
from firstcommit.config import GitHubSettings
from firstcommit.governor import RateGovernor
from firstcommit.pagination import CommitPaginator
from firstcommit.transport import RetryTransport, build_http_client

API_URL = "https://api.github.com"
START_TIME = datetime(2024, 1, 15, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    """ClockProtocol implementation whose sleeps advance time instantly."""

    def __init__(self, start: datetime = START_TIME) -> None:
        self._now = start
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += timedelta(seconds=seconds)

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(max(seconds, 0.0))
        await asyncio.sleep(0)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> TTLCache:
    return TTLCache(86400, clock=clock)


@pytest.fixture()
def governor(clock: FakeClock) -> RateGovernor:
    return RateGovernor(5000, clock=clock)


@pytest.fixture()
async def http_client():
    async with build_http_client(GitHubSettings(api_url=API_URL)) as client:
        yield client


@pytest.fixture()
def transport(http_client: httpx.AsyncClient, governor: RateGovernor, clock: FakeClock) -> RetryTransport:
    return RetryTransport(http_client, governor, clock=clock, max_attempts=3)


@pytest.fixture()
def github(transport: RetryTransport, cache: TTLCache) -> GitHubClient:
    return GitHubClient(transport, cache)


@pytest.fixture()
def paginator(github: GitHubClient, cache: TTLCache, clock: FakeClock) -> CommitPaginator:
    return CommitPaginator(github, cache, clock=clock)


@pytest.fixture()
def analyzer(github: GitHubClient, paginator: CommitPaginator, cache: TTLCache) -> ContributorAnalyzer:
    return ContributorAnalyzer(github, paginator, cache)


def _commit_payload(sha: str, login: str | None, date: str = "2021-06-15T10:00:00Z") -> dict:
    return {
        "sha": sha,
        "commit": {"author": {"name": login or "anonymous", "email": "dev@example.com", "date": date}},
        "author": {"login": login, "id": 1} if login is not None else None,
    }


@pytest.fixture()
def commit_payload() -> Callable[..., dict]:
    """Factory for list-commits items in GitHub's wire format."""
    return _commit_payload


@pytest.fixture()
def commit_page() -> Callable[[int], list[dict]]:
    """Factory for a page of ``n`` distinct commits."""

    def _page(n: int, offset: int = 0) -> list[dict]:
        return [_commit_payload(f"sha{offset + i}", f"user{offset + i}") for i in range(n)]

    return _page


@pytest.fixture()
def repo_payload() -> Callable[..., dict]:
    def _payload(name: str = "widgets", created_at: str = "2020-01-01T00:00:00Z") -> dict:
        return {
            "name": name,
            "full_name": f"octo/{name}",
            "created_at": created_at,
            "default_branch": "main",
        }

    return _payload
