"""Unit tests for firstcommit.pagination."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import httpx
import respx
from structlog.testing import capture_logs

from firstcommit.pagination import CommitPaginator, commit_page_ttl, format_timestamp

if TYPE_CHECKING:
    from conftest import FakeClock

    from firstcommit.cache import TTLCache
    from firstcommit.client import GitHubClient

COMMITS_URL = "https://api.github.com/repos/octo/widgets/commits"
SINCE = datetime(2021, 6, 1, tzinfo=UTC)
UNTIL = datetime(2021, 6, 30, 23, 59, 59, tzinfo=UTC)


def _pages(page_sizes: list[int], commit_page: Callable[..., list[dict]]):
    """side_effect serving ``page_sizes[page - 1]`` commits for each page."""

    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        size = page_sizes[page - 1] if page <= len(page_sizes) else 0
        return httpx.Response(200, json=commit_page(size, offset=(page - 1) * 100))

    return handler


class TestFormatTimestamp:
    def test_utc_z_suffix(self) -> None:
        assert format_timestamp(datetime(2021, 6, 1, 8, 5, 3, 999, tzinfo=UTC)) == "2021-06-01T08:05:03Z"


class TestCommitPageTtl:
    NOW = datetime(2024, 1, 15, 12, tzinfo=UTC)

    def test_recent_window_gets_short_ttl(self) -> None:
        assert commit_page_ttl(self.NOW - timedelta(hours=2), self.NOW) == 300

    def test_historical_window_gets_one_hour(self) -> None:
        assert commit_page_ttl(self.NOW - timedelta(days=3), self.NOW) == 3600

    def test_exactly_24h_ago_is_historical(self) -> None:
        assert commit_page_ttl(self.NOW - timedelta(hours=24), self.NOW) == 3600

    def test_custom_ttls(self) -> None:
        ttl = commit_page_ttl(
            self.NOW, self.NOW, recent_ttl_seconds=10, historical_ttl_seconds=20
        )
        assert ttl == 10


class TestFetchAllCommits:
    @respx.mock
    async def test_stops_on_short_page(
        self, paginator: CommitPaginator, commit_page: Callable[..., list[dict]]
    ) -> None:
        route = respx.get(COMMITS_URL).mock(side_effect=_pages([100, 100, 37], commit_page))

        commits = await paginator.fetch_all_commits("octo", "widgets", SINCE, UNTIL)

        assert route.call_count == 3
        assert len(commits) == 237
        assert [int(call.request.url.params["page"]) for call in route.calls] == [1, 2, 3]
        # Order is preserved across pages
        assert commits[0].sha == "sha0"
        assert commits[-1].sha == "sha236"

    @respx.mock
    async def test_empty_first_page(
        self, paginator: CommitPaginator, commit_page: Callable[..., list[dict]]
    ) -> None:
        route = respx.get(COMMITS_URL).mock(side_effect=_pages([0], commit_page))

        commits = await paginator.fetch_all_commits("octo", "widgets", SINCE, UNTIL)

        assert commits == []
        assert route.call_count == 1

    @respx.mock
    async def test_exact_multiple_needs_trailing_empty_page(
        self, paginator: CommitPaginator, commit_page: Callable[..., list[dict]]
    ) -> None:
        route = respx.get(COMMITS_URL).mock(side_effect=_pages([100, 100], commit_page))

        commits = await paginator.fetch_all_commits("octo", "widgets", SINCE, UNTIL)

        assert len(commits) == 200
        assert route.call_count == 3

    @respx.mock
    async def test_empty_repository(self, paginator: CommitPaginator) -> None:
        respx.get(COMMITS_URL).mock(return_value=httpx.Response(409))

        commits = await paginator.fetch_all_commits("octo", "widgets", SINCE, UNTIL)

        assert commits == []

    @respx.mock
    async def test_page_cap_truncates_with_warning(
        self,
        github: GitHubClient,
        cache: TTLCache,
        clock: FakeClock,
        commit_payload: Callable[..., dict],
    ) -> None:
        # per_page=1 keeps the full 1000-page walk cheap
        paginator = CommitPaginator(github, cache, clock=clock, per_page=1)
        route = respx.get(COMMITS_URL).mock(
            side_effect=lambda request: httpx.Response(
                200, json=[commit_payload(f"sha{request.url.params['page']}", "alice")]
            )
        )

        with capture_logs() as logs:
            commits = await paginator.fetch_all_commits("octo", "widgets", SINCE, UNTIL)

        assert route.call_count == 1000
        assert len(commits) == 1000
        assert [e["event"] for e in logs if e["log_level"] == "warning"] == ["pagination_cap_reached"]
        fetched = next(e for e in logs if e["event"] == "commits_fetched")
        assert fetched["pages"] == 1000

    @respx.mock
    async def test_custom_page_cap(
        self,
        github: GitHubClient,
        cache: TTLCache,
        clock: FakeClock,
        commit_page: Callable[..., list[dict]],
    ) -> None:
        paginator = CommitPaginator(github, cache, clock=clock, max_pages=5)
        route = respx.get(COMMITS_URL).mock(side_effect=_pages([100] * 10, commit_page))

        commits = await paginator.fetch_all_commits("octo", "widgets", SINCE, UNTIL)

        assert route.call_count == 5
        assert len(commits) == 500


class TestPageCaching:
    @respx.mock
    async def test_repeat_served_from_cache(
        self, paginator: CommitPaginator, commit_page: Callable[..., list[dict]]
    ) -> None:
        route = respx.get(COMMITS_URL).mock(side_effect=_pages([100, 12], commit_page))

        first = await paginator.fetch_all_commits("octo", "widgets", SINCE, UNTIL)
        second = await paginator.fetch_all_commits("octo", "widgets", SINCE, UNTIL)

        assert first == second
        assert route.call_count == 2

    @respx.mock
    async def test_different_window_is_a_different_entry(
        self, paginator: CommitPaginator, commit_page: Callable[..., list[dict]]
    ) -> None:
        route = respx.get(COMMITS_URL).mock(side_effect=_pages([3], commit_page))

        await paginator.fetch_all_commits("octo", "widgets", SINCE, UNTIL)
        await paginator.fetch_all_commits("octo", "widgets", SINCE, UNTIL - timedelta(days=1))

        assert route.call_count == 2

    @respx.mock
    async def test_historical_pages_live_one_hour(
        self, paginator: CommitPaginator, clock: FakeClock, commit_page: Callable[..., list[dict]]
    ) -> None:
        route = respx.get(COMMITS_URL).mock(side_effect=_pages([3], commit_page))

        await paginator.fetch_all_commits("octo", "widgets", SINCE, UNTIL)
        clock.advance(301)
        await paginator.fetch_all_commits("octo", "widgets", SINCE, UNTIL)
        assert route.call_count == 1

        clock.advance(3300)
        await paginator.fetch_all_commits("octo", "widgets", SINCE, UNTIL)
        assert route.call_count == 2

    @respx.mock
    async def test_recent_pages_live_five_minutes(
        self, paginator: CommitPaginator, clock: FakeClock, commit_page: Callable[..., list[dict]]
    ) -> None:
        route = respx.get(COMMITS_URL).mock(side_effect=_pages([3], commit_page))
        since = clock.now() - timedelta(hours=1)
        until = clock.now()

        await paginator.fetch_all_commits("octo", "widgets", since, until)
        clock.advance(299)
        await paginator.fetch_all_commits("octo", "widgets", since, until)
        assert route.call_count == 1

        clock.advance(2)
        await paginator.fetch_all_commits("octo", "widgets", since, until)
        assert route.call_count == 2
