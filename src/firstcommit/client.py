"""GitHub REST client: repository lookup and single commit pages.

Maps upstream responses onto typed models and upstream failures onto
FirstCommitError. Repository metadata is cached here; commit pages are cached
one level up by the paginator, which owns the page-window TTL rule.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import structlog
from pydantic import ValidationError

from firstcommit.errors import ErrorCode, FirstCommitError
from firstcommit.keys import repository_key
from firstcommit.models.github import Commit, Repository
from firstcommit.transport import is_rate_limited, is_transient_exception

if TYPE_CHECKING:
    from firstcommit.protocols import CacheProtocol
    from firstcommit.transport import RetryTransport

log = structlog.get_logger()

# GitHub answers 409 Conflict when listing commits of a repository with none
_EMPTY_REPOSITORY_STATUS = 409


def _response_error(prefix: str, response: httpx.Response) -> FirstCommitError:
    if is_rate_limited(response):
        return FirstCommitError(
            code=ErrorCode.RATE_LIMITED,
            message=f"{prefix}: GitHub API rate limit exceeded",
            suggestion="GitHub API rate limit exceeded. Please try again later.",
            recoverable=True,
        )
    if response.is_server_error:
        return FirstCommitError(
            code=ErrorCode.UPSTREAM_UNAVAILABLE,
            message=f"{prefix}: HTTP {response.status_code}",
            suggestion="GitHub may be temporarily unavailable. Please try again later.",
            recoverable=True,
        )
    return FirstCommitError(
        code=ErrorCode.FETCH_FAILED,
        message=f"{prefix}: HTTP {response.status_code}",
        suggestion="Unable to fetch data from the GitHub API.",
        recoverable=False,
    )


def _transport_error(prefix: str, exc: httpx.HTTPError) -> FirstCommitError:
    if isinstance(exc, httpx.TimeoutException):
        return FirstCommitError(
            code=ErrorCode.UPSTREAM_TIMEOUT,
            message=f"{prefix}: request timeout ({exc})",
            suggestion="GitHub API request timed out. Please try again later.",
            recoverable=True,
        )
    if is_transient_exception(exc):
        return FirstCommitError(
            code=ErrorCode.UPSTREAM_UNAVAILABLE,
            message=f"{prefix}: {exc}",
            suggestion="GitHub may be temporarily unavailable. Please try again later.",
            recoverable=True,
        )
    return FirstCommitError(
        code=ErrorCode.FETCH_FAILED,
        message=f"{prefix}: {exc}",
        suggestion="Unable to fetch data from the GitHub API.",
        recoverable=False,
    )


def _not_found(org: str, repo: str) -> FirstCommitError:
    return FirstCommitError(
        code=ErrorCode.REPOSITORY_NOT_FOUND,
        message=f"Repository {org}/{repo} not found",
        suggestion="Check the organization and repository names. Private repositories need a token.",
        recoverable=False,
    )


class GitHubClient:
    def __init__(
        self,
        transport: RetryTransport,
        cache: CacheProtocol,
        *,
        repository_ttl_seconds: float | None = None,
    ) -> None:
        self._transport = transport
        self._cache = cache
        self._repository_ttl_seconds = repository_ttl_seconds

    async def get_repository(self, org: str, repo: str) -> Repository:
        """Fetch repository metadata, served from cache within the TTL."""
        cache_key = repository_key(org, repo)
        cached = await self._cache.get(cache_key)
        if cached is not None:
            return cached

        prefix = "Failed to fetch repository"
        try:
            response = await self._transport.get(f"/repos/{org}/{repo}")
        except httpx.HTTPError as exc:
            raise _transport_error(prefix, exc) from exc

        if response.status_code == 404:
            raise _not_found(org, repo)
        if not response.is_success:
            raise _response_error(prefix, response)

        try:
            repository = Repository.from_api(org, response.json())
        except (ValueError, KeyError, TypeError, ValidationError) as exc:
            raise FirstCommitError(
                code=ErrorCode.FETCH_FAILED,
                message=f"{prefix}: malformed response ({exc})",
                suggestion="Unable to fetch data from the GitHub API.",
                recoverable=False,
            ) from exc

        log.info("repository_fetched", org=org, repo=repo, created_at=repository.created_at)
        await self._cache.set(cache_key, repository, self._repository_ttl_seconds)
        return repository

    async def list_commits(
        self,
        org: str,
        repo: str,
        *,
        since: str,
        until: str,
        page: int,
        per_page: int = 100,
    ) -> list[Commit]:
        """Fetch one page of commits authored within ``[since, until]``."""
        prefix = "Failed to fetch commits"
        params = {"since": since, "until": until, "page": page, "per_page": per_page}
        try:
            response = await self._transport.get(f"/repos/{org}/{repo}/commits", params=params)
        except httpx.HTTPError as exc:
            raise _transport_error(prefix, exc) from exc

        if response.status_code == 404:
            raise _not_found(org, repo)
        if response.status_code == _EMPTY_REPOSITORY_STATUS:
            log.info("repository_empty", org=org, repo=repo)
            return []
        if not response.is_success:
            raise _response_error(prefix, response)

        try:
            return [Commit.from_api(item) for item in response.json()]
        except (ValueError, KeyError, TypeError, ValidationError) as exc:
            raise FirstCommitError(
                code=ErrorCode.FETCH_FAILED,
                message=f"{prefix}: malformed response ({exc})",
                suggestion="Unable to fetch data from the GitHub API.",
                recoverable=False,
            ) from exc
