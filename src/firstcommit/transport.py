"""Outbound HTTP transport for the GitHub API.

All network I/O goes through a single RetryTransport instance shared across
analyses. The transport receives an httpx.AsyncClient via constructor
injection; the server lifespan owns the client lifecycle.

Every attempt first claims budget from the RateGovernor. Two failure classes
are recovered here, both bounded by ``max_attempts``:

- GitHub's own quota exhausted (403/429 with ``X-RateLimit-Remaining: 0``):
  wait until ``X-RateLimit-Reset`` and resend.
- Transient failures (5xx, dropped connections): back off and resend.

Anything else, and the final failure once attempts run out, is handed back
unchanged. Mapping responses to errors is the caller's job (see client.py).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog

from firstcommit import __version__

if TYPE_CHECKING:
    from firstcommit.config import GitHubSettings
    from firstcommit.governor import RateGovernor
    from firstcommit.protocols import ClockProtocol

log = structlog.get_logger()

LOW_REMAINING_THRESHOLD = 100


def build_http_client(settings: GitHubSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": f"firstcommit/{__version__}",
    }
    if settings.token is not None and settings.token.get_secret_value():
        headers["Authorization"] = f"Bearer {settings.token.get_secret_value()}"

    return httpx.AsyncClient(
        base_url=settings.api_url,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers=headers,
        # GitHub answers 301 for renamed and transferred repositories
        follow_redirects=True,
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )


def _remaining(response: httpx.Response) -> int | None:
    raw = response.headers.get("x-ratelimit-remaining")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def is_rate_limited(response: httpx.Response) -> bool:
    """True when GitHub refused the request because its quota is spent."""
    return response.status_code in (403, 429) and _remaining(response) == 0


def is_transient_response(response: httpx.Response) -> bool:
    return response.is_server_error


def is_transient_exception(exc: Exception) -> bool:
    # Timeouts are deliberately excluded: they propagate to the caller.
    return isinstance(exc, httpx.NetworkError | httpx.RemoteProtocolError)


class RetryTransport:
    """Rate-governed sender with bounded wait-and-resend recovery."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        governor: RateGovernor,
        *,
        clock: ClockProtocol,
        max_attempts: int = 5,
        initial_backoff_seconds: float = 1.0,
        max_backoff_seconds: float = 30.0,
        max_rate_limit_wait_seconds: float = 3600.0,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._client = client
        self._governor = governor
        self._clock = clock
        self._max_attempts = max_attempts
        self._initial_backoff_seconds = initial_backoff_seconds
        self._max_backoff_seconds = max_backoff_seconds
        self._max_rate_limit_wait_seconds = max_rate_limit_wait_seconds

    def backoff_delay(self, retry_index: int) -> float:
        """Delay before the ``retry_index``-th resend (0-based): 1s, 2s, 4s... capped."""
        return min(self._initial_backoff_seconds * (2**retry_index), self._max_backoff_seconds)

    async def get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        request = self._client.build_request("GET", path, params=params)
        return await self.send(request)

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send ``request``, resending on upstream quota exhaustion and transient failures.

        Returns the last response received. Re-raises the last connection
        error when every attempt failed at the connection level.
        """
        url = str(request.url)
        transient_retries = 0

        for attempt in range(1, self._max_attempts + 1):
            is_last_attempt = attempt == self._max_attempts
            await self._governor.reserve()

            try:
                response = await self._client.send(request)
            except httpx.HTTPError as exc:
                if is_last_attempt or not is_transient_exception(exc):
                    raise
                delay = self.backoff_delay(transient_retries)
                transient_retries += 1
                log.warning(
                    "github_request_retrying",
                    url=url,
                    reason=type(exc).__name__,
                    attempt=attempt,
                    delay_seconds=delay,
                )
                await self._clock.sleep(delay)
                continue

            remaining = _remaining(response)
            if remaining is not None and remaining < LOW_REMAINING_THRESHOLD:
                log.warning("github_rate_limit_low", remaining=remaining)

            if is_rate_limited(response):
                wait_seconds = self._rate_limit_wait(response)
                if wait_seconds <= 0 or is_last_attempt:
                    return response
                log.warning(
                    "github_rate_limit_exceeded",
                    url=url,
                    attempt=attempt,
                    wait_seconds=round(wait_seconds, 1),
                )
                await self._clock.sleep(min(wait_seconds, self._max_rate_limit_wait_seconds))
                continue

            if is_transient_response(response) and not is_last_attempt:
                delay = self.backoff_delay(transient_retries)
                transient_retries += 1
                log.warning(
                    "github_request_retrying",
                    url=url,
                    reason=response.status_code,
                    attempt=attempt,
                    delay_seconds=delay,
                )
                await self._clock.sleep(delay)
                continue

            return response

        # Unreachable: the last attempt always returns or raises
        raise RuntimeError("retry loop exited without a response")

    def _rate_limit_wait(self, response: httpx.Response) -> float:
        raw_reset = response.headers.get("x-ratelimit-reset")
        if raw_reset is None:
            return 0.0
        try:
            reset_epoch = float(raw_reset)
        except ValueError:
            return 0.0
        return reset_epoch - self._clock.now().timestamp()
