"""Self-imposed request budget over a rolling one-hour window.

The governor keeps us under the per-hour quota GitHub grants a token. Every
outbound request calls ``reserve()`` first. Counters live for the process
lifetime only and are shared by every concurrent analysis; there is no
fairness between callers competing for the same budget.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from datetime import datetime

    from firstcommit.protocols import ClockProtocol

log = structlog.get_logger()

RATE_WINDOW = timedelta(hours=1)


class RateGovernor:
    def __init__(
        self,
        limit_per_hour: int = 5000,
        *,
        clock: ClockProtocol,
        window: timedelta = RATE_WINDOW,
    ) -> None:
        if limit_per_hour < 1:
            raise ValueError("limit_per_hour must be at least 1")
        self._limit = limit_per_hour
        self._clock = clock
        self._window = window
        self._request_count = 0
        self._window_start = clock.now()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def request_count(self) -> int:
        return self._request_count

    @property
    def window_start(self) -> datetime:
        return self._window_start

    @property
    def remaining(self) -> int:
        return max(self._limit - self._request_count, 0)

    async def reserve(self) -> None:
        """Claim one request from the budget, waiting for the window to roll if needed.

        Any number of missed windows collapse into a single reset; there is
        no catch-up accounting.
        """
        while True:
            now = self._clock.now()
            elapsed = now - self._window_start
            if elapsed >= self._window:
                self._request_count = 0
                self._window_start = now

            if self._request_count < self._limit:
                self._request_count += 1
                return

            wait_seconds = (self._window - elapsed).total_seconds()
            log.warning(
                "rate_governor_budget_exhausted",
                limit=self._limit,
                wait_seconds=round(wait_seconds, 1),
            )
            await self._clock.sleep(wait_seconds)
