"""Wall-clock time source.

Every component that reads the time or waits (rate governor, retry transport,
cache expiry) takes a clock by constructor injection so tests can substitute
a fake that advances instantly.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime


class SystemClock:
    """Real time, implementing ClockProtocol."""

    def now(self) -> datetime:
        return datetime.now(UTC)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(seconds, 0.0))
