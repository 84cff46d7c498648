"""Protocol interfaces for swappable components.

The analyzer, paginator and tool handlers reference these protocols, not the
concrete implementations. This allows:
- Tests to use a fake clock that advances without real delays
- Other cache backends to be swapped in without changing the analysis code
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from datetime import datetime

    from firstcommit.models.cache import CacheStats


class ClockProtocol(Protocol):
    """Interface for reading the time and suspending the caller."""

    def now(self) -> datetime: ...

    async def sleep(self, seconds: float) -> None: ...


class CacheProtocol(Protocol):
    """Interface for the key/value cache backend."""

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None: ...

    async def cleanup_expired(self) -> int: ...

    def stats(self) -> CacheStats: ...
