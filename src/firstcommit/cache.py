"""In-memory TTL cache shared by every analysis in the process.

Entries carry their own expiry so different entry classes (repositories,
commit pages, results) can live for different lengths of time. Expired
entries read as misses and are dropped on access; the background sweep in
schedulers.py purges the rest so memory stays bounded.

Nothing is persisted; a restart starts from an empty cache.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

import structlog

from firstcommit.models.cache import CacheEntry, CacheStats

if TYPE_CHECKING:
    from firstcommit.protocols import ClockProtocol

log = structlog.get_logger()


class TTLCache:
    """Dictionary-backed cache implementing CacheProtocol."""

    def __init__(self, default_ttl_seconds: float, *, clock: ClockProtocol) -> None:
        self._default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    @property
    def default_ttl_seconds(self) -> float:
        return self._default_ttl_seconds

    async def get(self, key: str) -> Any | None:
        """Return the cached value, or ``None`` on miss or expiry."""
        entry = self._entries.get(key)
        if entry is not None and entry.is_expired(self._clock.now()):
            del self._entries[key]
            entry = None

        if entry is None:
            self._misses += 1
            log.debug("cache_miss", key=key)
            return None

        self._hits += 1
        log.debug("cache_hit", key=key)
        return entry.value

    async def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        """Store a value; ``ttl_seconds`` overrides the default TTL."""
        ttl = self._default_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._entries[key] = CacheEntry(
            key=key,
            value=value,
            expires_at=self._clock.now() + timedelta(seconds=ttl),
        )

    async def cleanup_expired(self) -> int:
        """Delete every expired entry. Returns how many were removed."""
        now = self._clock.now()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        log.info("cache_cleanup_complete", deleted=len(expired), remaining=len(self._entries))
        return len(expired)

    def stats(self) -> CacheStats:
        return CacheStats(hits=self._hits, misses=self._misses, keys=len(self._entries))
