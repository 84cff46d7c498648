from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class CacheEntry(BaseModel):
    """A cached value and the instant it stops being served."""

    key: str
    value: Any
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class CacheStats(BaseModel):
    """Cumulative counters for the monitoring surface."""

    hits: int = 0
    misses: int = 0
    keys: int = 0  # Entries currently held, including expired ones not yet swept
