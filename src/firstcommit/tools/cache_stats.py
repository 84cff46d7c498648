"""Tool handler for cache_stats (monitoring surface)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from firstcommit.models.tools import CacheStatsOutput

if TYPE_CHECKING:
    from firstcommit.state import AppState


async def handle(state: AppState) -> dict:
    """Handle a cache_stats tool call."""
    stats = state.analyzer.cache_stats()
    output = CacheStatsOutput(
        keys=stats["keys"],
        stats=stats["stats"],
        timestamp=state.clock.now(),
    )
    return output.model_dump(mode="json")
