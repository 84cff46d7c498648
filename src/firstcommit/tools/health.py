"""Tool handler for health (monitoring surface)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from firstcommit import __version__
from firstcommit.config import UNAUTHENTICATED_REQUESTS_PER_HOUR
from firstcommit.models.tools import CacheTTLs, HealthOutput, RateBudget

if TYPE_CHECKING:
    from firstcommit.state import AppState


async def handle(state: AppState) -> dict:
    """Handle a health tool call."""
    settings = state.settings
    authenticated = settings.authenticated
    output = HealthOutput(
        version=__version__,
        authenticated=authenticated,
        requests_per_hour=(
            settings.github.requests_per_hour if authenticated else UNAUTHENTICATED_REQUESTS_PER_HOUR
        ),
        rate_governor=RateBudget(limit=state.governor.limit, remaining=state.governor.remaining),
        cache=CacheTTLs(
            ttl_seconds=settings.cache.ttl_seconds,
            recent_commits_ttl_seconds=settings.cache.recent_commits_ttl_seconds,
            historical_commits_ttl_seconds=settings.cache.historical_commits_ttl_seconds,
        ),
        timestamp=state.clock.now(),
    )
    return output.model_dump(mode="json")
