"""Background scheduler coroutine for cache cleanup."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from firstcommit.state import AppState

log = structlog.get_logger()


async def run_cache_cleanup_scheduler(state: AppState) -> None:
    """Purge expired cache entries every ``cleanup_interval_seconds``.

    Runs for the server's lifetime; the lifespan cancels it on shutdown.
    A failed sweep is logged and the loop carries on.
    """
    interval_seconds = state.settings.cache.cleanup_interval_seconds

    while True:
        await state.clock.sleep(interval_seconds)
        try:
            await state.cache.cleanup_expired()
        except Exception:
            log.warning("cache_cleanup_scheduler_error", exc_info=True)
