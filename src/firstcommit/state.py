"""Application state container.

AppState is created once at server startup (inside the FastMCP lifespan context
manager) and injected into every tool handler via the MCP Context object.
The governor and cache it holds are the process-wide shared instances; tests
build their own AppState with isolated instances and a fake clock.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from firstcommit.analyzer import ContributorAnalyzer
    from firstcommit.config import Settings
    from firstcommit.governor import RateGovernor
    from firstcommit.protocols import CacheProtocol, ClockProtocol


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every tool handler."""

    settings: Settings
    clock: ClockProtocol
    http_client: httpx.AsyncClient
    governor: RateGovernor
    cache: CacheProtocol
    analyzer: ContributorAnalyzer
