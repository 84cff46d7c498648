"""Integration test fixtures.

Provides a fully wired AppState (built the same way the server lifespan
builds it) around a fake clock and the production httpx client, which respx
intercepts. Clock and payload fixtures come from tests/conftest.py.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from firstcommit.config import Settings
from firstcommit.transport import build_http_client
from firstcommit.wiring import build_state

if TYPE_CHECKING:
    from conftest import FakeClock

    from firstcommit.state import AppState


@pytest.fixture()
def subprocess_env() -> dict[str, str]:
    """Baseline env dict for subprocess-based MCP integration tests.

    Overrides any local firstcommit.yaml by forcing stdio transport and points
    the API at an unroutable address so no test can reach GitHub.
    """
    env = os.environ.copy()
    env["FIRSTCOMMIT__SERVER__TRANSPORT"] = "stdio"
    env["FIRSTCOMMIT__GITHUB__API_URL"] = "http://127.0.0.1:1"
    env["FIRSTCOMMIT__LOGGING__LEVEL"] = "WARNING"
    return env


@pytest.fixture()
async def app_state(clock: FakeClock) -> AppState:
    """Full AppState wired for handler-level tests."""
    settings = Settings(retry={"max_attempts": 2})
    async with build_http_client(settings.github) as client:
        yield build_state(settings, client, clock)
