"""MCP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Create AppState via the FastMCP lifespan context manager
- Register tools
- Start the correct transport (stdio or HTTP)
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from contextlib import asynccontextmanager, suppress
from typing import TYPE_CHECKING

import structlog
import uvicorn
from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult, TextContent

import firstcommit.tools.analyze_contributors as t_analyze
import firstcommit.tools.cache_stats as t_cache_stats
import firstcommit.tools.health as t_health
from firstcommit import __version__
from firstcommit.clock import SystemClock
from firstcommit.config import UNAUTHENTICATED_REQUESTS_PER_HOUR, Settings
from firstcommit.errors import FirstCommitError
from firstcommit.http_access import guard_http_app
from firstcommit.schedulers import run_cache_cleanup_scheduler
from firstcommit.transport import build_http_client
from firstcommit.wiring import build_state

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from firstcommit.state import AppState

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr; stdout is reserved for the MCP JSON-RPC stream
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _log_authentication(settings: Settings) -> None:
    if settings.authenticated:
        log.info("github_token_configured", requests_per_hour=settings.github.requests_per_hour)
        return
    log.warning(
        "github_token_missing",
        message=(
            "No GitHub token configured. GitHub allows "
            f"{UNAUTHENTICATED_REQUESTS_PER_HOUR} unauthenticated requests per hour; "
            "set FIRSTCOMMIT__GITHUB__TOKEN to raise the limit."
        ),
        requests_per_hour=settings.github.requests_per_hour,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncGenerator[AppState, None]:
    """Create and tear down all shared resources for the server's lifetime."""
    settings = Settings()
    _setup_logging(settings)

    log.info(
        "server_starting",
        version=__version__,
        transport=settings.server.transport,
    )
    _log_authentication(settings)

    http_client = build_http_client(settings.github)
    state = build_state(settings, http_client, SystemClock())

    cache_cleanup_task = asyncio.create_task(run_cache_cleanup_scheduler(state))

    log.info(
        "server_started",
        version=__version__,
        transport=settings.server.transport,
        cache_ttl_seconds=settings.cache.ttl_seconds,
    )

    try:
        yield state
    finally:
        cache_cleanup_task.cancel()
        with suppress(asyncio.CancelledError):
            await cache_cleanup_task
        await http_client.aclose()
        log.info("server_stopping")


# ---------------------------------------------------------------------------
# FastMCP instance and tool registration
# ---------------------------------------------------------------------------

mcp = FastMCP("firstcommit", lifespan=lifespan)
# FastMCP doesn't expose a version kwarg, so set it on the underlying Server
# so the MCP initialize handshake reports our version, not the SDK's.
mcp._mcp_server.version = __version__  # pyright: ignore[reportPrivateUsage]


def _serialise_tool_error(error: FirstCommitError) -> CallToolResult:
    """Convert a FirstCommitError to the MCP tool error result envelope."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(error.to_dict()))],
        isError=True,
    )


@mcp.tool()
async def analyze_contributors(
    org: str, repo: str, year: str, ctx: Context, month: str | None = None
) -> object:
    """Count contributors whose first-ever commit to a GitHub repository falls in a year or month.

    Pass ``month`` (1-12) for a single month; omit it for the whole year.
    """
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_analyze.handle(org, repo, year, month, state)
    except FirstCommitError as exc:
        log.warning(
            "tool_error",
            tool="analyze_contributors",
            code=exc.code,
            message=exc.message,
            recoverable=exc.recoverable,
        )
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="analyze_contributors", exc_info=True)
        raise


@mcp.tool()
async def cache_stats(ctx: Context) -> object:
    """Report cache hit/miss counters and the number of cached keys."""
    state: AppState = ctx.request_context.lifespan_context
    return await t_cache_stats.handle(state)


@mcp.tool()
async def health(ctx: Context) -> object:
    """Report whether a GitHub token is configured, the request budget and cache TTLs."""
    state: AppState = ctx.request_context.lifespan_context
    return await t_health.handle(state)


# ---------------------------------------------------------------------------
# HTTP transport
# ---------------------------------------------------------------------------


def run_http_server(settings: Settings) -> None:
    """Start the MCP server with Streamable HTTP transport."""
    _setup_logging(settings)
    structlog.get_logger().bind(transport="http").info(
        "http_server_starting", host=settings.server.host, port=settings.server.port
    )

    uvicorn.run(
        guard_http_app(mcp.streamable_http_app(), settings.server),
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,  # Disable uvicorn's default logging; structlog handles it
    )


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    settings = Settings()

    if settings.server.transport == "http":
        run_http_server(settings)
        return

    mcp.run()


if __name__ == "__main__":
    main()
