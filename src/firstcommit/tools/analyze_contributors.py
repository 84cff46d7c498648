"""Tool handler for analyze_contributors.

Receives AppState, validates the raw arguments, delegates to the analyzer and
returns a structured dict. No MCP or FastMCP imports; server.py handles the
MCP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from firstcommit.errors import ErrorCode, FirstCommitError
from firstcommit.models.tools import AnalyzeContributorsInput

if TYPE_CHECKING:
    from firstcommit.state import AppState


async def handle(org: str, repo: str, year: str, month: str | None, state: AppState) -> dict:
    """Handle an analyze_contributors tool call."""
    log = structlog.get_logger().bind(
        tool="analyze_contributors", org=org, repo=repo, year=year, month=month
    )
    log.info("handler_called")

    # Validate input
    try:
        validated = AnalyzeContributorsInput(org=org, repo=repo, year=year, month=month)
    except ValueError as exc:
        raise FirstCommitError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion=(
                "Provide a GitHub org and repository name, a year from 2008 to the "
                "current year and, optionally, a month between 1 and 12 not in the future."
            ),
            recoverable=False,
        ) from exc

    result = await state.analyzer.analyze(
        validated.org, validated.repo, validated.year, validated.month
    )
    log.info("analyze_complete", new_contributors=result.new_contributors)
    return result.model_dump(mode="json", by_alias=True)
