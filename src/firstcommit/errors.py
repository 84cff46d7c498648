from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    INVALID_INPUT = "INVALID_INPUT"
    REPOSITORY_NOT_FOUND = "REPOSITORY_NOT_FOUND"
    RATE_LIMITED = "RATE_LIMITED"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    FETCH_FAILED = "FETCH_FAILED"
    ANALYSIS_FAILED = "ANALYSIS_FAILED"


class FirstCommitError(Exception):
    """Raised for all expected failure conditions.

    Caught by server.py and serialised into the MCP error response. The
    ``code`` is stable and is what an outer layer should map to a status;
    ``message`` is human readable and may be re-wrapped on the way up.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def wrap(self, prefix: str) -> FirstCommitError:
        """Return a copy whose message is prefixed, keeping code and hints."""
        return FirstCommitError(
            code=self.code,
            message=f"{prefix}: {self.message}",
            suggestion=self.suggestion,
            recoverable=self.recoverable,
        )

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }
