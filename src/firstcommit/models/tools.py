from __future__ import annotations

import re
from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

# GitHub's own rules for org and repository names
_NAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")
FIRST_GITHUB_YEAR = 2008


class AnalyzeContributorsInput(BaseModel):
    org: str = Field(min_length=1, max_length=39)
    repo: str = Field(min_length=1, max_length=100)
    year: str
    month: str | None = None

    @field_validator("org", "repo")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not _NAME_PATTERN.match(v):
            raise ValueError(
                f"Invalid name {v!r}: only letters, numbers, hyphens, underscores "
                "and dots are allowed"
            )
        return v

    @field_validator("year")
    @classmethod
    def validate_year(cls, v: str) -> str:
        v = v.strip()
        current_year = datetime.now(UTC).year
        if not v.isdigit() or not FIRST_GITHUB_YEAR <= int(v) <= current_year:
            raise ValueError(
                f"Year must be a valid number between {FIRST_GITHUB_YEAR} and {current_year}"
            )
        return v

    @field_validator("month")
    @classmethod
    def validate_month(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v.isdigit() or not 1 <= int(v) <= 12:
            raise ValueError("Month must be a valid number between 1 and 12")
        return v

    @model_validator(mode="after")
    def reject_future_month(self) -> AnalyzeContributorsInput:
        if self.month is not None:
            now = datetime.now(UTC)
            if (int(self.year), int(self.month)) > (now.year, now.month):
                raise ValueError("Cannot fetch data for future dates")
        return self


class CacheStatsOutput(BaseModel):
    keys: int
    stats: dict[str, int]
    timestamp: datetime


class RateBudget(BaseModel):
    limit: int
    remaining: int


class CacheTTLs(BaseModel):
    ttl_seconds: int
    recent_commits_ttl_seconds: int
    historical_commits_ttl_seconds: int


class HealthOutput(BaseModel):
    status: str = "healthy"
    version: str
    authenticated: bool
    # Upstream quota GitHub grants: 5000/hour with a token, 60 without
    requests_per_hour: int
    rate_governor: RateBudget
    cache: CacheTTLs
    timestamp: datetime
