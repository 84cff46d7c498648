from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field

# GitHub's since/until filters have one-second resolution
_LAST_SECOND = timedelta(seconds=1)


@dataclass(frozen=True)
class YearlyPeriod:
    """A full calendar year, in UTC."""

    year: int

    @property
    def cache_part(self) -> str:
        return "all"

    def bounds(self) -> tuple[datetime, datetime]:
        start = datetime(self.year, 1, 1, tzinfo=UTC)
        end = datetime(self.year + 1, 1, 1, tzinfo=UTC) - _LAST_SECOND
        return start, end


@dataclass(frozen=True)
class MonthlyPeriod:
    """A single calendar month, in UTC."""

    year: int
    month: int

    @property
    def cache_part(self) -> str:
        return f"{self.month:02d}"

    def bounds(self) -> tuple[datetime, datetime]:
        start = datetime(self.year, self.month, 1, tzinfo=UTC)
        if self.month == 12:
            next_start = datetime(self.year + 1, 1, 1, tzinfo=UTC)
        else:
            next_start = datetime(self.year, self.month + 1, 1, tzinfo=UTC)
        return start, next_start - _LAST_SECOND


Period = YearlyPeriod | MonthlyPeriod


def parse_period(year: str | int, month: str | int | None = None) -> Period:
    """Build a Period from raw year/month values.

    Raises ValueError for non-numeric values or a month outside 1-12.
    """
    try:
        year_num = int(year)
    except (TypeError, ValueError):
        raise ValueError(f"year must be a number, got {year!r}") from None
    if not 1 <= year_num <= 9998:
        raise ValueError(f"year out of range: {year_num}")

    if month is None or month == "":
        return YearlyPeriod(year=year_num)

    try:
        month_num = int(month)
    except (TypeError, ValueError):
        raise ValueError(f"month must be a number, got {month!r}") from None
    if not 1 <= month_num <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month_num}")
    return MonthlyPeriod(year=year_num, month=month_num)


class YearlyResult(BaseModel):
    """New-contributor count for a calendar year."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    org: str
    repository: str
    year: str
    new_contributors: int = Field(alias="newContributors", ge=0)


class MonthlyResult(BaseModel):
    """New-contributor count for a calendar month."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    org: str
    repository: str
    year: str
    month: str  # Zero-padded, "01".."12"
    new_contributors: int = Field(alias="newContributors", ge=0)


AnalysisResult = YearlyResult | MonthlyResult


def build_result(org: str, repo: str, period: Period, new_contributors: int) -> AnalysisResult:
    """Build the result shape that matches the period variant."""
    if isinstance(period, MonthlyPeriod):
        return MonthlyResult(
            org=org,
            repository=repo,
            year=str(period.year),
            month=period.cache_part,
            new_contributors=new_contributors,
        )
    return YearlyResult(
        org=org,
        repository=repo,
        year=str(period.year),
        new_contributors=new_contributors,
    )
