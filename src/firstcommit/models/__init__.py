from __future__ import annotations

from firstcommit.models.analysis import (
    AnalysisResult,
    MonthlyPeriod,
    MonthlyResult,
    Period,
    YearlyPeriod,
    YearlyResult,
)
from firstcommit.models.cache import CacheEntry, CacheStats
from firstcommit.models.github import Commit, Repository
from firstcommit.models.tools import (
    AnalyzeContributorsInput,
    CacheStatsOutput,
    CacheTTLs,
    HealthOutput,
    RateBudget,
)

__all__ = [
    # github
    "Repository",
    "Commit",
    # analysis
    "YearlyPeriod",
    "MonthlyPeriod",
    "Period",
    "YearlyResult",
    "MonthlyResult",
    "AnalysisResult",
    # cache
    "CacheEntry",
    "CacheStats",
    # tools
    "AnalyzeContributorsInput",
    "CacheStatsOutput",
    "HealthOutput",
    "RateBudget",
    "CacheTTLs",
]
