"""Execution statistics decoding."""

from spannerplan.stats.extract import decode_stats, extract
from spannerplan.stats.models import (
    ExecutionStats,
    ExecutionStatsHistogram,
    ExecutionStatsSummary,
    ExecutionStatsValue,
)

__all__ = [
    "ExecutionStats",
    "ExecutionStatsHistogram",
    "ExecutionStatsSummary",
    "ExecutionStatsValue",
    "decode_stats",
    "extract",
]
