"""
Typed execution statistics of a plan node.

Spanner reports per-operator runtime statistics (PROFILE mode) as an
untyped struct whose shape is only documented by example:

    rows: {total: "33", unit: "rows"}
    latency: {total: "1.92", unit: "msecs", mean: "1.92", std_deviation: "0"}
    execution_summary: {num_executions: "1"}

All values are strings on the wire. Numbers are accepted as well and kept
in their string form so templates render them unchanged.

Null values leave a field empty. Unknown fields are dropped unless
validation runs with the `disallow_unknown` context flag, in which case
they are rejected.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, model_validator

DISALLOW_UNKNOWN = "disallow_unknown"

_SECS_SUFFIX = re.compile(r"secs$")


class _StatsModel(BaseModel):
    """Base for stats models: frozen, numeric strings, optional strictness."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _prepare_fields(cls, data: Any, info: ValidationInfo) -> Any:
        if not isinstance(data, dict):
            return data
        known = set(cls.model_fields)
        # null leaves a declared field at its empty default
        data = {key: value for key, value in data.items() if value is not None or key not in known}
        if not (info.context or {}).get(DISALLOW_UNKNOWN):
            return data
        unknown = sorted(key for key in data if key not in known)
        if unknown:
            raise ValueError(f"unknown field(s): {', '.join(unknown)}")
        return data


class ExecutionStatsHistogram(_StatsModel):
    """One bucket of a latency or row histogram."""

    count: str = ""
    lower_bound: str = ""
    upper_bound: str = ""
    percentage: str = ""


class ExecutionStatsValue(_StatsModel):
    """A single measured quantity with its unit."""

    unit: str = ""
    total: str = ""
    mean: str = ""
    std_deviation: str = ""
    histogram: list[ExecutionStatsHistogram] = Field(default_factory=list)

    def __str__(self) -> str:
        if not self.total:
            return ""
        if not self.unit:
            return self.total
        return f"{self.total} {self.unit}"

    @property
    def short(self) -> str:
        """Like str(), with `secs` units abbreviated to `s` (`1.92 ms`)."""
        return _SECS_SUFFIX.sub("s", str(self))


class ExecutionStatsSummary(_StatsModel):
    """How often and when an operator ran."""

    num_executions: str = ""
    num_checkpoints: str = ""
    checkpoint_time: str = ""
    execution_start_timestamp: str = ""
    execution_end_timestamp: str = ""


class ExecutionStats(_StatsModel):
    """
    Runtime statistics of one plan node.

    Every field defaults to an empty value so nodes without stats (PLAN
    mode, or operators Spanner does not measure) render blank cells.
    """

    rows: ExecutionStatsValue = Field(default_factory=ExecutionStatsValue)
    scanned_rows: ExecutionStatsValue = Field(default_factory=ExecutionStatsValue)
    filtered_rows: ExecutionStatsValue = Field(default_factory=ExecutionStatsValue)
    deleted_rows: ExecutionStatsValue = Field(default_factory=ExecutionStatsValue)
    latency: ExecutionStatsValue = Field(default_factory=ExecutionStatsValue)
    cpu_time: ExecutionStatsValue = Field(default_factory=ExecutionStatsValue)
    remote_calls: ExecutionStatsValue = Field(default_factory=ExecutionStatsValue)
    filesystem_delay_seconds: ExecutionStatsValue = Field(default_factory=ExecutionStatsValue)
    execution_summary: ExecutionStatsSummary = Field(default_factory=ExecutionStatsSummary)
