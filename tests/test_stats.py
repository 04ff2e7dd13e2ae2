"""Tests for execution stats decoding."""

from __future__ import annotations

import pytest

from spannerplan.exceptions import StatsDecodeError
from spannerplan.parser import PlanNode, PlanNodeKind
from spannerplan.stats import ExecutionStats, ExecutionStatsValue, decode_stats, extract

PROFILE_STATS = {
    "rows": {"total": "33", "unit": "rows"},
    "latency": {"total": "1.92", "unit": "msecs", "mean": "1.92", "std_deviation": "0"},
    "execution_summary": {"num_executions": "1", "checkpoint_time": "0.01 msecs"},
    "scanned_rows": {
        "total": "33",
        "unit": "rows",
        "histogram": [{"count": "1", "lower_bound": "0", "upper_bound": "64", "percentage": "100"}],
    },
}


def node_with_stats(stats: dict | None) -> PlanNode:
    return PlanNode(index=7, kind=PlanNodeKind.RELATIONAL, display_name="Scan", execution_stats=stats)


class TestExtract:
    """Test decoding of a node's stats payload."""

    def test_declared_fields(self) -> None:
        stats = extract(node_with_stats(PROFILE_STATS))

        assert stats.rows.total == "33"
        assert stats.latency.mean == "1.92"
        assert stats.execution_summary.num_executions == "1"
        assert stats.scanned_rows.histogram[0].upper_bound == "64"
        assert stats.cpu_time == ExecutionStatsValue()

    def test_absent_payload_is_empty(self) -> None:
        assert extract(node_with_stats(None)) == ExecutionStats()
        assert extract(node_with_stats(None), disallow_unknown=True) == ExecutionStats()

    def test_numbers_are_kept_as_strings(self) -> None:
        stats = extract(node_with_stats({"rows": {"total": 33, "unit": "rows"}, "latency": {"total": 1.5}}))

        assert stats.rows.total == "33"
        assert stats.latency.total == "1.5"

    def test_lenient_drops_unknown_fields(self) -> None:
        payload = {**PROFILE_STATS, "memory_peak_usage_bytes": {"total": "128", "unit": "bytes"}}
        payload["rows"] = {**payload["rows"], "extra": "x"}

        stats = extract(node_with_stats(payload))

        assert stats.rows.total == "33"

    def test_strict_rejects_unknown_top_level_field(self) -> None:
        payload = {**PROFILE_STATS, "memory_peak_usage_bytes": {"total": "128"}}

        with pytest.raises(StatsDecodeError) as exc_info:
            extract(node_with_stats(payload), disallow_unknown=True)

        assert exc_info.value.node_index == 7
        assert "node 7" in str(exc_info.value)

    def test_strict_rejects_unknown_nested_field(self) -> None:
        payload = {"rows": {"total": "1", "unit": "rows", "extra": "x"}}

        with pytest.raises(StatsDecodeError) as exc_info:
            extract(node_with_stats(payload), disallow_unknown=True)

        assert any(field.startswith("rows") for field in exc_info.value.fields)

    def test_strict_accepts_declared_fields(self) -> None:
        stats = extract(node_with_stats(PROFILE_STATS), disallow_unknown=True)
        assert stats.rows.total == "33"

    @pytest.mark.parametrize("disallow_unknown", [False, True])
    def test_null_fields_stay_empty(self, disallow_unknown: bool) -> None:
        payload = {
            "rows": {"total": "3", "unit": None},
            "latency": None,
            "execution_summary": {"num_executions": None},
        }

        stats = extract(node_with_stats(payload), disallow_unknown=disallow_unknown)

        assert stats.rows == ExecutionStatsValue(total="3")
        assert stats.latency == ExecutionStatsValue()
        assert stats.execution_summary.num_executions == ""

    def test_strict_rejects_unknown_null_field(self) -> None:
        with pytest.raises(StatsDecodeError):
            extract(node_with_stats({"memory_peak_usage_bytes": None}), disallow_unknown=True)

    def test_malformed_value(self) -> None:
        with pytest.raises(StatsDecodeError):
            decode_stats({"rows": "not a struct"})


class TestExecutionStatsValue:
    """Test value rendering."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (ExecutionStatsValue(total="33", unit="rows"), "33 rows"),
            (ExecutionStatsValue(total="33"), "33"),
            (ExecutionStatsValue(unit="rows"), ""),
            (ExecutionStatsValue(), ""),
        ],
    )
    def test_str(self, value: ExecutionStatsValue, expected: str) -> None:
        assert str(value) == expected

    def test_short_abbreviates_seconds(self) -> None:
        assert ExecutionStatsValue(total="1.92", unit="msecs").short == "1.92 ms"
        assert ExecutionStatsValue(total="3", unit="secs").short == "3 s"
        assert ExecutionStatsValue(total="3", unit="rows").short == "3 rows"
