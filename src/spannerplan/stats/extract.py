"""Decode the untyped execution stats payload of a plan node."""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from spannerplan.exceptions import StatsDecodeError
from spannerplan.parser.models import PlanNode
from spannerplan.stats.models import DISALLOW_UNKNOWN, ExecutionStats


def extract(node: PlanNode, disallow_unknown: bool = False) -> ExecutionStats:
    """
    Decode the execution stats of `node`.

    The payload is re-encoded to JSON and validated against ExecutionStats,
    so whatever shape the loader produced (YAML scalars, nested structs) goes
    through the same decoder as a JSON response would.

    Args:
        node: Plan node whose `execution_stats` to decode.
        disallow_unknown: Reject fields ExecutionStats does not declare.

    Returns:
        ExecutionStats; empty when the node carries no stats.

    Raises:
        StatsDecodeError: If the payload is malformed, or has unknown fields
            while disallow_unknown is set.
    """
    if node.execution_stats is None:
        return ExecutionStats()
    return decode_stats(node.execution_stats, disallow_unknown, node_index=node.index)


def decode_stats(
    payload: dict[str, Any],
    disallow_unknown: bool = False,
    node_index: int | None = None,
) -> ExecutionStats:
    """Decode a raw stats mapping; see extract()."""
    try:
        encoded = json.dumps(payload, default=str)
    except (TypeError, ValueError) as e:
        raise StatsDecodeError(f"stats can't be encoded to JSON: {e}", node_index=node_index) from e

    try:
        return ExecutionStats.model_validate_json(
            encoded,
            context={DISALLOW_UNKNOWN: disallow_unknown},
        )
    except ValidationError as e:
        locations = [".".join(str(part) for part in error["loc"]) for error in e.errors()]
        raise StatsDecodeError(
            f"invalid execution stats: {e.error_count()} error(s) at {', '.join(locations) or '<root>'}",
            node_index=node_index,
            fields=locations,
        ) from e
