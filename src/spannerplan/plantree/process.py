"""Render a QueryPlan into rows of branch art, titles and predicates."""

from __future__ import annotations

import logging

from spannerplan.config import RenderConfig
from spannerplan.plantree.decode import decode_rows
from spannerplan.plantree.linearize import build_tree
from spannerplan.plantree.rows import RowWithPredicates
from spannerplan.queryplan import QueryPlan

logger = logging.getLogger(__name__)


def process_plan(qp: QueryPlan, config: RenderConfig | None = None) -> list[RowWithPredicates]:
    """
    Render the visible nodes of `qp` as ordered rows.

    Rows follow a depth-first, pre-order walk from the root over visible
    child links. The render fails as a whole on the first error.

    Args:
        qp: The query plan.
        config: Render options; defaults render raw titles without wrapping.

    Returns:
        One row per visible node.

    Raises:
        EncodingError: If a node payload cannot be encoded.
        DecodeError: If the rendered tree cannot be decoded.
        StatsDecodeError: If stats are rejected.
    """
    config = config or RenderConfig()

    tree = build_tree(qp, config)
    rendered = tree.render(config.tree_style)
    logger.debug("Rendered plan tree of %d nodes into %d chars", len(qp.plan_nodes), len(rendered))

    rows = decode_rows(qp, rendered, config.disallow_unknown_stats)
    logger.debug("Decoded %d visible rows", len(rows))
    return rows
