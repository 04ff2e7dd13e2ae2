"""
Render orchestration for spannerplan.

This is the single entry point for turning plan nodes into text. The CLI
is a thin adapter around it.

Usage:
    from spannerplan.engine import ExplainMode, render_tree, should_render_with_stats
    from spannerplan.output import PrintMode, default_render_def

    stats = parse_plan(Path("profile.yaml"))
    with_stats = should_render_with_stats(stats.plan_nodes, ExplainMode.AUTO)
    text = render_tree(
        stats.plan_nodes,
        default_render_def(with_stats),
        PrintMode.PREDICATES,
        RenderConfig(compact=True),
        inline_stats=True,
    )
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum

from spannerplan.config import RenderConfig
from spannerplan.exceptions import FormatParseError, SpannerPlanError
from spannerplan.output.columns import TableRenderDef
from spannerplan.output.renderers import PrintMode, print_result
from spannerplan.parser.models import PlanNode
from spannerplan.plantree import RowWithPredicates, process_plan
from spannerplan.queryplan import QueryPlan, has_stats
from spannerplan.stats import extract
from spannerplan.title import InlineStatsFunc

logger = logging.getLogger(__name__)


class ExplainMode(str, Enum):
    """Whether the plan is rendered with stats columns."""

    AUTO = "AUTO"
    PLAN = "PLAN"
    PROFILE = "PROFILE"

    @classmethod
    def parse(cls, value: str) -> ExplainMode:
        try:
            return cls(value.upper())
        except ValueError as e:
            raise FormatParseError("ExplainMode", value, [member.value for member in cls]) from e


def should_render_with_stats(plan_nodes: Sequence[PlanNode], mode: ExplainMode) -> bool:
    """PLAN never, PROFILE always, AUTO when the plan carries stats."""
    if mode == ExplainMode.PLAN:
        return False
    if mode == ExplainMode.PROFILE:
        return True
    return has_stats(plan_nodes)


def inline_stats_func_from_render_def(
    render_def: TableRenderDef,
    inline_stats: bool,
    disallow_unknown_stats: bool = False,
) -> InlineStatsFunc:
    """
    Build the title callback that renders inlined columns as `Name=value`.

    Failures only drop the affected labels; they are logged and never abort
    the render.
    """
    inlined = [column for column in render_def.columns if column.should_inline(inline_stats)]

    def inline_stats_func(node: PlanNode) -> list[str]:
        if not inlined:
            return []

        try:
            execution_stats = extract(node, disallow_unknown_stats)
        except SpannerPlanError as e:
            logger.warning("Failed to extract execution stats of node %d: %s", node.index, e)
            return []

        row = RowWithPredicates(
            id=node.index,
            tree_part="",
            node_text="",
            execution_stats=execution_stats,
            node=node,
        )

        labels = []
        for column in inlined:
            try:
                value = column.map_func(row)
            except SpannerPlanError as e:
                logger.warning(
                    "Failed to render inline stat %s of node %d: %s", column.name, node.index, e
                )
                continue
            if value:
                labels.append(f"{column.name}={value}")
        return labels

    return inline_stats_func


def render_tree(
    plan_nodes: Sequence[PlanNode],
    render_def: TableRenderDef,
    print_mode: PrintMode = PrintMode.PREDICATES,
    config: RenderConfig | None = None,
    inline_stats: bool = False,
) -> str:
    """
    Render plan nodes as a table followed by the details of `print_mode`.

    Args:
        plan_nodes: All plan nodes, root first.
        render_def: Table columns; columns that inline move into titles.
        print_mode: Details section after the table.
        config: Title, tree and stats options.
        inline_stats: Fold inlinable columns into operator titles.

    Returns:
        The rendered text.

    Raises:
        ConstructionError: If the plan nodes cannot form a QueryPlan.
        EncodingError, DecodeError: If linearization fails.
        StatsDecodeError: If stats of a row are rejected.
        ConfigurationError: If a column template fails.
    """
    config = config or RenderConfig()
    config = config.with_inline_stats(
        inline_stats_func_from_render_def(render_def, inline_stats, config.disallow_unknown_stats)
    )

    qp = QueryPlan(plan_nodes)
    rows = process_plan(qp, config)
    logger.info("Rendering %d rows in %s mode", len(rows), print_mode.value)

    return print_result(render_def.table_columns(inline_stats), rows, print_mode)
