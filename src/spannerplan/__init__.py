"""spannerplan - ASCII tree rendering of Cloud Spanner query plans."""

__version__ = "0.1.0"
__license__ = "MIT"

# Exception hierarchy (import first so other modules can use it)
from spannerplan.exceptions import (
    SpannerPlanError,
    ConstructionError,
    EmptyPlanError,
    PlanIndexError,
    EncodingError,
    DecodeError,
    StatsDecodeError,
    ConfigurationError,
    FormatParseError,
    ParseError,
)

# Plan model and loading
from spannerplan.parser import (
    ChildLink,
    PlanNode,
    PlanNodeKind,
    ResultSetStats,
    parse_plan,
    parse_plan_file,
)
from spannerplan.queryplan import QueryPlan, ResolvedChildLink, has_stats

# Titles and configuration
from spannerplan.title import (
    ExecutionMethodFormat,
    KnownFlagFormat,
    TargetMetadataFormat,
    TitleOptions,
    node_title,
)
from spannerplan.config import RenderConfig, load_config_from_env, load_config_from_file

# Rendering
from spannerplan.treeprint import COMPACT_STYLE, DEFAULT_STYLE, Tree, TreeStyle
from spannerplan.plantree import RowWithPredicates, process_plan
from spannerplan.stats import ExecutionStats, extract
from spannerplan.output import PrintMode, TableRenderDef, default_render_def, print_result
from spannerplan.engine import ExplainMode, render_tree, should_render_with_stats

__all__ = [
    "__version__",
    # Exceptions
    "SpannerPlanError",
    "ConstructionError",
    "EmptyPlanError",
    "PlanIndexError",
    "EncodingError",
    "DecodeError",
    "StatsDecodeError",
    "ConfigurationError",
    "FormatParseError",
    "ParseError",
    # Plan
    "ChildLink",
    "PlanNode",
    "PlanNodeKind",
    "ResultSetStats",
    "parse_plan",
    "parse_plan_file",
    "QueryPlan",
    "ResolvedChildLink",
    "has_stats",
    # Titles and configuration
    "ExecutionMethodFormat",
    "KnownFlagFormat",
    "TargetMetadataFormat",
    "TitleOptions",
    "node_title",
    "RenderConfig",
    "load_config_from_env",
    "load_config_from_file",
    # Rendering
    "COMPACT_STYLE",
    "DEFAULT_STYLE",
    "Tree",
    "TreeStyle",
    "RowWithPredicates",
    "process_plan",
    "ExecutionStats",
    "extract",
    "PrintMode",
    "TableRenderDef",
    "default_render_def",
    "print_result",
    "ExplainMode",
    "render_tree",
    "should_render_with_stats",
]
