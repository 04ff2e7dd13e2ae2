"""Query plan loading module."""

from spannerplan.exceptions import ParseError
from spannerplan.parser.config import DEFAULT_CONFIG, ParserConfig
from spannerplan.parser.models import (
    ChildLink,
    MetadataValue,
    PlanNode,
    PlanNodeKind,
    QueryPlanModel,
    ResultSetStats,
    ShortRepresentation,
)
from spannerplan.parser.parser import parse_plan, parse_plan_file

__all__ = [
    "ChildLink",
    "MetadataValue",
    "PlanNode",
    "PlanNodeKind",
    "QueryPlanModel",
    "ResultSetStats",
    "ShortRepresentation",
    "parse_plan",
    "parse_plan_file",
    "ParseError",
    "ParserConfig",
    "DEFAULT_CONFIG",
]
