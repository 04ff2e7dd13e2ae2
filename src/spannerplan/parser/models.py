"""
Pydantic models for Cloud Spanner query plans.

These models mirror the JSON/YAML form of the Spanner protobuf messages:
- ResultSetStats: Wrapper holding the query plan and optional query stats
- QueryPlanModel: The flat, ordered list of plan nodes
- PlanNode: One operator or expression node, linked to children by index
- ChildLink: A typed, directed edge from a node to one of its children

Spanner emits camelCase keys in JSON (protojson) and snake_case keys in some
tools, so every aliased field accepts both spellings.

Reference: https://cloud.google.com/spanner/docs/query-execution-plans
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Closed variant for plan node metadata values: String, Bool, Number, Absent.
MetadataValue = Union[str, bool, int, float, None]


class PlanNodeKind(str, Enum):
    """Kind of a plan node."""
    KIND_UNSPECIFIED = "KIND_UNSPECIFIED"
    RELATIONAL = "RELATIONAL"
    SCALAR = "SCALAR"


# protojson also accepts enum numbers
_KIND_NUMBERS = {
    0: PlanNodeKind.KIND_UNSPECIFIED,
    1: PlanNodeKind.RELATIONAL,
    2: PlanNodeKind.SCALAR,
}


class ChildLink(BaseModel):
    """
    A directed edge from a parent plan node to a child plan node.

    `type` describes the role of the child (e.g. "Input", "Map",
    "Split Range", "Residual Condition") and is often empty.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    child_index: int = Field(
        default=0,
        alias="childIndex",
        description="Index of the child node in the plan node list",
    )

    type: str = Field(
        default="",
        description="Role of the child in the parent operator",
    )

    variable: str = Field(
        default="",
        description="Variable name bound to the child's output (if any)",
    )


class ShortRepresentation(BaseModel):
    """Condensed text form of a scalar expression node."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    description: str = Field(
        default="",
        description="SQL-like text of the expression",
    )

    subqueries: dict[str, int] = Field(
        default_factory=dict,
        description="Subquery variable name to plan node index",
    )


class PlanNode(BaseModel):
    """
    Represents a single node in a Spanner query execution plan.

    Unlike tree-shaped plans, Spanner plans are flat: every node is stored in
    one list and refers to its children by index through `child_links`.

    Fields are divided into:
    - Identity: index, kind, display name
    - Structure: child links
    - Presentation: short representation, metadata
    - Runtime: execution stats (PROFILE mode only, schema-flexible)
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    index: int = Field(
        default=0,
        description="Position of this node in the plan node list",
    )

    kind: PlanNodeKind = Field(
        default=PlanNodeKind.KIND_UNSPECIFIED,
        description="RELATIONAL for operators, SCALAR for expressions",
    )

    display_name: str = Field(
        default="",
        alias="displayName",
        description="Operator name (e.g., 'Distributed Union', 'Function')",
    )

    child_links: list[ChildLink] = Field(
        default_factory=list,
        alias="childLinks",
        description="Ordered links to child nodes",
    )

    short_representation: ShortRepresentation | None = Field(
        default=None,
        alias="shortRepresentation",
        description="Condensed form of scalar expressions",
    )

    metadata: dict[str, MetadataValue] = Field(
        default_factory=dict,
        description="Operator attributes (execution_method, scan_target, ...)",
    )

    execution_stats: dict[str, Any] | None = Field(
        default=None,
        alias="executionStats",
        description="Untyped runtime statistics (PROFILE mode only)",
    )

    @field_validator("kind", mode="before")
    @classmethod
    def _kind_from_number(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return _KIND_NUMBERS.get(value, value)
        return value

    @field_validator("metadata", mode="before")
    @classmethod
    def _flatten_metadata(cls, value: Any) -> Any:
        # Struct values may nest lists or structs; keep them as JSON text
        if not isinstance(value, dict):
            return value
        return {
            key: json.dumps(item, sort_keys=True) if isinstance(item, (dict, list)) else item
            for key, item in value.items()
        }

    @property
    def is_relational(self) -> bool:
        return self.kind == PlanNodeKind.RELATIONAL

    @property
    def is_scalar(self) -> bool:
        return self.kind == PlanNodeKind.SCALAR

    @property
    def description(self) -> str:
        """Short description of this node, empty when absent."""
        if self.short_representation is None:
            return ""
        return self.short_representation.description


class QueryPlanModel(BaseModel):
    """The flat list of plan nodes of one query."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    plan_nodes: list[PlanNode] = Field(
        default_factory=list,
        alias="planNodes",
        description="All plan nodes; the root is at index 0",
    )


class ResultSetStats(BaseModel):
    """
    Top-level structure returned alongside a Spanner query result.

    Usage:
        stats = parse_plan("plan.yaml")
        for node in stats.plan_nodes:
            print(node.index, node.display_name)
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    query_plan: QueryPlanModel = Field(
        default_factory=QueryPlanModel,
        alias="queryPlan",
        description="The query execution plan",
    )

    query_stats: dict[str, Any] | None = Field(
        default=None,
        alias="queryStats",
        description="Aggregated query statistics (PROFILE mode only)",
    )

    @property
    def plan_nodes(self) -> list[PlanNode]:
        return self.query_plan.plan_nodes
