"""
Navigation and classification over a flat Spanner query plan.

Spanner stores a plan as a list of nodes where each node refers to its
children by index. QueryPlan wraps that list, derives the reverse
(child -> parent) index once, and answers the questions the renderer asks:

- Which node does a child link point to, and who is its parent?
- Is a child rendered as its own row (visible)?
- Is a child link a predicate (filter/seek/join condition, split range)?
- What role label should a link display?

QueryPlan is immutable after construction and holds no per-render state.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from spannerplan.exceptions import EmptyPlanError, PlanIndexError
from spannerplan.parser.models import ChildLink, PlanNode, PlanNodeKind

SCALAR_LINK_TYPE = "Scalar"
FUNCTION_DISPLAY_NAME = "Function"
SPLIT_RANGE_LINK_TYPE = "Split Range"


@dataclass(frozen=True)
class ResolvedChildLink:
    """A child link paired with the node it points to."""

    child_link: ChildLink
    child: PlanNode


class QueryPlan:
    """
    Read-only view over the plan nodes of one query.

    Args:
        plan_nodes: All plan nodes, ordered so that position == index.

    Raises:
        EmptyPlanError: If plan_nodes is empty.
        PlanIndexError: If a node's declared index differs from its position.
    """

    def __init__(self, plan_nodes: Sequence[PlanNode]) -> None:
        if not plan_nodes:
            raise EmptyPlanError()

        parent_map: dict[int, int] = {}
        for position, node in enumerate(plan_nodes):
            if node.index != position:
                raise PlanIndexError(position, node.index)
            for link in node.child_links:
                parent_map[link.child_index] = node.index

        self._plan_nodes = tuple(plan_nodes)
        self._parent_map = parent_map

    @property
    def plan_nodes(self) -> tuple[PlanNode, ...]:
        return self._plan_nodes

    @property
    def root(self) -> PlanNode:
        return self._plan_nodes[0]

    def has_stats(self) -> bool:
        return has_stats(self._plan_nodes)

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_node_by_index(self, index: int) -> PlanNode:
        if index < 0:
            raise IndexError(f"plan node index out of range: {index}")
        return self._plan_nodes[index]

    def get_node_by_child_link(self, link: ChildLink | None) -> PlanNode:
        """Return the node `link` points to; a None link means the root."""
        if link is None:
            return self.root
        return self.get_node_by_index(link.child_index)

    def get_parent_node_by_child_index(self, index: int) -> PlanNode | None:
        parent_index = self._parent_map.get(index)
        if parent_index is None:
            return None
        return self.get_node_by_index(parent_index)

    def get_parent_node_by_child_link(self, link: ChildLink | None) -> PlanNode | None:
        if link is None:
            return None
        return self.get_parent_node_by_child_index(link.child_index)

    def resolve_child_link(self, link: ChildLink) -> ResolvedChildLink:
        return ResolvedChildLink(child_link=link, child=self.get_node_by_child_link(link))

    # =========================================================================
    # Classification
    # =========================================================================

    def is_visible(self, link: ChildLink | None) -> bool:
        """
        Whether the linked node is rendered as its own row.

        Relational operators are always visible. Scalar nodes are visible
        only when linked with the "Scalar" role (e.g. scalar subqueries).
        """
        node = self.get_node_by_child_link(link)
        link_type = link.type if link is not None else ""
        return node.kind == PlanNodeKind.RELATIONAL or link_type == SCALAR_LINK_TYPE

    def visible_child_links(self, node: PlanNode) -> list[ChildLink]:
        return [link for link in node.child_links if self.is_visible(link)]

    def is_function(self, link: ChildLink) -> bool:
        return self.get_node_by_child_link(link).display_name == FUNCTION_DISPLAY_NAME

    def is_predicate(self, link: ChildLink) -> bool:
        """
        Whether a child link is a predicate of its parent.

        Known predicates are Condition (Filter, Hash Join), Seek Condition and
        Residual Condition (Filter Scan, Hash Join), and Split Range
        (Distributed Union). Agg (Aggregate) is a Function but not a predicate.
        """
        if not self.is_function(link):
            return False
        return link.type.endswith("Condition") or link.type == SPLIT_RANGE_LINK_TYPE

    def get_link_type(self, link: ChildLink | None) -> str:
        """Role label of a link, normalized for Apply operators."""
        if link is None:
            return ""
        if link.type:
            return link.type
        return apply_input_link_type(self.get_parent_node_by_child_link(link), link)


def apply_input_link_type(parent: PlanNode | None, link: ChildLink) -> str:
    """
    Label the untyped first child of an Apply operator as "Input".

    Matches the operator reference, which names that child Input for Cross
    Apply, Anti Semi Apply, Semi Apply, Outer Apply and their Distributed
    variants. Re-check this rule if the operator catalog changes.
    """
    if parent is None or not parent.display_name.endswith("Apply"):
        return ""
    if parent.child_links and parent.child_links[0].child_index == link.child_index:
        return "Input"
    return ""


def has_stats(plan_nodes: Sequence[PlanNode]) -> bool:
    """True only if the first node carries execution stats."""
    if not plan_nodes:
        return False
    return plan_nodes[0].execution_stats is not None
