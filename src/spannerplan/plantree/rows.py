"""Decoded rows of a rendered plan tree."""

from __future__ import annotations

from dataclasses import dataclass, field

from spannerplan.parser.models import PlanNode
from spannerplan.queryplan import ResolvedChildLink
from spannerplan.stats.models import ExecutionStats


@dataclass(frozen=True)
class RowWithPredicates:
    """
    One visible plan node as a table row.

    Attributes:
        id: Index of the plan node.
        tree_part: Branch art, one line per line of node_text.
        node_text: Operator title, possibly wrapped onto several lines.
        predicates: `<link type>: <description>` of each predicate child.
        child_links: Scalar child links grouped by their raw link type.
        execution_stats: Decoded stats; empty when the plan has none.
        node: The plan node itself.
    """

    id: int
    tree_part: str
    node_text: str
    predicates: list[str] = field(default_factory=list)
    child_links: dict[str, list[ResolvedChildLink]] = field(default_factory=dict)
    execution_stats: ExecutionStats = field(default_factory=ExecutionStats)
    node: PlanNode | None = None

    @property
    def text(self) -> str:
        """Branch art interleaved with the lines of the operator title."""
        tree_lines = self.tree_part.split("\n")
        lines = []
        for i, line in enumerate(self.node_text.split("\n")):
            prefix = tree_lines[i] if i < len(tree_lines) else ""
            lines.append(prefix + line)
        return "\n".join(lines)

    @property
    def format_id(self) -> str:
        """The id, marked with `*` when the row has predicates."""
        return ("*" if self.predicates else "") + str(self.id)
