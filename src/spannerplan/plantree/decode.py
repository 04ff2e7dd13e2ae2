"""
Recover structured rows from a rendered payload tree.

The rendered text is a sequence of NUL-terminated records (see
linearize.py). Each record splits on tabs into branch art, the JSON title,
and the JSON child link. The child link, not the title, identifies the
node, so rows stay exact when two operators render the same title.
"""

from __future__ import annotations

import json
from collections import defaultdict

from pydantic import ValidationError

from spannerplan.exceptions import DecodeError
from spannerplan.parser.models import ChildLink, PlanNode, PlanNodeKind
from spannerplan.plantree.linearize import FIELD_DELIMITER, RECORD_TERMINATOR
from spannerplan.plantree.rows import RowWithPredicates
from spannerplan.queryplan import QueryPlan, ResolvedChildLink
from spannerplan.stats import extract


def decode_rows(
    qp: QueryPlan,
    rendered: str,
    disallow_unknown_stats: bool = False,
) -> list[RowWithPredicates]:
    """
    Decode every record of `rendered` into a row, in emission order.

    Raises:
        DecodeError: If a record is malformed.
        StatsDecodeError: If a node's stats are rejected.
    """
    rows = []
    for fragment in rendered.split(RECORD_TERMINATOR + "\n"):
        if not fragment.strip():
            continue
        rows.append(decode_row(qp, fragment, disallow_unknown_stats))
    return rows


def decode_row(qp: QueryPlan, fragment: str, disallow_unknown_stats: bool = False) -> RowWithPredicates:
    """Decode a single record (without its terminator)."""
    fields = fragment.split(FIELD_DELIMITER)
    if len(fields) != 3:
        raise DecodeError("unexpected format", fragment)

    branch_text, title_json, link_json = fields
    branch_text = branch_text.removeprefix("\n")

    try:
        node_text = json.loads(title_json)
        link_data = json.loads(link_json)
    except json.JSONDecodeError as e:
        raise DecodeError(f"unexpected JSON unmarshal error: {e}", fragment) from e
    if not isinstance(node_text, str):
        raise DecodeError("node text is not a JSON string", fragment)

    try:
        link = None if link_data is None else ChildLink.model_validate(link_data)
    except ValidationError as e:
        raise DecodeError(f"invalid child link: {e.error_count()} error(s)", fragment) from e

    try:
        node = qp.get_node_by_child_link(link)
    except IndexError as e:
        raise DecodeError(f"child link points to no plan node: {e}", fragment) from e

    return RowWithPredicates(
        id=node.index,
        tree_part=branch_text,
        node_text=node_text,
        predicates=predicates(qp, node),
        child_links=scalar_child_links(qp, node),
        execution_stats=extract(node, disallow_unknown_stats),
        node=node,
    )


def predicates(qp: QueryPlan, node: PlanNode) -> list[str]:
    """`<link type>: <description>` of each predicate child of `node`."""
    return [
        f"{link.type}: {qp.get_node_by_child_link(link).description}"
        for link in node.child_links
        if qp.is_predicate(link)
    ]


def scalar_child_links(qp: QueryPlan, node: PlanNode) -> dict[str, list[ResolvedChildLink]]:
    """Scalar children of `node` grouped by raw link type, in link order."""
    grouped: dict[str, list[ResolvedChildLink]] = defaultdict(list)
    for link in node.child_links:
        resolved = qp.resolve_child_link(link)
        if resolved.child.kind == PlanNodeKind.SCALAR:
            grouped[link.type].append(resolved)
    return dict(grouped)
