"""
Depth-first linearization of a QueryPlan into a printable tree.

The tree printer only handles opaque strings, yet every rendered line must
later be traced back to its plan node. Each value is therefore a payload
that carries the node identity next to its title:

    "\\n" * k + "\\t" + json(title) + "\\t" + json(child_link) + "\\x00"

- k is the number of newlines in the (wrapped) title, so the printer emits
  exactly one line of branch art per title line before the first tab.
- JSON escaping leaves the two tabs as the only bare field delimiters.
- NUL terminates the record; the printer never emits it on its own.

decode.decode_rows() reverses this after rendering.
"""

from __future__ import annotations

import json

from pydantic_core import PydanticSerializationError
from rich.cells import cell_len

from spannerplan.config import RenderConfig
from spannerplan.exceptions import EncodingError
from spannerplan.parser.models import ChildLink
from spannerplan.plantree.wrap import wrap
from spannerplan.queryplan import QueryPlan
from spannerplan.title import node_title
from spannerplan.treeprint import Tree

RECORD_TERMINATOR = "\x00"
FIELD_DELIMITER = "\t"


def build_tree(qp: QueryPlan, config: RenderConfig | None = None) -> Tree:
    """
    Build a printable tree of payloads from the visible nodes of `qp`.

    Children follow the original child link order; invisible children and
    their subtrees are skipped.

    Raises:
        EncodingError: If a title or child link cannot be JSON encoded.
    """
    config = config or RenderConfig()
    tree = Tree()
    _add_node(qp, tree, None, 0, config)
    return tree


def node_text(qp: QueryPlan, link: ChildLink | None, level: int, config: RenderConfig) -> str:
    """Title of the linked node with its link type label, wrapped if enabled."""
    sep = "" if config.compact else " "
    node = qp.get_node_by_child_link(link)
    link_type = qp.get_link_type(link)

    text = (f"[{link_type}]{sep}" if link_type else "") + node_title(node, config.title_options())
    if config.wrap_width > 0:
        style = config.tree_style
        text = wrap(text, config.wrap_width - level * (style.indent_size + 1) - cell_len(sep))
    return text


def encode_payload(text: str, link: ChildLink | None, node_index: int | None = None) -> str:
    """
    Encode a title and its child link into one tree value.

    Raises:
        EncodingError: If either part can't be encoded to JSON. The render
            is aborted.
    """
    try:
        text_json = json.dumps(text)
        link_json = "null" if link is None else link.model_dump_json(by_alias=True)
    except (TypeError, ValueError, PydanticSerializationError) as e:
        raise EncodingError(f"payload can't be marshalled to JSON: {e}", node_index=node_index) from e

    return (
        "\n" * text.count("\n")
        + FIELD_DELIMITER
        + text_json
        + FIELD_DELIMITER
        + link_json
        + RECORD_TERMINATOR
    )


def _add_node(
    qp: QueryPlan,
    tree: Tree,
    link: ChildLink | None,
    level: int,
    config: RenderConfig,
) -> None:
    if not qp.is_visible(link):
        return

    node = qp.get_node_by_child_link(link)
    payload = encode_payload(node_text(qp, link, level, config), link, node.index)
    visible_child_links = qp.visible_child_links(node)

    if link is None:
        tree.set_value(payload)
        branch = tree
    elif visible_child_links:
        branch = tree.add_branch(payload)
    else:
        tree.add_node(payload)
        return

    for child in visible_child_links:
        _add_node(qp, branch, child, level + 1, config)
