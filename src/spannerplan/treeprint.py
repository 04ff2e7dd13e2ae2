"""
Plain-text tree printer with configurable branch glyphs.

Values are opaque strings. Each value is printed after the branch art of
its position; continuation lines of multi-line values are prefixed with the
same vertical links so they stay inside their subtree:

    Distributed Union
    +- Distributed Cross Apply
       +- [Input] Create Batch
       |  +- Local Distributed Union
       +- [Map] Serialize Result

The printer never emits NUL bytes or tabs of its own; TreeStyle rejects
glyphs containing them so callers may use both as in-band delimiters.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

_FORBIDDEN_GLYPH_CHARS = ("\x00", "\t", "\n")


class TreeStyle(BaseModel):
    """
    Branch glyphs of a rendered tree.

    Attributes:
        link: Vertical link drawn below a node that has later siblings.
        mid: Edge to a child that has later siblings.
        end: Edge to the last child.
        indent_size: Spaces after `link` per level.
        edge_separator: Text between the edge glyph and the value.
    """

    model_config = ConfigDict(frozen=True)

    link: str = "|"
    mid: str = "+-"
    end: str = "+-"
    indent_size: int = Field(default=2, ge=0)
    edge_separator: str = " "

    @field_validator("link", "mid", "end", "edge_separator")
    @classmethod
    def _no_delimiters(cls, value: str) -> str:
        if any(char in value for char in _FORBIDDEN_GLYPH_CHARS):
            raise ValueError("tree glyphs must not contain NUL, tab or newline")
        return value

    def column(self, ended: bool) -> str:
        """Padding of one level: a link, or blanks once the level has ended."""
        if ended:
            return " " * (self.indent_size + 1)
        return self.link + " " * self.indent_size


DEFAULT_STYLE = TreeStyle()

COMPACT_STYLE = TreeStyle(
    link="|",
    mid="+",
    end="+",
    indent_size=0,
    edge_separator="",
)


class Tree:
    """A node of a printable tree holding one opaque string value."""

    def __init__(self, value: str = "", parent: Tree | None = None) -> None:
        self.value = value
        self.parent = parent
        self.children: list[Tree] = []

    def set_value(self, value: str) -> None:
        self.value = value

    def add_node(self, value: str) -> Tree:
        """Append a leaf and return self, for chaining."""
        self.children.append(Tree(value, self))
        return self

    def add_branch(self, value: str) -> Tree:
        """Append a child and return it, so it can receive children."""
        branch = Tree(value, self)
        self.children.append(branch)
        return branch

    def render(self, style: TreeStyle = DEFAULT_STYLE) -> str:
        """Render this node as the root of a tree, one line per value line."""
        out = [f"{self.value}\n"]
        self._render_children(out, style, [])
        return "".join(out)

    def _render_children(self, out: list[str], style: TreeStyle, ancestors_ended: list[bool]) -> None:
        prefix = "".join(style.column(ended) for ended in ancestors_ended)
        for position, child in enumerate(self.children):
            last = position == len(self.children) - 1
            edge = style.end if last else style.mid

            first, *rest = child.value.split("\n")
            padding = prefix + style.column(last)
            lines = [first, *(padding + line for line in rest)]

            out.append(f"{prefix}{edge}{style.edge_separator}" + "\n".join(lines) + "\n")
            child._render_children(out, style, [*ancestors_ended, last])
