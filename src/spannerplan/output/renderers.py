"""
Text rendering of decoded plan rows.

The result is an ASCII box table followed by one section of per-node
details, selected by PrintMode:

    +----+-------------------------------------+
    | ID | Operator                            |
    +----+-------------------------------------+
    | *0 | Distributed Union on Songs <Row>    |
    |  1 | +- Local Distributed Union <Row>    |
    ...
    Predicates(identified by ID):
     0: Split Range: ($SingerId = 1)
"""

from __future__ import annotations

from enum import Enum
from io import StringIO

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from spannerplan.exceptions import FormatParseError
from spannerplan.output.columns import TableRenderDef
from spannerplan.plantree.rows import RowWithPredicates

# Wide enough that rich never wraps or truncates a cell
_CONSOLE_WIDTH = 100_000


class PrintMode(str, Enum):
    """Which per-node details follow the table."""

    PREDICATES = "predicates"
    TYPED = "typed"
    FULL = "full"

    @classmethod
    def parse(cls, value: str) -> PrintMode:
        try:
            return cls(value.lower())
        except ValueError as e:
            raise FormatParseError("PrintMode", value, [member.value for member in cls]) from e


def render_table(render_def: TableRenderDef, rows: list[RowWithPredicates]) -> str:
    """Render rows as an ASCII box table; empty when there are no rows."""
    if not rows:
        return ""

    table = Table(box=box.ASCII, show_lines=False, header_style=None)
    for name, alignment in zip(render_def.column_names, render_def.column_alignments):
        table.add_column(Text(name, justify="left"), justify=alignment.justify, no_wrap=True)

    for row in rows:
        table.add_row(*(Text(value) for value in render_def.map_row(row)))

    console = Console(
        file=StringIO(),
        width=_CONSOLE_WIDTH,
        color_system=None,
        highlight=False,
        legacy_windows=False,
    )
    console.print(table)
    return console.file.getvalue()


def _id_prefix(row: RowWithPredicates, max_id_length: int, first: bool) -> str:
    if first:
        return f"{row.id:>{max_id_length}}:"
    return " " * (max_id_length + 1)


def predicate_lines(rows: list[RowWithPredicates]) -> list[str]:
    """`<id>: <predicate>` lines, ids right-aligned to the longest id."""
    max_id_length = max((len(str(row.id)) for row in rows), default=0)

    lines = []
    for row in rows:
        for i, predicate in enumerate(row.predicates):
            lines.append(f"{_id_prefix(row, max_id_length, i == 0)} {predicate}")
    return lines


def parameter_lines(rows: list[RowWithPredicates], include_untyped: bool = False) -> list[str]:
    """
    `<id>: <type>: [$var=]description` lines of scalar operands.

    Operands are grouped by link type in sorted order. Untyped operands
    are only listed with `include_untyped`.
    """
    max_id_length = max((len(str(row.id)) for row in rows), default=0)

    lines = []
    for row in rows:
        emitted = 0
        for link_type, links in sorted(row.child_links.items()):
            if not include_untyped and link_type == "":
                continue

            joined = ", ".join(
                f"${item.child_link.variable}={item.child.description}"
                if item.child_link.variable
                else item.child.description
                for item in links
            )
            if not joined:
                continue

            type_part = f"{link_type}: " if link_type else ""
            lines.append(f"{_id_prefix(row, max_id_length, emitted == 0)} {type_part}{joined}")
            emitted += 1
    return lines


def print_result(
    render_def: TableRenderDef,
    rows: list[RowWithPredicates],
    print_mode: PrintMode = PrintMode.PREDICATES,
) -> str:
    """
    Render the table and the details section of `print_mode`.

    Raises:
        ConfigurationError: If a column template fails on a row.
    """
    out = [render_table(render_def, rows)]

    if print_mode == PrintMode.PREDICATES:
        header = "Predicates(identified by ID):"
        lines = predicate_lines(rows)
    else:
        header = "Node Parameters(identified by ID):"
        lines = parameter_lines(rows, include_untyped=print_mode == PrintMode.FULL)

    if lines:
        out.append(header + "\n")
        out.extend(f" {line}\n" for line in lines)
    return "".join(out)
