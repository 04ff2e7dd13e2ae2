"""
Output module - table and detail sections for decoded plan rows.

Usage:
    from spannerplan.output import default_render_def, print_result, PrintMode

    rows = process_plan(qp, config)
    print(print_result(default_render_def(with_stats=False), rows, PrintMode.PREDICATES))
"""

from spannerplan.output.columns import (
    ID_COLUMN,
    OPERATOR_COLUMN,
    STATS_COLUMNS,
    Alignment,
    ColumnRenderDef,
    InlineType,
    PlainColumnRenderDef,
    TableRenderDef,
    custom_file_to_render_def,
    custom_list_to_render_def,
    default_render_def,
    template_map_func,
)
from spannerplan.output.renderers import (
    PrintMode,
    parameter_lines,
    predicate_lines,
    print_result,
    render_table,
)

__all__ = [
    "Alignment",
    "ColumnRenderDef",
    "ID_COLUMN",
    "InlineType",
    "OPERATOR_COLUMN",
    "PlainColumnRenderDef",
    "PrintMode",
    "STATS_COLUMNS",
    "TableRenderDef",
    "custom_file_to_render_def",
    "custom_list_to_render_def",
    "default_render_def",
    "parameter_lines",
    "predicate_lines",
    "print_result",
    "render_table",
    "template_map_func",
]
