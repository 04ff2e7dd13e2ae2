"""
Tests for column definitions and result rendering.

Test categories:
- Column parsing (custom strings and YAML files)
- Inline decisions per InlineType
- Table and details sections per PrintMode
"""

from __future__ import annotations

from pathlib import Path

import pytest

from spannerplan.config import RenderConfig
from spannerplan.exceptions import ConfigurationError, FormatParseError
from spannerplan.output import (
    Alignment,
    ColumnRenderDef,
    InlineType,
    PrintMode,
    TableRenderDef,
    custom_file_to_render_def,
    custom_list_to_render_def,
    default_render_def,
    parameter_lines,
    predicate_lines,
    print_result,
    render_table,
    template_map_func,
)
from spannerplan.parser import ChildLink, PlanNode, parse_plan
from spannerplan.plantree import RowWithPredicates, process_plan
from spannerplan.queryplan import QueryPlan, ResolvedChildLink
from spannerplan.title import ExecutionMethodFormat, KnownFlagFormat, TargetMetadataFormat

# =============================================================================
# Fixtures
# =============================================================================

FIXTURES_DIR = Path(__file__).parent / "fixtures"

CLI_CONFIG = RenderConfig(
    execution_method_format=ExecutionMethodFormat.ANGLE,
    target_metadata_format=TargetMetadataFormat.ON,
    known_flag_format=KnownFlagFormat.LABEL,
)


def rows_of(name: str) -> list[RowWithPredicates]:
    qp = QueryPlan(parse_plan(FIXTURES_DIR / name).plan_nodes)
    return process_plan(qp, CLI_CONFIG)


@pytest.fixture
def dca_rows() -> list[RowWithPredicates]:
    return rows_of("distributed_cross_apply.yaml")


@pytest.fixture
def profile_rows() -> list[RowWithPredicates]:
    return rows_of("profile.yaml")


def rows_by_id(rows: list[RowWithPredicates]) -> dict[int, RowWithPredicates]:
    return {row.id: row for row in rows}


def reference(index: int, description: str) -> PlanNode:
    return PlanNode.model_validate(
        {
            "index": index,
            "kind": "SCALAR",
            "displayName": "Reference",
            "shortRepresentation": {"description": description},
        }
    )


# =============================================================================
# Columns
# =============================================================================


class TestAlignment:
    """Test alignment parsing."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("RIGHT", Alignment.RIGHT),
            ("left", Alignment.LEFT),
            ("ALIGN_CENTER", Alignment.CENTER),
            ("align_default", Alignment.DEFAULT),
            ("NONE", Alignment.NONE),
        ],
    )
    def test_parse(self, value: str, expected: Alignment) -> None:
        assert Alignment.parse(value) == expected

    def test_unknown(self) -> None:
        with pytest.raises(FormatParseError):
            Alignment.parse("JUSTIFIED")

    def test_justify(self) -> None:
        assert Alignment.RIGHT.justify == "right"
        assert Alignment.NONE.justify == "default"


class TestShouldInline:
    """Test inline decisions per InlineType."""

    @pytest.mark.parametrize(
        ("inline_type", "name", "requested", "expected"),
        [
            (InlineType.ALWAYS, "Rows", False, True),
            (InlineType.CAN, "Rows", False, False),
            (InlineType.CAN, "Rows", True, True),
            (InlineType.UNSPECIFIED, "Rows", True, True),
            (InlineType.UNSPECIFIED, "Rows", False, False),
            (InlineType.UNSPECIFIED, "ID", True, False),
            (InlineType.UNSPECIFIED, "Operator", True, False),
            (InlineType.CAN, "ID", True, True),
            (InlineType.NEVER, "Rows", True, False),
        ],
    )
    def test_should_inline(self, inline_type: InlineType, name: str, requested: bool, expected: bool) -> None:
        column = ColumnRenderDef(name=name, map_func=lambda row: "", inline=inline_type)
        assert column.should_inline(requested) is expected

    def test_table_columns_drop_inlined(self) -> None:
        render_def = default_render_def(with_stats=True)

        assert render_def.table_columns(inline=True).column_names == ["ID", "Operator"]
        assert render_def.table_columns(inline=False).column_names == ["ID", "Operator", "Rows", "Exec.", "Latency"]


class TestDefaultRenderDef:
    """Test the built-in columns."""

    def test_without_stats(self) -> None:
        render_def = default_render_def(with_stats=False)

        assert render_def.column_names == ["ID", "Operator"]
        assert render_def.column_alignments == [Alignment.RIGHT, Alignment.LEFT]

    def test_stats_columns(self, profile_rows: list[RowWithPredicates]) -> None:
        render_def = default_render_def(with_stats=True)
        assert render_def.map_row(profile_rows[0]) == ["*0", "Distributed Union on Singers <Row>", "1", "1", "1.92 ms"]


class TestCustomColumns:
    """Test user-defined columns."""

    def test_custom_list(self, profile_rows: list[RowWithPredicates]) -> None:
        render_def = custom_list_to_render_def(
            [
                "ID:{format_id}:RIGHT",
                "Rows:{execution_stats.rows}:ALIGN_RIGHT:CAN",
                "Scanned:{execution_stats.scanned_rows.total}",
            ]
        )

        assert render_def.column_names == ["ID", "Rows", "Scanned"]
        assert [c.alignment for c in render_def.columns] == [Alignment.RIGHT, Alignment.RIGHT, Alignment.NONE]
        assert [c.inline for c in render_def.columns] == [InlineType.UNSPECIFIED, InlineType.CAN, InlineType.UNSPECIFIED]
        assert render_def.map_row(profile_rows[3]) == ["3", "1 rows", "1"]

    def test_empty_alignment_and_inline(self) -> None:
        render_def = custom_list_to_render_def(["Exec.:{execution_stats.execution_summary.num_executions}::"])

        column = render_def.columns[0]
        assert column.alignment == Alignment.NONE
        assert column.inline == InlineType.UNSPECIFIED

    @pytest.mark.parametrize(
        "definition",
        ["NoTemplate", "Rows:{x}:SIDEWAYS", "Rows:{x}:RIGHT:SOMETIMES", "Bad:{unclosed"],
    )
    def test_invalid_definitions(self, definition: str) -> None:
        with pytest.raises(ConfigurationError):
            custom_list_to_render_def([definition])

    def test_unknown_template_field_fails_on_render(self, dca_rows: list[RowWithPredicates]) -> None:
        map_func = template_map_func("Bad", "{no_such_field}")

        with pytest.raises(ConfigurationError, match="Bad"):
            map_func(dca_rows[0])

    def test_custom_file(self, tmp_path: Path, profile_rows: list[RowWithPredicates]) -> None:
        path = tmp_path / "columns.yaml"
        path.write_text(
            "- name: ID\n"
            "  template: '{format_id}'\n"
            "  alignment: RIGHT\n"
            "- name: Latency\n"
            "  template: '{execution_stats.latency.short}'\n"
            "  alignment: ALIGN_RIGHT\n"
            "  inline: always\n"
        )

        render_def = custom_file_to_render_def(path)

        assert render_def.column_names == ["ID", "Latency"]
        assert render_def.columns[1].inline == InlineType.ALWAYS
        assert render_def.map_row(profile_rows[0]) == ["*0", "1.92 ms"]

    def test_custom_file_text(self) -> None:
        render_def = custom_file_to_render_def("- {name: Op, template: '{text}'}\n")
        assert render_def.column_names == ["Op"]

    @pytest.mark.parametrize(
        "text",
        [
            "name: ID\n",
            "- name: ID\n",
            "- {name: ID, template: x, alignment: SIDEWAYS}\n",
            "- [unclosed\n",
        ],
    )
    def test_invalid_custom_file(self, text: str) -> None:
        with pytest.raises(ConfigurationError):
            custom_file_to_render_def(text)

    def test_unknown_keys_are_ignored(self) -> None:
        render_def = custom_file_to_render_def("- {name: ID, template: '{format_id}', colour: red}\n")

        assert render_def.column_names == ["ID"]
        assert render_def.columns[0].alignment == Alignment.NONE


# =============================================================================
# Rendering
# =============================================================================


class TestRenderTable:
    """Test the ASCII box table."""

    def test_no_rows_no_table(self) -> None:
        assert render_table(default_render_def(False), []) == ""

    def test_table_layout(self, dca_rows: list[RowWithPredicates]) -> None:
        table = render_table(default_render_def(False), dca_rows)
        lines = table.splitlines()

        assert lines[0].startswith("+-") and lines[0].endswith("-+")
        assert lines[1].startswith("| ID  | Operator")
        assert lines[-1].startswith("+-")
        assert len(lines) == len(dca_rows) + 4
        assert len({len(line) for line in lines}) == 1

    def test_cells_are_aligned(self, dca_rows: list[RowWithPredicates]) -> None:
        table = render_table(default_render_def(False), dca_rows)

        assert "|   0 | Distributed Union on AlbumsByAlbumTitle <Row>" in table
        assert "|  *1 | +- Distributed Cross Apply <Row>" in table
        assert f"| *17 | {rows_by_id(dca_rows)[17].text}" in table

    def test_brackets_are_not_markup(self, dca_rows: list[RowWithPredicates]) -> None:
        table = render_table(default_render_def(False), dca_rows)
        assert "[Input] Create Batch" in table
        assert "[Map] Serialize Result" in table

    def test_multiline_cells(self, dca_rows: list[RowWithPredicates]) -> None:
        qp = QueryPlan(parse_plan(FIXTURES_DIR / "distributed_cross_apply.yaml").plan_nodes)
        rows = process_plan(qp, CLI_CONFIG.model_copy(update={"wrap_width": 50}))

        table = render_table(default_render_def(False), rows)

        extra_lines = sum(row.text.count("\n") for row in rows)
        assert extra_lines > 0
        assert len(table.splitlines()) == len(dca_rows) + 4 + extra_lines
        assert "|     |    |           Row> (Full scan, scan_method: Auto" in table


class TestDetails:
    """Test predicate and parameter sections."""

    def test_predicates(self, dca_rows: list[RowWithPredicates]) -> None:
        output = print_result(default_render_def(False), dca_rows, PrintMode.PREDICATES)

        assert output.endswith(
            "Predicates(identified by ID):\n"
            "  1: Split Range: ($AlbumId = $AlbumId_1)\n"
            " 17: Residual Condition: ($AlbumId = $batched_AlbumId_1)\n"
        )

    def test_typed_parameters(self, dca_rows: list[RowWithPredicates]) -> None:
        output = print_result(default_render_def(False), dca_rows, PrintMode.TYPED)

        assert output.endswith(
            "Node Parameters(identified by ID):\n"
            "  1: Split Range: ($AlbumId = $AlbumId_1)\n"
            " 17: Residual Condition: ($AlbumId = $batched_AlbumId_1)\n"
        )

    def test_full_parameters(self, dca_rows: list[RowWithPredicates]) -> None:
        assert parameter_lines(dca_rows, include_untyped=True) == [
            " 1: Split Range: ($AlbumId = $AlbumId_1)",
            " 4: $AlbumId=$AlbumId, $AlbumTitle=$AlbumTitle",
            " 5: $AlbumId=AlbumId, $AlbumTitle=AlbumTitle, $SingerId=SingerId",
            "11: $SongName",
            "13: $batched_AlbumId=AlbumId",
            "17: Residual Condition: ($AlbumId = $batched_AlbumId_1)",
        ]

    def test_groups_sorted_by_type_with_continuation_prefix(self) -> None:
        key = ChildLink(child_index=1, type="Key")
        untyped = ChildLink(child_index=2, variable="v")
        row = RowWithPredicates(
            id=0,
            tree_part="",
            node_text="Sort",
            child_links={
                "Key": [ResolvedChildLink(key, reference(1, "$a ASC"))],
                "": [ResolvedChildLink(untyped, reference(2, "$b"))],
            },
        )

        assert parameter_lines([row], include_untyped=True) == ["0: $v=$b", "   Key: $a ASC"]
        assert parameter_lines([row]) == ["0: Key: $a ASC"]

    def test_multiple_predicates_share_an_id(self) -> None:
        row = RowWithPredicates(
            id=12,
            tree_part="",
            node_text="Hash Join",
            predicates=["Condition: ($a = $b)", "Residual Condition: ($c > 1)"],
        )
        other = RowWithPredicates(id=3, tree_part="", node_text="Scan", predicates=["Seek Condition: ($k = 1)"])

        assert predicate_lines([other, row]) == [
            " 3: Seek Condition: ($k = 1)",
            "12: Condition: ($a = $b)",
            "    Residual Condition: ($c > 1)",
        ]

    def test_no_details_no_header(self) -> None:
        row = RowWithPredicates(id=0, tree_part="", node_text="Unit Relation")
        output = print_result(default_render_def(False), [row], PrintMode.PREDICATES)

        assert "Predicates" not in output

    def test_print_mode_parse(self) -> None:
        assert PrintMode.parse("FULL") == PrintMode.FULL
        with pytest.raises(FormatParseError):
            PrintMode.parse("everything")

    def test_empty_rows(self) -> None:
        assert print_result(TableRenderDef(), [], PrintMode.FULL) == ""
