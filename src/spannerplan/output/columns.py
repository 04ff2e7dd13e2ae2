"""
Table column definitions.

A column maps a decoded row to a cell string. Besides the built-in ID,
Operator and stats columns, users define columns with format templates
over the row's fields:

    --custom 'Rows:{execution_stats.rows.total}:RIGHT'
    --custom 'Latency:{execution_stats.latency.short}:RIGHT:CAN'

or a YAML file holding a list of column definitions:

    - name: Rows
      template: "{execution_stats.rows.total}"
      alignment: RIGHT
      inline: CAN

Template fields are the attributes of RowWithPredicates (id, format_id,
text, node_text, predicates, execution_stats, node, ...).
"""

from __future__ import annotations

import string
from collections.abc import Callable
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from spannerplan.exceptions import ConfigurationError, FormatParseError
from spannerplan.plantree.rows import RowWithPredicates

MapFunc = Callable[[RowWithPredicates], str]

# Columns that never inline unless asked to explicitly
_STRUCTURAL_COLUMNS = ("ID", "Operator")


class Alignment(str, Enum):
    """Horizontal alignment of a column's cells."""

    RIGHT = "RIGHT"
    LEFT = "LEFT"
    CENTER = "CENTER"
    DEFAULT = "DEFAULT"
    NONE = "NONE"

    @classmethod
    def parse(cls, value: str) -> Alignment:
        try:
            return cls(value.upper().removeprefix("ALIGN_"))
        except ValueError as e:
            raise FormatParseError("Alignment", value, [member.value for member in cls]) from e

    @property
    def justify(self) -> str:
        """The matching rich justify method."""
        if self in (Alignment.DEFAULT, Alignment.NONE):
            return "default"
        return self.value.lower()


class InlineType(str, Enum):
    """Whether a column may be folded into the operator title."""

    UNSPECIFIED = ""
    NEVER = "NEVER"
    ALWAYS = "ALWAYS"
    CAN = "CAN"

    @classmethod
    def parse(cls, value: str) -> InlineType:
        if value.upper() in (cls.NEVER.value, cls.ALWAYS.value, cls.CAN.value):
            return cls(value.upper())
        raise FormatParseError("InlineType", value, [cls.ALWAYS.value, cls.CAN.value, cls.NEVER.value])


@dataclass(frozen=True)
class ColumnRenderDef:
    """One table column."""

    name: str
    map_func: MapFunc
    alignment: Alignment = Alignment.NONE
    inline: InlineType = InlineType.UNSPECIFIED

    def should_inline(self, inline: bool) -> bool:
        """
        Whether this column is folded into the operator title.

        Args:
            inline: Whether inline stats were requested.
        """
        if self.inline == InlineType.ALWAYS:
            return True
        if self.inline == InlineType.CAN:
            return inline
        if self.inline == InlineType.UNSPECIFIED:
            return inline and self.name not in _STRUCTURAL_COLUMNS
        return False


@dataclass(frozen=True)
class TableRenderDef:
    """Ordered columns of the result table."""

    columns: list[ColumnRenderDef] = field(default_factory=list)

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    @property
    def column_alignments(self) -> list[Alignment]:
        return [column.alignment for column in self.columns]

    def map_row(self, row: RowWithPredicates) -> list[str]:
        return [column.map_func(row) for column in self.columns]

    def table_columns(self, inline: bool) -> TableRenderDef:
        """The columns that stay in the table when `inline` is requested."""
        return TableRenderDef([column for column in self.columns if not column.should_inline(inline)])


# =============================================================================
# Templates
# =============================================================================


def _row_fields(row: RowWithPredicates) -> dict[str, Any]:
    values: dict[str, Any] = {f.name: getattr(row, f.name) for f in fields(row)}
    values["text"] = row.text
    values["format_id"] = row.format_id
    return values


def template_map_func(name: str, template: str) -> MapFunc:
    """
    Build a map function from a `str.format` template over row fields.

    Raises:
        ConfigurationError: If the template is malformed.
    """
    try:
        list(string.Formatter().parse(template))
    except ValueError as e:
        raise ConfigurationError(f"invalid template of column {name}: {e}", config_key=name) from e

    def map_func(row: RowWithPredicates) -> str:
        try:
            return template.format(**_row_fields(row))
        except (KeyError, AttributeError, IndexError, ValueError) as e:
            raise ConfigurationError(f"failed to render column {name}: {e!r}", config_key=name) from e

    return map_func


# =============================================================================
# Built-in columns
# =============================================================================


ID_COLUMN = ColumnRenderDef(
    name="ID",
    map_func=lambda row: row.format_id,
    alignment=Alignment.RIGHT,
    inline=InlineType.NEVER,
)

OPERATOR_COLUMN = ColumnRenderDef(
    name="Operator",
    map_func=lambda row: row.text,
    alignment=Alignment.LEFT,
    inline=InlineType.NEVER,
)

STATS_COLUMNS = (
    ColumnRenderDef(
        name="Rows",
        map_func=lambda row: row.execution_stats.rows.total,
        alignment=Alignment.RIGHT,
    ),
    ColumnRenderDef(
        name="Exec.",
        map_func=lambda row: row.execution_stats.execution_summary.num_executions,
        alignment=Alignment.RIGHT,
    ),
    ColumnRenderDef(
        name="Latency",
        map_func=lambda row: row.execution_stats.latency.short,
        alignment=Alignment.RIGHT,
    ),
)


def default_render_def(with_stats: bool) -> TableRenderDef:
    """ID and Operator, plus Rows, Exec. and Latency when `with_stats`."""
    columns = [ID_COLUMN, OPERATOR_COLUMN]
    if with_stats:
        columns.extend(STATS_COLUMNS)
    return TableRenderDef(columns)


# =============================================================================
# Custom columns
# =============================================================================


def custom_list_to_render_def(custom: list[str]) -> TableRenderDef:
    """
    Build columns from `<name>:<template>[:<alignment>[:<inline_type>]]` strings.

    Raises:
        ConfigurationError: If a definition is malformed.
    """
    columns = []
    for definition in custom:
        parts = definition.split(":", 3)
        if len(parts) < 2:
            raise ConfigurationError(
                f'invalid format: must be "<name>:<template>[:<alignment>[:<inline_type>]]", but: {definition}',
                config_key="custom",
            )

        name, template = parts[0], parts[1]
        alignment = Alignment.parse(parts[2]) if len(parts) >= 3 and parts[2] else Alignment.NONE
        inline = InlineType.parse(parts[3]) if len(parts) == 4 and parts[3] else InlineType.UNSPECIFIED

        columns.append(
            ColumnRenderDef(
                name=name,
                map_func=template_map_func(name, template),
                alignment=alignment,
                inline=inline,
            )
        )
    return TableRenderDef(columns)


class PlainColumnRenderDef(BaseModel):
    """A column definition as written in a custom column file."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    template: str
    alignment: Alignment = Alignment.NONE
    inline: InlineType = InlineType.UNSPECIFIED

    @field_validator("alignment", mode="before")
    @classmethod
    def _parse_alignment(cls, value: Any) -> Any:
        return Alignment.parse(value) if isinstance(value, str) else value

    @field_validator("inline", mode="before")
    @classmethod
    def _parse_inline(cls, value: Any) -> Any:
        return InlineType.parse(value) if isinstance(value, str) and value else value

    def to_column(self) -> ColumnRenderDef:
        return ColumnRenderDef(
            name=self.name,
            map_func=template_map_func(self.name, self.template),
            alignment=self.alignment,
            inline=self.inline,
        )


def custom_file_to_render_def(source: str | Path) -> TableRenderDef:
    """
    Build columns from a YAML list of column definitions.

    Args:
        source: Path of the YAML file, or its text.

    Raises:
        ConfigurationError: If the file cannot be read or holds invalid definitions.
    """
    if isinstance(source, Path):
        try:
            source = source.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"failed to read custom column file: {e}", config_key="custom-file") from e

    try:
        data = yaml.safe_load(source)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid custom column YAML: {e}", config_key="custom-file") from e

    if data is None:
        return TableRenderDef()
    if not isinstance(data, list):
        raise ConfigurationError("custom column file must hold a list of columns", config_key="custom-file")

    try:
        defs = [PlainColumnRenderDef.model_validate(item) for item in data]
    except ValidationError as e:
        raise ConfigurationError(f"invalid custom column definition: {e}", config_key="custom-file") from e
    return TableRenderDef([d.to_column() for d in defs])
