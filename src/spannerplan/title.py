"""
Single-line operator titles for plan nodes.

A title condenses a node's display name and metadata into one line:

    Index Scan on AlbumsByAlbumTitle <Row> (Full scan, scan_method: Automatic)
    ^operator                        ^method ^labels   ^fields

The formats below control how much of the raw metadata is folded into the
operator part versus listed verbatim in the trailing parentheses.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from spannerplan.exceptions import FormatParseError
from spannerplan.parser.models import MetadataValue, PlanNode

InlineStatsFunc = Callable[[PlanNode], list[str]]

KNOWN_BOOLEAN_FLAG_KEYS = ("Full scan", "split_ranges_aligned")
TARGET_METADATA_KEYS = ("scan_target", "distribution_table", "table")


class _ParsableFormat(str, Enum):
    """Enum parsed case-insensitively from its name."""

    @classmethod
    def parse(cls, value: str) -> "_ParsableFormat":
        try:
            return cls(value.upper())
        except ValueError as e:
            raise FormatParseError(
                cls.__name__,
                value,
                [member.value for member in cls],
            ) from e


class ExecutionMethodFormat(_ParsableFormat):
    """How to render the execution_method metadata."""

    # As a plain `execution_method: Row` field
    RAW = "RAW"
    # After the operator in angle brackets, like `Scan <Row>`
    ANGLE = "ANGLE"


class TargetMetadataFormat(_ParsableFormat):
    """How to render scan_target, distribution_table and table metadata."""

    RAW = "RAW"
    # Folded into the operator as `on <target>`
    ON = "ON"


class KnownFlagFormat(_ParsableFormat):
    """How to render known boolean flags such as `Full scan`."""

    RAW = "RAW"
    # Bare label when true, omitted when false
    LABEL = "LABEL"


class TitleOptions(BaseModel):
    """
    Formatting options for node_title().

    Attributes:
        execution_method_format: Rendering of execution_method.
        target_metadata_format: Rendering of scan/table targets.
        known_flag_format: Rendering of known boolean flags.
        compact: Drop separating spaces.
        hide_metadata: Drop all labels and fields, keeping inline stats.
        inline_stats_func: Returns extra labels (e.g. `Rows=33`) per node.
    """

    model_config = ConfigDict(frozen=True)

    execution_method_format: ExecutionMethodFormat = ExecutionMethodFormat.RAW
    target_metadata_format: TargetMetadataFormat = TargetMetadataFormat.RAW
    known_flag_format: KnownFlagFormat = KnownFlagFormat.RAW
    compact: bool = False
    hide_metadata: bool = False
    inline_stats_func: InlineStatsFunc | None = Field(default=None, exclude=True)

    @property
    def separator(self) -> str:
        return "" if self.compact else " "


def metadata_text(value: MetadataValue) -> str:
    """Render a metadata value as it appears in titles."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, int):
        return str(value)
    return value


def _string_value(value: MetadataValue) -> str:
    return value if isinstance(value, str) else ""


def _is_true(value: MetadataValue) -> bool:
    return value is True or value == "true"


def node_title(node: PlanNode, options: TitleOptions | None = None) -> str:
    """
    Build the single-line title of a plan node.

    Args:
        node: The plan node.
        options: Formatting options; defaults render all metadata raw.

    Returns:
        The title, e.g. `Distributed Union on Songs <Row> (split_ranges_aligned: false)`.
    """
    o = options or TitleOptions()
    sep = o.separator
    metadata = node.metadata

    execution_method = _string_value(metadata.get("execution_method"))
    scan_type = _string_value(metadata.get("scan_type")).removesuffix("Scan")

    target = ""
    for key in TARGET_METADATA_KEYS:
        target = _string_value(metadata.get(key))
        if target:
            break

    operator = _join_non_empty(
        " ",
        _string_value(metadata.get("call_type")),
        _string_value(metadata.get("iterator_type")),
        scan_type,
        node.display_name,
        f"on {target}" if o.target_metadata_format == TargetMetadataFormat.ON and target else "",
    )

    execution_method_part = ""
    if o.execution_method_format == ExecutionMethodFormat.ANGLE and execution_method:
        execution_method_part = f"<{execution_method}>"

    labels: list[str] = []
    fields: list[str] = []
    if not o.hide_metadata:
        labels, fields = _labels_and_fields(metadata, o, scan_type)

    inline_stats = o.inline_stats_func(node) if o.inline_stats_func is not None else []

    details = f",{sep}".join([*sorted(labels), *sorted(fields), *inline_stats])

    return _join_non_empty(sep, operator, execution_method_part, _enclose_non_empty("(", details, ")"))


def _labels_and_fields(
    metadata: dict[str, MetadataValue],
    o: TitleOptions,
    scan_type: str,
) -> tuple[list[str], list[str]]:
    """Split the metadata not folded into the operator into labels and fields."""
    sep = o.separator
    target_raw = o.target_metadata_format == TargetMetadataFormat.RAW

    labels: list[str] = []
    fields: list[str] = []
    for key, value in metadata.items():
        if key in ("call_type", "iterator_type", "scan_type", "subquery_cluster_node"):
            continue
        if key in TARGET_METADATA_KEYS and not target_raw:
            continue
        if key == "execution_method" and o.execution_method_format != ExecutionMethodFormat.RAW:
            continue

        if key == "scan_target":
            fields.append(f"{scan_type}: {metadata_text(value)}")
            continue

        if o.known_flag_format != KnownFlagFormat.RAW and key in KNOWN_BOOLEAN_FLAG_KEYS:
            if _is_true(value):
                labels.append(key)
            continue

        fields.append(f"{key}:{sep}{metadata_text(value)}")
    return labels, fields


def _enclose_non_empty(open_: str, text: str, close: str) -> str:
    return f"{open_}{text}{close}" if text else ""


def _join_non_empty(sep: str, *parts: str) -> str:
    return sep.join(part for part in parts if part)
