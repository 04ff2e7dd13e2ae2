"""
Loader for Cloud Spanner query plans in YAML or JSON form.

This module handles:
- Loading plans from files, strings, bytes, or already-parsed data
- Recognizing the wrapper shapes Spanner tools emit (ResultSet,
  ResultSetStats, QueryPlan, bare node list)
- Converting to typed Pydantic models
- Enforcing resource limits to prevent OOM crashes

JSON is parsed by the YAML loader as well, so a single code path covers
`gcloud spanner databases execute-sql --format=yaml` output and the JSON
returned by the client libraries.

Error handling philosophy: Fail fast with clear messages. If we can't load
the input, tell the user exactly what's wrong rather than returning garbage.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from spannerplan.exceptions import ParseError
from spannerplan.parser.config import DEFAULT_CONFIG, ParserConfig
from spannerplan.parser.models import ResultSetStats

PlanSource = str | bytes | Path | dict[str, Any] | list[Any]

_QUERY_PLAN_KEYS = ("queryPlan", "query_plan")
_PLAN_NODES_KEYS = ("planNodes", "plan_nodes")


def parse_plan(
    source: PlanSource,
    config: ParserConfig | None = None,
) -> ResultSetStats:
    """
    Load a Spanner query plan into typed models.

    Accepts multiple input formats for convenience:
    - Path: Reads and parses the file
    - str: YAML/JSON text, or the path of an existing file
    - bytes: UTF-8 encoded YAML/JSON text
    - dict/list: Already-decoded data

    Args:
        source: Plan in any of the supported formats
        config: Parser configuration with resource limits. If None,
            uses DEFAULT_CONFIG.

    Returns:
        ResultSetStats: Validated query plan and optional query stats

    Raises:
        ParseError: If input cannot be loaded, validated, or exceeds limits

    Example:
        >>> stats = parse_plan(Path("plan.yaml"))
        >>> stats = parse_plan('{"queryPlan": {"planNodes": [...]}}')
        >>> for node in stats.plan_nodes:
        ...     print(node.display_name)
    """
    config = config or DEFAULT_CONFIG

    data = _load_source(source, config)
    data = _unwrap_query_plan(data)

    stats = _validate_plan(data)

    _check_node_count(stats, config)

    return stats


def parse_plan_file(path: str | Path, config: ParserConfig | None = None) -> ResultSetStats:
    """
    Load a query plan from a file.

    Convenience wrapper around parse_plan() for file inputs.
    Provides better error messages for file-specific issues.
    """
    filepath = Path(path)

    if not filepath.exists():
        raise ParseError(f"File not found: {filepath}", source="file_read")

    if not filepath.is_file():
        raise ParseError(f"Path is not a file: {filepath}", source="file_read")

    return parse_plan(filepath, config)


def _load_source(source: PlanSource, config: ParserConfig) -> Any:
    """
    Load source into Python data.

    Handles file paths, YAML/JSON text, and already-parsed data. Bytes are
    always content, never a path.
    """
    if isinstance(source, (dict, list)):
        return source

    if isinstance(source, Path):
        return _load_file(source, config)

    if isinstance(source, bytes):
        _check_input_size(len(source), config)
        try:
            text = source.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(
                "Input is not valid UTF-8",
                detail=str(e),
                source="yaml_decode",
            ) from e
        return _parse_text(text)

    if isinstance(source, str):
        if _names_file(source):
            return _load_file(Path(source), config)
        _check_input_size(len(source.encode("utf-8")), config)
        return _parse_text(source)

    raise ParseError(
        f"Unsupported source type: {type(source).__name__}",
        detail="Expected file path, YAML/JSON text, dict, or list",
        source="type_check",
    )


def _names_file(text: str) -> bool:
    """Whether single-line text is the path of an existing file."""
    if "\n" in text or not text.strip():
        return False
    try:
        return Path(text).is_file()
    except (OSError, ValueError):
        # Too long for a file name, or holds a NUL byte
        return False


def _check_input_size(size: int, config: ParserConfig) -> None:
    if size > config.max_input_bytes:
        raise ParseError(
            f"Input too large: {size / (1024 * 1024):.1f}MB (max {config.max_input_size_mb}MB)",
            detail="Use a smaller plan or increase max_input_size_mb in config",
            source="resource_limit",
        )


def _load_file(path: Path, config: ParserConfig) -> Any:
    """Check the file size, then read and parse the file."""
    if not path.exists():
        raise ParseError(f"File not found: {path}", source="file_read")

    _check_input_size(path.stat().st_size, config)

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ParseError(
            f"Cannot read file: {path}",
            detail=str(e),
            source="file_read",
        ) from e

    if not content.strip():
        raise ParseError(f"File is empty: {path}", source="file_read")

    return _parse_text(content)


def _parse_text(content: str) -> Any:
    """Parse YAML (or JSON) text."""
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ParseError(
            "Invalid YAML/JSON format",
            detail=str(e),
            source="yaml_decode",
        ) from e


def _unwrap_query_plan(data: Any) -> dict[str, Any]:
    """
    Normalize the supported wrapper shapes into ResultSetStats form.

    - ResultSet:      {"stats": {"queryPlan": {...}}}
    - ResultSetStats: {"queryPlan": {"planNodes": [...]}}
    - QueryPlan:      {"planNodes": [...]}
    - Node list:      [{...}, {...}]
    """
    if isinstance(data, list):
        return {"queryPlan": {"planNodes": data}}

    if not isinstance(data, dict):
        raise ParseError(
            f"Expected mapping or list, got {type(data).__name__}",
            source="structure",
        )

    stats = data.get("stats")
    if isinstance(stats, dict) and any(key in stats for key in _QUERY_PLAN_KEYS):
        data = stats

    if any(key in data for key in _QUERY_PLAN_KEYS):
        return data

    if any(key in data for key in _PLAN_NODES_KEYS):
        return {"queryPlan": data}

    raise ParseError(
        "Missing 'queryPlan' field - this doesn't look like a Spanner query plan",
        detail="Expected ResultSet, ResultSetStats, QueryPlan, or a list of plan nodes",
        source="structure",
    )


def _validate_plan(data: dict[str, Any]) -> ResultSetStats:
    """
    Validate the data against our Pydantic models.

    Converts Pydantic validation errors into user-friendly ParseErrors.
    """
    try:
        return ResultSetStats.model_validate(data)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = " -> ".join(str(x) for x in error["loc"])
            errors.append(f"  {loc}: {error['msg']}")

        raise ParseError(
            "Query plan validation failed",
            detail="\n".join(errors),
            source="validation",
        ) from e


def _check_node_count(stats: ResultSetStats, config: ParserConfig) -> None:
    """Check total node count after parsing."""
    node_count = len(stats.plan_nodes)
    if node_count > config.max_nodes:
        raise ParseError(
            f"Plan too large: {node_count:,} nodes (max {config.max_nodes:,})",
            detail="Increase max_nodes in config to render this plan",
            source="resource_limit",
        )
