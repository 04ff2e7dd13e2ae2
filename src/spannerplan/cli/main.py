"""
rendertree - Render Cloud Spanner query plans as ASCII trees.

Reads a query plan (ResultSet, ResultSetStats, QueryPlan or a bare list of
plan nodes) in YAML or JSON from FILE or stdin.

Usage:
    gcloud spanner databases execute-sql ... --query-mode=PROFILE --format=yaml | rendertree
    rendertree --mode=PLAN plan.yaml
    rendertree --compact --inline-stats --wrap-width=60 profile.yaml
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape

from spannerplan import __version__
from spannerplan.config import RenderConfig, load_config_from_env
from spannerplan.engine import ExplainMode, render_tree, should_render_with_stats
from spannerplan.exceptions import ParseError, SpannerPlanError
from spannerplan.output import (
    PrintMode,
    TableRenderDef,
    custom_file_to_render_def,
    custom_list_to_render_def,
    default_render_def,
)
from spannerplan.parser import parse_plan
from spannerplan.title import ExecutionMethodFormat, KnownFlagFormat, TargetMetadataFormat

# Length of the input excerpt shown on parse errors
SNIPPET_LEN = 140

app = typer.Typer(
    name="rendertree",
    help="Render Cloud Spanner query plans as ASCII trees",
    add_completion=False,
)

console = Console()
error_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"rendertree version {__version__}")
        raise typer.Exit()


def _fail(message: str) -> NoReturn:
    error_console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(code=1)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _input_snippet(raw: str) -> str:
    text = raw.strip()
    collapsed = "(collapsed)" if len(raw) > SNIPPET_LEN else ""
    return text[:SNIPPET_LEN] + collapsed


def _build_config(
    execution_method: str | None,
    target_metadata: str | None,
    known_flag: str | None,
    compact: bool,
    wrap_width: int | None,
    disallow_unknown_stats: bool,
) -> RenderConfig:
    """CLI defaults, overlaid by SPANNERPLAN_* variables, overlaid by explicit flags."""
    config = load_config_from_env(
        RenderConfig(
            execution_method_format=ExecutionMethodFormat.ANGLE,
            target_metadata_format=TargetMetadataFormat.ON,
            known_flag_format=KnownFlagFormat.LABEL,
        )
    )

    updates: dict[str, object] = {}
    if execution_method:
        updates["execution_method_format"] = ExecutionMethodFormat.parse(execution_method)
    if target_metadata:
        updates["target_metadata_format"] = TargetMetadataFormat.parse(target_metadata)
    if known_flag:
        updates["known_flag_format"] = KnownFlagFormat.parse(known_flag)
    if compact:
        updates["compact"] = True
    if wrap_width is not None:
        updates["wrap_width"] = max(wrap_width, 0)
    if disallow_unknown_stats:
        updates["disallow_unknown_stats"] = True
    return config.model_copy(update=updates)


def _build_render_def(
    custom: list[str],
    custom_file: Path | None,
    plan_nodes: list,
    mode: ExplainMode,
) -> TableRenderDef:
    definitions = [item for value in custom for item in value.split(",")]
    if definitions:
        return custom_list_to_render_def(definitions)
    if custom_file is not None:
        return custom_file_to_render_def(custom_file)
    return default_render_def(should_render_with_stats(plan_nodes, mode))


@app.command()
def rendertree(
    file: Annotated[
        Optional[Path],
        typer.Argument(
            help="Plan file in YAML or JSON. Reads stdin when omitted.",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    mode: Annotated[
        str,
        typer.Option("--mode", help="PROFILE, PLAN or AUTO (case-insensitive)"),
    ] = "AUTO",
    print_mode: Annotated[
        str,
        typer.Option("--print", help="Details after the table: predicates, typed or full"),
    ] = "predicates",
    disallow_unknown_stats: Annotated[
        bool,
        typer.Option("--disallow-unknown-stats", help="Error on unknown stats fields"),
    ] = False,
    execution_method: Annotated[
        Optional[str],
        typer.Option("--execution-method", help="Format execution method metadata: 'angle' or 'raw' (default: angle)"),
    ] = None,
    target_metadata: Annotated[
        Optional[str],
        typer.Option("--target-metadata", help="Format target metadata: 'on' or 'raw' (default: on)"),
    ] = None,
    known_flag: Annotated[
        Optional[str],
        typer.Option("--known-flag", help="Format known flags: 'label' or 'raw' (default: label)"),
    ] = None,
    full_scan: Annotated[
        Optional[str],
        typer.Option("--full-scan", help="Deprecated alias for --known-flag."),
    ] = None,
    compact: Annotated[
        bool,
        typer.Option("--compact", help="Enable compact format"),
    ] = False,
    inline_stats: Annotated[
        bool,
        typer.Option("--inline-stats", help="Render stats columns inside the Operator column"),
    ] = False,
    wrap_width: Annotated[
        Optional[int],
        typer.Option(
            "--wrap-width",
            help="Number of characters at which to wrap the Operator column content. 0 means no wrapping.",
        ),
    ] = None,
    custom: Annotated[
        Optional[list[str]],
        typer.Option("--custom", help="Column as <name>:<template>[:<alignment>[:<inline>]], repeatable, comma separated"),
    ] = None,
    custom_file: Annotated[
        Optional[Path],
        typer.Option("--custom-file", help="YAML file of column definitions", exists=True, dir_okay=False),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log debug output to stderr"),
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    Render a query plan as a table of operators with predicates.

    Examples:

        $ rendertree --mode=PROFILE profile.yaml

        $ rendertree --custom 'ID:{format_id}:RIGHT,Operator:{text}:LEFT,Rows:{execution_stats.rows.total}:RIGHT' < profile.yaml
    """
    _setup_logging(verbose)

    if full_scan:
        if known_flag:
            _fail("--full-scan and --known-flag are mutually exclusive.")
        error_console.print("[yellow]Warning:[/yellow] --full-scan is deprecated. you must migrate to --known-flag.")
        known_flag = full_scan

    try:
        parsed_print_mode = PrintMode.parse(print_mode)
        parsed_mode = ExplainMode.parse(mode)
        config = _build_config(
            execution_method,
            target_metadata,
            known_flag,
            compact,
            wrap_width,
            disallow_unknown_stats,
        )
    except SpannerPlanError as e:
        _fail(e.message)

    raw = file.read_bytes() if file is not None else sys.stdin.buffer.read()

    try:
        stats = parse_plan(raw)
    except ParseError as e:
        text = raw.decode("utf-8", errors="replace")
        _fail(f"invalid input: {e}\ninput: {_input_snippet(text)}")

    try:
        render_def = _build_render_def(custom or [], custom_file, stats.plan_nodes, parsed_mode)
        output = render_tree(
            stats.plan_nodes,
            render_def,
            parsed_print_mode,
            config,
            inline_stats=inline_stats,
        )
    except SpannerPlanError as e:
        _fail(str(e))

    typer.echo(output, nl=False)


if __name__ == "__main__":
    app()
