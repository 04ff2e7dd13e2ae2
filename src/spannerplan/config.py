"""
Render configuration for spannerplan.

A RenderConfig is an immutable value passed into every render call; there
are no module-level defaults to mutate. Values can come from:
- Code: RenderConfig(compact=True, wrap_width=80)
- Environment variables: load_config_from_env()
- A YAML or JSON file: load_config_from_file(path)

Usage:
    from spannerplan.config import RenderConfig, load_config_from_env

    config = load_config_from_env(
        RenderConfig(execution_method_format=ExecutionMethodFormat.ANGLE)
    )
    rows = process_plan(QueryPlan(nodes), config)

Environment variables:
- SPANNERPLAN_EXECUTION_METHOD=angle|raw
- SPANNERPLAN_TARGET_METADATA=on|raw
- SPANNERPLAN_KNOWN_FLAG=label|raw
- SPANNERPLAN_COMPACT=true
- SPANNERPLAN_WRAP_WIDTH=80
- SPANNERPLAN_DISALLOW_UNKNOWN_STATS=true
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from spannerplan.exceptions import ConfigurationError
from spannerplan.title import (
    ExecutionMethodFormat,
    InlineStatsFunc,
    KnownFlagFormat,
    TargetMetadataFormat,
    TitleOptions,
)
from spannerplan.treeprint import COMPACT_STYLE, DEFAULT_STYLE, TreeStyle

logger = logging.getLogger(__name__)

ENV_PREFIX = "SPANNERPLAN_"


class RenderConfig(BaseModel):
    """
    Options of one render call.

    Attributes:
        execution_method_format: Rendering of execution_method metadata.
        target_metadata_format: Rendering of scan/table targets.
        known_flag_format: Rendering of known boolean flags.
        compact: Drop separating spaces and use the compact tree style.
        hide_metadata: Drop metadata labels and fields from titles.
        wrap_width: Wrap operator text at this many cells (0 = no wrap).
        disallow_unknown_stats: Fail on stats fields ExecutionStats lacks.
        inline_stats_func: Extra title labels per node.
        style: Tree glyphs; derived from `compact` when unset.
    """

    model_config = ConfigDict(frozen=True)

    execution_method_format: ExecutionMethodFormat = Field(
        default=ExecutionMethodFormat.RAW,
        description="RAW or ANGLE",
    )
    target_metadata_format: TargetMetadataFormat = Field(
        default=TargetMetadataFormat.RAW,
        description="RAW or ON",
    )
    known_flag_format: KnownFlagFormat = Field(
        default=KnownFlagFormat.RAW,
        description="RAW or LABEL",
    )
    compact: bool = Field(default=False, description="Compact titles and tree")
    hide_metadata: bool = Field(default=False, description="Hide metadata in titles")
    wrap_width: int = Field(default=0, ge=0, description="Operator wrap width, 0 disables")
    disallow_unknown_stats: bool = Field(
        default=False,
        description="Error on unknown execution stats fields",
    )
    inline_stats_func: InlineStatsFunc | None = Field(default=None, exclude=True)
    style: TreeStyle | None = Field(default=None, description="Tree glyph override")

    @property
    def tree_style(self) -> TreeStyle:
        if self.style is not None:
            return self.style
        return COMPACT_STYLE if self.compact else DEFAULT_STYLE

    def title_options(self) -> TitleOptions:
        return TitleOptions(
            execution_method_format=self.execution_method_format,
            target_metadata_format=self.target_metadata_format,
            known_flag_format=self.known_flag_format,
            compact=self.compact,
            hide_metadata=self.hide_metadata,
            inline_stats_func=self.inline_stats_func,
        )

    def with_inline_stats(self, func: InlineStatsFunc | None) -> RenderConfig:
        return self.model_copy(update={"inline_stats_func": func})


def _parse_env_bool(value: str | None, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_env_int(value: str | None, default: int) -> int:
    """Parse integer from environment variable."""
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Could not parse integer %r, using %d", value, default)
        return default


def load_config_from_env(
    base: RenderConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> RenderConfig:
    """
    Overlay SPANNERPLAN_* environment variables on `base`.

    Raises:
        FormatParseError: If a format variable holds an unknown value.
    """
    base = base or RenderConfig()
    env = os.environ if environ is None else environ

    updates: dict[str, Any] = {}

    if (value := env.get(f"{ENV_PREFIX}EXECUTION_METHOD")) is not None:
        updates["execution_method_format"] = ExecutionMethodFormat.parse(value)
    if (value := env.get(f"{ENV_PREFIX}TARGET_METADATA")) is not None:
        updates["target_metadata_format"] = TargetMetadataFormat.parse(value)
    if (value := env.get(f"{ENV_PREFIX}KNOWN_FLAG")) is not None:
        updates["known_flag_format"] = KnownFlagFormat.parse(value)

    updates["compact"] = _parse_env_bool(env.get(f"{ENV_PREFIX}COMPACT"), base.compact)
    updates["wrap_width"] = max(
        _parse_env_int(env.get(f"{ENV_PREFIX}WRAP_WIDTH"), base.wrap_width), 0
    )
    updates["disallow_unknown_stats"] = _parse_env_bool(
        env.get(f"{ENV_PREFIX}DISALLOW_UNKNOWN_STATS"), base.disallow_unknown_stats
    )

    return base.model_copy(update=updates)


def load_config_from_file(path: Path, base: RenderConfig | None = None) -> RenderConfig:
    """
    Load configuration from a JSON or YAML file, overlaid on `base`.

    Format values are parsed case-insensitively like their CLI flags.
    """
    base = base or RenderConfig()

    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}", config_key=str(path))

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to load config from {path}: {e}") from e

    if data is None:
        return base
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must hold a mapping: {path}")

    data = dict(data)
    for key, enum_cls in (
        ("execution_method_format", ExecutionMethodFormat),
        ("target_metadata_format", TargetMetadataFormat),
        ("known_flag_format", KnownFlagFormat),
    ):
        if isinstance(data.get(key), str):
            data[key] = enum_cls.parse(data[key])

    try:
        return RenderConfig.model_validate(
            {**base.model_dump(exclude={"style"}), "style": base.style, **data}
        ).with_inline_stats(base.inline_stats_func)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config in {path}: {e}") from e
