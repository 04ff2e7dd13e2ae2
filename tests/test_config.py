"""Tests for render configuration loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from spannerplan.config import RenderConfig, load_config_from_env, load_config_from_file
from spannerplan.exceptions import ConfigurationError, FormatParseError
from spannerplan.title import ExecutionMethodFormat, KnownFlagFormat, TargetMetadataFormat
from spannerplan.treeprint import COMPACT_STYLE, DEFAULT_STYLE, TreeStyle


class TestRenderConfig:
    """Test the config value object."""

    def test_defaults(self) -> None:
        config = RenderConfig()

        assert config.execution_method_format == ExecutionMethodFormat.RAW
        assert config.wrap_width == 0
        assert config.tree_style == DEFAULT_STYLE

    def test_compact_selects_compact_style(self) -> None:
        assert RenderConfig(compact=True).tree_style == COMPACT_STYLE

    def test_style_override(self) -> None:
        style = TreeStyle(mid="|-", end="`-")
        assert RenderConfig(compact=True, style=style).tree_style == style

    def test_frozen(self) -> None:
        config = RenderConfig()
        with pytest.raises(ValidationError):
            config.compact = True

    def test_negative_wrap_width_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RenderConfig(wrap_width=-1)

    def test_title_options(self) -> None:
        def func(node: object) -> list[str]:
            return ["Rows=1"]

        config = RenderConfig(
            execution_method_format=ExecutionMethodFormat.ANGLE,
            compact=True,
        ).with_inline_stats(func)
        options = config.title_options()

        assert options.execution_method_format == ExecutionMethodFormat.ANGLE
        assert options.compact
        assert options.inline_stats_func is func
        assert options.separator == ""


class TestLoadFromEnv:
    """Test SPANNERPLAN_* environment variables."""

    def test_empty_environment_keeps_base(self) -> None:
        base = RenderConfig(known_flag_format=KnownFlagFormat.LABEL, wrap_width=30)
        assert load_config_from_env(base, environ={}) == base

    def test_all_variables(self) -> None:
        config = load_config_from_env(
            environ={
                "SPANNERPLAN_EXECUTION_METHOD": "angle",
                "SPANNERPLAN_TARGET_METADATA": "ON",
                "SPANNERPLAN_KNOWN_FLAG": "label",
                "SPANNERPLAN_COMPACT": "true",
                "SPANNERPLAN_WRAP_WIDTH": "80",
                "SPANNERPLAN_DISALLOW_UNKNOWN_STATS": "1",
            }
        )

        assert config.execution_method_format == ExecutionMethodFormat.ANGLE
        assert config.target_metadata_format == TargetMetadataFormat.ON
        assert config.known_flag_format == KnownFlagFormat.LABEL
        assert config.compact
        assert config.wrap_width == 80
        assert config.disallow_unknown_stats

    def test_invalid_format_raises(self) -> None:
        with pytest.raises(FormatParseError):
            load_config_from_env(environ={"SPANNERPLAN_EXECUTION_METHOD": "curly"})

    def test_invalid_wrap_width_falls_back(self, caplog: pytest.LogCaptureFixture) -> None:
        config = load_config_from_env(RenderConfig(wrap_width=10), environ={"SPANNERPLAN_WRAP_WIDTH": "wide"})

        assert config.wrap_width == 10
        assert "Could not parse integer" in caplog.text

    def test_negative_wrap_width_clamped(self) -> None:
        config = load_config_from_env(environ={"SPANNERPLAN_WRAP_WIDTH": "-5"})
        assert config.wrap_width == 0

    def test_reads_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPANNERPLAN_COMPACT", "yes")
        assert load_config_from_env().compact


class TestLoadFromFile:
    """Test YAML and JSON config files."""

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "render.yaml"
        path.write_text("execution_method_format: angle\ncompact: true\nwrap_width: 60\n")

        config = load_config_from_file(path)

        assert config.execution_method_format == ExecutionMethodFormat.ANGLE
        assert config.compact
        assert config.wrap_width == 60

    def test_json_file_overlays_base(self, tmp_path: Path) -> None:
        path = tmp_path / "render.json"
        path.write_text(json.dumps({"known_flag_format": "RAW"}))
        base = RenderConfig(known_flag_format=KnownFlagFormat.LABEL, hide_metadata=True)

        config = load_config_from_file(path, base)

        assert config.known_flag_format == KnownFlagFormat.RAW
        assert config.hide_metadata

    def test_empty_file_returns_base(self, tmp_path: Path) -> None:
        path = tmp_path / "render.yaml"
        path.write_text("")
        assert load_config_from_file(path) == RenderConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_config_from_file(tmp_path / "missing.yaml")

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = tmp_path / "render.yaml"
        path.write_text("wrap_width: -3\n")

        with pytest.raises(ConfigurationError, match="Invalid config"):
            load_config_from_file(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "render.yaml"
        path.write_text("- compact\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config_from_file(path)
