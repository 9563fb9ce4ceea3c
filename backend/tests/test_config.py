"""
Tests for Configuration Loading.

Requires Python 3.11+.
"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from utils.config import (
    CompileOptions,
    WatchConfig,
    build_watch_config,
    deep_merge,
    load_config_file,
)
from utils.exceptions import MissingArgumentsError, StartupConfigError


class TestDeepMerge:
    """Test cases for deep_merge."""

    def test_override_wins(self):
        """Test scalar values from the override replace the base."""
        assert deep_merge({"a": 1, "b": 2}, {"b": 3}) == {"a": 1, "b": 3}

    def test_nested_mappings_merge(self):
        """Test nested mappings are merged key by key."""
        base = {"lessArgs": {"math": "always", "strict-units": "off"}}
        override = {"lessArgs": {"strict-units": "on"}}

        assert deep_merge(base, override) == {"lessArgs": {"math": "always", "strict-units": "on"}}

    def test_inputs_untouched(self):
        """Test neither input is modified."""
        base = {"a": {"b": 1}}
        deep_merge(base, {"a": {"c": 2}})

        assert base == {"a": {"b": 1}}


class TestLoadConfigFile:
    """Test cases for load_config_file."""

    def test_missing_file(self, tmp_path: Path):
        """Test a missing config file means no values."""
        assert load_config_file(tmp_path / "absent.json") == {}

    def test_valid_file(self, tmp_path: Path):
        """Test JSON objects are returned as dicts."""
        path = tmp_path / "less-watch-compiler.config.json"
        path.write_text(json.dumps({"watchFolder": "less", "sourceMap": True}))

        assert load_config_file(path) == {"watchFolder": "less", "sourceMap": True}

    def test_malformed_file(self, tmp_path: Path):
        """Test malformed JSON is a startup error."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        with pytest.raises(StartupConfigError):
            load_config_file(path)

    def test_non_object(self, tmp_path: Path):
        """Test a JSON list is rejected."""
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")

        with pytest.raises(StartupConfigError):
            load_config_file(path)


class TestBuildWatchConfig:
    """Test cases for build_watch_config."""

    def test_missing_folders(self):
        """Test missing watch or output folder is reported."""
        with pytest.raises(MissingArgumentsError):
            build_watch_config({}, {"watchFolder": "less"})
        with pytest.raises(MissingArgumentsError):
            build_watch_config({"outputFolder": "css"}, {})

    def test_precedence(self, tmp_path: Path):
        """Test defaults <- file <- CLI, with None CLI values ignored."""
        file_values = {
            "watchFolder": str(tmp_path / "from-file"),
            "outputFolder": str(tmp_path / "css"),
            "mainFile": "file-main.less",
            "sourceMap": True,
        }
        cli_values = {
            "watchFolder": str(tmp_path / "from-cli"),
            "mainFile": None,
            "runOnce": True,
        }

        config = build_watch_config(file_values, cli_values)

        assert config.watch_folder == tmp_path / "from-cli"
        assert config.output_folder == tmp_path / "css"
        assert config.main_file == "file-main.less"
        assert config.run_once is True
        assert config.compile_options.source_map is True
        assert config.compile_options.enable_js is False
        assert config.include_hidden is False

    def test_relative_folders_become_absolute(self, tmp_path: Path, monkeypatch):
        """Test folders are resolved against the working directory."""
        monkeypatch.chdir(tmp_path)

        config = build_watch_config({}, {"watchFolder": "less", "outputFolder": "./css/../css"})

        assert config.watch_folder == tmp_path / "less"
        assert config.output_folder == tmp_path / "css"

    def test_compile_option_strings(self, tmp_path: Path):
        """Test CLI-style option strings are parsed."""
        config = build_watch_config(
            {"lessArgs": {"math": "always"}},
            {
                "watchFolder": str(tmp_path),
                "outputFolder": str(tmp_path / "css"),
                "plugins": "clean-css, autoprefix",
                "lessArgs": "strict-units=on",
            },
        )

        assert config.compile_options.plugins == ("clean-css", "autoprefix")
        assert config.compile_options.less_args == {"strict-units": "on"}

    def test_invalid_value(self, tmp_path: Path):
        """Test invalid values are startup errors."""
        with pytest.raises(StartupConfigError):
            build_watch_config({"runOnce": "maybe"}, {"watchFolder": str(tmp_path), "outputFolder": str(tmp_path)})


class TestWatchConfig:
    """Test cases for the WatchConfig model."""

    def test_main_file_path(self, tmp_path: Path):
        """Test the main file resolves under the watch folder."""
        config = WatchConfig(watch_folder=tmp_path, output_folder=tmp_path / "css", main_file="sub/../main.less")

        assert config.main_file_path == tmp_path / "main.less"

    def test_empty_main_file_is_unset(self, tmp_path: Path):
        """Test an empty main file disables main mode."""
        config = WatchConfig(watch_folder=tmp_path, output_folder=tmp_path, main_file="  ")

        assert config.main_file is None
        assert config.main_file_path is None

    def test_camel_case_keys(self, tmp_path: Path):
        """Test config file key names are accepted."""
        config = WatchConfig.model_validate(
            {
                "watchFolder": str(tmp_path),
                "outputFolder": str(tmp_path / "css"),
                "includeHidden": True,
                "allowedExtensions": "less,lessx",
                "enableJs": True,
            }
        )

        assert config.include_hidden is True
        assert config.allowed_extensions == (".less", ".lessx")
        assert config.default_extension == ".less"
        assert config.compile_options == CompileOptions(enable_js=True)

    def test_frozen(self, tmp_path: Path):
        """Test the configuration cannot be changed after construction."""
        config = WatchConfig(watch_folder=tmp_path, output_folder=tmp_path)

        with pytest.raises(ValidationError):
            config.run_once = True
