"""
LessWatch Configuration Module.

Process settings come from the environment via Pydantic Settings.
Per-run watch configuration is an immutable model built once at startup
from in-code defaults, an optional JSON config file and CLI overrides.
Requires Python 3.11+.
"""

import json
import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.exceptions import MissingArgumentsError, StartupConfigError

# Load .env file into os.environ at module import time
# This ensures nested BaseSettings classes can read the values
_env_file = Path(__file__).parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    load_dotenv()


DEFAULT_CONFIG_FILE = "less-watch-compiler.config.json"


class CompilerSettings(BaseSettings):
    """External lessc compiler settings."""

    model_config = SettingsConfigDict(env_prefix="LESSC_")

    executable: str = Field(default="lessc", description="lessc executable name or path")
    timeout_seconds: float = Field(default=60.0, ge=1.0, description="Compile timeout per file")


class WatcherSettings(BaseSettings):
    """File watcher configuration settings."""

    model_config = SettingsConfigDict(env_prefix="WATCHER_")

    debounce_delay_ms: int = Field(default=200, ge=10, le=5000)
    use_polling: bool = Field(default=False, description="Use the polling observer")


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="console")  # "json" or "console"


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="LessWatch")
    app_version: str = Field(default="0.1.0")

    compiler: CompilerSettings = Field(default_factory=CompilerSettings)
    watcher: WatcherSettings = Field(default_factory=WatcherSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns singleton instance of Settings for performance.
    """
    return Settings()


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class CompileOptions(BaseModel):
    """Options bundle handed unmodified to the compile adapter."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    enable_js: bool = False
    source_map: bool = False
    plugins: tuple[str, ...] = ()
    less_args: dict[str, str] = Field(default_factory=dict)

    @field_validator("plugins", mode="before")
    @classmethod
    def parse_plugins(cls, v: Any) -> Any:
        """Parse plugins from comma-separated string or list."""
        if v is None:
            return ()
        if isinstance(v, str):
            return tuple(_split_csv(v))
        return v

    @field_validator("less_args", mode="before")
    @classmethod
    def parse_less_args(cls, v: Any) -> Any:
        """Parse 'key=value,key2=value2' strings into a mapping."""
        if v is None:
            return {}
        if isinstance(v, str):
            args: dict[str, str] = {}
            for item in _split_csv(v):
                key, sep, value = item.partition("=")
                if not key.strip():
                    raise ValueError(f"invalid less argument: {item!r}")
                args[key.strip()] = value.strip() if sep else ""
            return args
        return v


_COMPILE_OPTION_KEYS = {
    "enableJs": "enable_js",
    "sourceMap": "source_map",
    "plugins": "plugins",
    "lessArgs": "less_args",
}


class WatchConfig(BaseModel):
    """
    Immutable configuration for a single watch run.

    Constructed once at startup and passed explicitly to every component.
    Keys use the camelCase names of the JSON config file; snake_case
    field names are accepted as well.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    watch_folder: Path
    output_folder: Path
    main_file: str | None = None
    run_once: bool = False
    include_hidden: bool = False
    allowed_extensions: tuple[str, ...] = (".less",)
    compile_options: CompileOptions = Field(default_factory=CompileOptions)

    @model_validator(mode="before")
    @classmethod
    def lift_compile_options(cls, data: Any) -> Any:
        """Collect flat compiler keys (enableJs, sourceMap, ...) into compile_options."""
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        nested = dict(data.pop("compileOptions", None) or data.pop("compile_options", None) or {})
        for camel, snake in _COMPILE_OPTION_KEYS.items():
            for key in (camel, snake):
                if key in data:
                    nested[snake] = data.pop(key)
        data["compile_options"] = nested
        return data

    @field_validator("watch_folder", "output_folder", mode="after")
    @classmethod
    def make_absolute(cls, v: Path) -> Path:
        """Resolve folders to absolute canonical paths."""
        return Path(os.path.abspath(v))

    @field_validator("main_file", mode="before")
    @classmethod
    def empty_main_file(cls, v: Any) -> Any:
        """Treat an empty main file as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("allowed_extensions", mode="before")
    @classmethod
    def parse_extensions(cls, v: Any) -> Any:
        """Accept a comma-separated string and ensure each extension has a dot."""
        if isinstance(v, str):
            v = _split_csv(v)
        return tuple(ext if ext.startswith(".") else f".{ext}" for ext in v)

    @property
    def main_file_path(self) -> Path | None:
        """Absolute path of the main file, if single-main mode is on."""
        if self.main_file is None:
            return None
        return Path(os.path.normpath(self.watch_folder / self.main_file))

    @property
    def default_extension(self) -> str:
        """Extension appended to import references that omit one."""
        return self.allowed_extensions[0] if self.allowed_extensions else ".less"


DEFAULT_WATCH_CONFIG: dict[str, Any] = {
    "watchFolder": None,
    "outputFolder": None,
    "mainFile": None,
    "runOnce": False,
    "includeHidden": False,
    "allowedExtensions": [".less"],
    "enableJs": False,
    "sourceMap": False,
    "plugins": [],
    "lessArgs": {},
}


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """
    Recursively merge two mappings.

    Values from ``override`` win; nested mappings are merged key by key
    instead of being replaced. Neither input is modified.
    """
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config_file(path: Path) -> dict[str, Any]:
    """
    Load a JSON configuration file.

    Args:
        path: Path to the config file

    Returns:
        Parsed configuration, or an empty dict if the file does not exist

    Raises:
        StartupConfigError: If the file cannot be read or is not a JSON object
    """
    if not path.exists():
        return {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise StartupConfigError(f"Could not load config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise StartupConfigError(f"Config file {path} must contain a JSON object")
    return data


def build_watch_config(
    file_values: Mapping[str, Any] | None = None,
    cli_values: Mapping[str, Any] | None = None,
) -> WatchConfig:
    """
    Build the run configuration with defaults <- file <- CLI precedence.

    CLI values set to None are treated as "not given" and do not override.

    Raises:
        MissingArgumentsError: If the watch or output folder is missing
        StartupConfigError: If a value is invalid
    """
    merged = deep_merge(DEFAULT_WATCH_CONFIG, file_values or {})
    overrides = {k: v for k, v in (cli_values or {}).items() if v is not None}
    merged = deep_merge(merged, overrides)

    if not merged.get("watchFolder") or not merged.get("outputFolder"):
        raise MissingArgumentsError("Missing arguments: both a watch folder and an output folder are required")

    try:
        return WatchConfig.model_validate(merged)
    except ValidationError as e:
        raise StartupConfigError(f"Invalid configuration: {e}") from e
