"""Configuration loading utilities for the match tracker."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Mapping, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:  # tomli is a declared dependency below 3.11
    import tomli as tomllib

DATA_DIR_ENV = "OW_TRACKER_DATA_DIR"


class ConfigError(Exception):
    """Raised when configuration loading fails."""


def _load_toml_bytes(data: bytes) -> Mapping[str, Any]:
    return tomllib.loads(data.decode("utf-8"))


def load_tracker_config(path: Path) -> Mapping[str, Any]:
    """Load tracker settings from the ``[tracker]`` table of a TOML file."""
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ConfigError(f"Failed to read config file: {path}") from exc

    try:
        raw = dict(_load_toml_bytes(data))
    except Exception as exc:
        raise ConfigError(f"Failed to parse TOML config: {path}") from exc

    tracker = raw.get("tracker", {})
    if tracker is None:
        tracker = {}
    if not isinstance(tracker, Mapping):
        raise ConfigError("[tracker] must be a table when present.")

    data_dir: Optional[str]
    data_dir_value = tracker.get("data_dir")
    if data_dir_value is None:
        data_dir = None
    elif isinstance(data_dir_value, str) and data_dir_value:
        data_dir = data_dir_value
    else:
        raise ConfigError("tracker.data_dir must be a non-empty string when present.")

    export_format = tracker.get("export_format")
    if export_format is not None and export_format not in ("parquet", "json", "csv"):
        raise ConfigError("tracker.export_format must be one of: parquet, json, csv.")

    return {
        "raw": raw,
        "data_dir": data_dir,
        "export_format": export_format,
    }


def resolve_data_dir(
    cli_value: Optional[Path], config: Optional[Mapping[str, Any]]
) -> Path:
    """Pick the store directory: CLI flag, config file, environment, then cwd."""

    if cli_value is not None:
        return cli_value
    if config is not None and config.get("data_dir"):
        return Path(config["data_dir"]).expanduser()
    env_value = os.environ.get(DATA_DIR_ENV)
    if env_value:
        return Path(env_value).expanduser()
    return Path.cwd()
