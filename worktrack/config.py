#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""Configuration reader for worktrack.

Settings live in a single JSON file and are read with dot-notation keys.
A missing or unreadable file is not an error: every setting has a default.
"""
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from worktrack.models import DEFAULT_DATETIME_FORMAT, DEFAULT_VALUE_SEPARATOR
from worktrack.parsing import split_datetime_format
from worktrack.paths import PathResolver

DEFAULT_DEBUG_LEVEL = 1


def get_settings_path() -> Path:
    """Get path to the worktrack settings.json.

    Returns:
        Path to settings.json, respecting WORKTRACK_SETTINGS env var.
    """
    custom = os.environ.get("WORKTRACK_SETTINGS")
    if custom:
        return Path(custom)
    return PathResolver.config_dir() / "settings.json"


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value by dot-notation key.

    Args:
        key: Dot-notation key like "worktrack.valueSeparator"
        default: Default value if key not found

    Returns:
        Setting value or default
    """
    settings_path = get_settings_path()

    if not settings_path.exists():
        return default

    try:
        with open(settings_path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError):
        return default

    # Navigate dot-notation path
    parts = key.split(".")
    current = data
    for part in parts:
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]

    return current


def get_int_setting(key: str, default: int = 0) -> int:
    """Get an integer setting.

    Args:
        key: Dot-notation key
        default: Default value if key not found or invalid

    Returns:
        Integer value or default if conversion fails.
    """
    value = get_setting(key, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class TrackerConfig:
    """Resolved settings for one tracker run."""

    database_dir: Path
    value_separator: str = DEFAULT_VALUE_SEPARATOR
    datetime_format: str = DEFAULT_DATETIME_FORMAT


def _resolve_separator() -> str:
    value = get_setting("worktrack.valueSeparator", DEFAULT_VALUE_SEPARATOR)
    if isinstance(value, str) and len(value) == 1 and not value.isspace():
        return value
    return DEFAULT_VALUE_SEPARATOR


def _resolve_datetime_format() -> str:
    value = get_setting("worktrack.dateFormat", DEFAULT_DATETIME_FORMAT)
    if not isinstance(value, str):
        return DEFAULT_DATETIME_FORMAT
    try:
        split_datetime_format(value)
    except ValueError:
        return DEFAULT_DATETIME_FORMAT
    return value


def _resolve_database_dir() -> Path:
    if os.environ.get("WORKTRACK_DATA"):
        return PathResolver.database_dir()
    configured = get_setting("worktrack.databaseDir")
    if isinstance(configured, str) and configured:
        return Path(configured).expanduser()
    return PathResolver.database_dir()


def load_config() -> TrackerConfig:
    """Build a TrackerConfig from env vars, settings.json and defaults."""
    return TrackerConfig(
        database_dir=_resolve_database_dir(),
        value_separator=_resolve_separator(),
        datetime_format=_resolve_datetime_format(),
    )
